"""Scan lifecycle: pending/completed scan records gated by a payment gate.

A record is created ``pending`` when the premium policy asks for payment
and promoted to ``completed`` (under a fresh report id) once the gate
confirms. Records that need no payment are promoted immediately. Both maps
are guarded by one lock; a scan id is consumed at most once.
"""

import asyncio
import secrets
import threading
import time
from dataclasses import replace
from datetime import datetime, timezone

from ..errors import PaymentGateError, PaymentIncompleteError, ReportNotFoundError, ScanNotFoundError
from ..payments.gate import PAYMENT_SUCCEEDED, PaymentGate
from ..utils.logging import get_logger
from .file_type import classify_extension
from .types import (
    RISK_HIGH,
    STATE_COMPLETED,
    FileDescriptor,
    ScanRecord,
    ScanTicket,
    Verdict,
)

logger = get_logger("engine.scan_lifecycle")

DEFAULT_PREMIUM_THRESHOLD = 50 * 1024 * 1024


class PaymentPolicy:
    """Decides whether a scan is premium; independent of the verdict."""

    def __init__(self, size_threshold: int = DEFAULT_PREMIUM_THRESHOLD, dangerous_type_requires_payment: bool = False):
        self.size_threshold = size_threshold
        self.dangerous_type_requires_payment = dangerous_type_requires_payment

    def evaluate(self, descriptor: FileDescriptor) -> tuple[bool, str | None]:
        if descriptor.size_bytes > self.size_threshold:
            return True, f"Large file ({descriptor.size_mb:.1f}MB) - Premium scan required"
        if self.dangerous_type_requires_payment:
            risk = classify_extension(descriptor.extension)
            if risk.tier == RISK_HIGH:
                return True, f"{risk.reason} - Premium scan required"
        return False, None


class ScanLifecycle:
    """Owns the pending and completed scan maps."""

    def __init__(
        self,
        payment_gate: PaymentGate,
        policy: PaymentPolicy | None = None,
        report_ttl: float = 0,
    ) -> None:
        self._gate = payment_gate
        self._policy = policy or PaymentPolicy()
        self._report_ttl = report_ttl
        self._pending: dict[str, ScanRecord] = {}
        # report_id -> (record, monotonic stored-at)
        self._completed: dict[str, tuple[ScanRecord, float]] = {}
        self._lock = threading.Lock()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def completed_count(self) -> int:
        return len(self._completed)

    def _new_id(self) -> str:
        """128-bit hex token unique across both maps (caller holds the lock)."""
        while True:
            token = secrets.token_hex(16)
            if token not in self._pending and token not in self._completed:
                return token

    def create(self, descriptor: FileDescriptor, verdict: Verdict) -> ScanTicket:
        """Register a scan; promote it straight away when no payment is needed."""
        requires_payment, reason = self._policy.evaluate(descriptor)
        with self._lock:
            scan_id = self._new_id()
            record = ScanRecord(
                scan_id=scan_id,
                descriptor=descriptor,
                verdict=verdict,
                requires_payment=requires_payment,
                payment_reason=reason,
            )
            report_id = None
            if requires_payment:
                self._pending[scan_id] = record
            else:
                report_id = self._store_completed(record)

        logger.info(
            "scan_created",
            scan_id=scan_id,
            file_name=descriptor.name,
            requires_payment=requires_payment,
            report_id=report_id,
        )
        return ScanTicket(
            scan_id=scan_id,
            requires_payment=requires_payment,
            payment_reason=reason,
            report_id=report_id,
        )

    def get_pending(self, scan_id: str) -> ScanRecord:
        with self._lock:
            record = self._pending.get(scan_id)
        if record is None:
            raise ScanNotFoundError(scan_id)
        return record

    async def confirm_payment(self, scan_id: str, proof_of_payment: str, timeout: float | None = None) -> ScanRecord:
        """Validate the payment with the gate and release the report.

        Raises:
            ScanNotFoundError: Unknown scan id, or already confirmed.
            PaymentIncompleteError: The gate did not report success, timed
                out or could not be reached; the scan stays pending.
        """
        self.get_pending(scan_id)

        try:
            status = await asyncio.wait_for(self._gate.confirm(proof_of_payment), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("payment_confirm_timeout", scan_id=scan_id, timeout=timeout)
            raise PaymentIncompleteError("Payment confirmation timed out", status="timeout", retryable=True)
        except PaymentGateError as exc:
            logger.error("payment_gate_unreachable", scan_id=scan_id, error=str(exc))
            raise PaymentIncompleteError(str(exc), status="unreachable", retryable=True) from exc

        if status != PAYMENT_SUCCEEDED:
            logger.info("payment_incomplete", scan_id=scan_id, status=status)
            raise PaymentIncompleteError(f"Payment not completed (status: {status})", status=status, retryable=True)

        with self._lock:
            # A concurrent confirmation may have consumed the scan while we awaited the gate
            record = self._pending.pop(scan_id, None)
            if record is None:
                raise ScanNotFoundError(scan_id)
            record = replace(record, payment_reference=proof_of_payment)
            report_id = self._store_completed(record)
            completed = self._completed[report_id][0]

        logger.info("payment_confirmed", scan_id=scan_id, report_id=report_id)
        return completed

    def get_report(self, report_id: str) -> ScanRecord:
        with self._lock:
            entry = self._completed.get(report_id)
            if entry is not None and self._expired(entry[1]):
                del self._completed[report_id]
                logger.info("report_expired", report_id=report_id)
                entry = None
        if entry is None:
            raise ReportNotFoundError(report_id)
        return entry[0]

    def purge_expired(self) -> int:
        """Drop completed reports older than the TTL; returns how many were removed."""
        if not self._report_ttl:
            return 0
        with self._lock:
            stale = [rid for rid, (_, stored) in self._completed.items() if self._expired(stored)]
            for rid in stale:
                del self._completed[rid]
        if stale:
            logger.info("reports_purged", count=len(stale))
        return len(stale)

    def _store_completed(self, record: ScanRecord) -> str:
        """Promote a record under a fresh report id (caller holds the lock)."""
        report_id = self._new_id()
        completed = replace(
            record,
            state=STATE_COMPLETED,
            report_id=report_id,
            completed_at=datetime.now(timezone.utc),
        )
        self._completed[report_id] = (completed, time.monotonic())
        return report_id

    def _expired(self, stored_at: float) -> bool:
        return bool(self._report_ttl) and time.monotonic() - stored_at > self._report_ttl
