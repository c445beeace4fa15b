"""Scan routes: file upload and hash-only classification."""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field, field_validator

from ...config import TrojanTrapConfig
from ...dependencies import get_app_config, get_scan_lifecycle, get_verdict_engine, resolve_path
from ...engine.scan_lifecycle import ScanLifecycle
from ...engine.types import RISK_HIGH, FileDescriptor, ScanTicket, Verdict, is_sha256_hex
from ...engine.verdict import VerdictEngine
from ...utils.hashing import discard, spool_upload
from ...utils.logging import get_logger
from ...utils.report_template import report_payload

logger = get_logger("api.scans")

router = APIRouter(tags=["scans"])


# --- Request models ---

class ScanRequest(BaseModel):
    fileName: str = Field(min_length=1)
    fileHash: str
    fileSize: int = Field(ge=0)
    scanType: Optional[str] = None

    @field_validator("fileHash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        v = v.strip().lower()
        if not is_sha256_hex(v):
            raise ValueError("fileHash must be a 64-character hex SHA-256 digest")
        return v


# --- Helpers ---

def _ticket_payload(descriptor: FileDescriptor, verdict: Verdict, ticket: ScanTicket, lifecycle: ScanLifecycle) -> dict:
    risk = verdict.risk
    data = {
        "success": True,
        "scanId": ticket.scan_id,
        "fileName": descriptor.name,
        "fileSize": descriptor.size_bytes,
        "fileSizeMB": round(descriptor.size_mb, 2),
        "fileHash": descriptor.content_hash,
        "fileType": {"risk": risk.tier, "reason": risk.reason} if risk else None,
        "isPotentiallyDangerous": bool(risk and risk.tier == RISK_HIGH),
        "isKnownMalicious": verdict.known_malicious,
        "requiresPayment": ticket.requires_payment,
        "paymentReason": ticket.payment_reason,
        "scanType": "premium" if ticket.requires_payment else "basic",
    }
    if ticket.report_id is not None:
        data["reportId"] = ticket.report_id
        data["report"] = report_payload(lifecycle.get_report(ticket.report_id))
    return data


# --- Routes ---

@router.post("/upload")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    config: TrojanTrapConfig = Depends(get_app_config),
    engine: VerdictEngine = Depends(get_verdict_engine),
    lifecycle: ScanLifecycle = Depends(get_scan_lifecycle),
):
    """Stream an upload to disk, hash and classify it, then open a scan."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    path, size, digest = await spool_upload(
        file,
        str(resolve_path(config.upload_dir)),
        max_bytes=config.max_upload_bytes,
        chunk_size=config.upload_chunk_size,
    )
    try:
        descriptor = FileDescriptor.from_upload(file.filename, size, digest)
        loop = asyncio.get_running_loop()
        verdict = await loop.run_in_executor(None, engine.evaluate_path, descriptor, path)
    finally:
        discard(path)

    ticket = lifecycle.create(descriptor, verdict)
    logger.info(
        "file_uploaded",
        scan_id=ticket.scan_id,
        file_name=descriptor.name,
        size_bytes=size,
        threat_level=verdict.threat_level,
    )

    data = _ticket_payload(descriptor, verdict, ticket, lifecycle)
    data["message"] = "File uploaded successfully"
    return data


@router.post("/scan")
async def scan_hash(
    body: ScanRequest,
    engine: VerdictEngine = Depends(get_verdict_engine),
    lifecycle: ScanLifecycle = Depends(get_scan_lifecycle),
):
    """Classify a file the client already hashed; no content is inspected."""
    descriptor = FileDescriptor.from_upload(body.fileName, body.fileSize, body.fileHash)
    verdict = engine.evaluate(descriptor)
    ticket = lifecycle.create(descriptor, verdict)
    logger.info(
        "hash_scanned",
        scan_id=ticket.scan_id,
        file_name=descriptor.name,
        requested_scan_type=body.scanType,
        threat_level=verdict.threat_level,
    )

    data = _ticket_payload(descriptor, verdict, ticket, lifecycle)
    data["message"] = "Scan completed" if ticket.report_id else "Payment required to release the report"
    return data
