"""Payment routes: intent creation for pending scans and confirmation."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...config import TrojanTrapConfig
from ...dependencies import get_app_config, get_payment_gate, get_scan_lifecycle
from ...engine.scan_lifecycle import ScanLifecycle
from ...payments.gate import METHOD_CARD, METHOD_UPI, PaymentGate
from ...utils.logging import get_logger
from ...utils.report_template import report_payload

logger = get_logger("api.payments")

router = APIRouter(tags=["payments"])


# --- Request models ---

class CreateIntentRequest(BaseModel):
    scanId: str = Field(min_length=1)
    paymentMethod: Optional[str] = METHOD_CARD


class CreateUpiRequest(BaseModel):
    scanId: str = Field(min_length=1)


class VerifyPaymentRequest(BaseModel):
    scanId: str = Field(min_length=1)
    paymentIntentId: str = Field(min_length=1)


async def _create_intent(lifecycle, gate, config, scan_id: str, method: str):
    record = lifecycle.get_pending(scan_id)
    return await gate.create_intent(
        config.payment_amount,
        config.payment_currency,
        metadata={
            "scanId": record.scan_id,
            "fileName": record.descriptor.name,
            "fileSize": record.descriptor.size_bytes,
        },
        method=method,
    )


# --- Routes ---

@router.post("/create-payment-intent")
async def create_payment_intent(
    body: CreateIntentRequest,
    config: TrojanTrapConfig = Depends(get_app_config),
    gate: PaymentGate = Depends(get_payment_gate),
    lifecycle: ScanLifecycle = Depends(get_scan_lifecycle),
):
    """Create a payment intent for a pending scan."""
    method = (body.paymentMethod or METHOD_CARD).lower()
    intent = await _create_intent(lifecycle, gate, config, body.scanId, method)
    return {
        "success": True,
        "clientSecret": intent.client_secret,
        "paymentIntentId": intent.intent_id,
        "amount": intent.amount,
        "currency": intent.currency,
        "paymentMethod": intent.method,
    }


@router.post("/create-upi-payment")
async def create_upi_payment(
    body: CreateUpiRequest,
    config: TrojanTrapConfig = Depends(get_app_config),
    gate: PaymentGate = Depends(get_payment_gate),
    lifecycle: ScanLifecycle = Depends(get_scan_lifecycle),
):
    """Create a UPI payment (deep link doubles as QR payload) for a pending scan."""
    intent = await _create_intent(lifecycle, gate, config, body.scanId, METHOD_UPI)
    return {
        "success": True,
        "clientSecret": intent.client_secret,
        "paymentIntentId": intent.intent_id,
        "amount": intent.amount,
        "currency": intent.currency,
        "paymentMethod": intent.method,
        "upiId": config.upi_id,
        "upiLink": intent.upi_link,
        "qrCode": intent.upi_link,
    }


@router.post("/verify-payment")
async def verify_payment(
    body: VerifyPaymentRequest,
    config: TrojanTrapConfig = Depends(get_app_config),
    lifecycle: ScanLifecycle = Depends(get_scan_lifecycle),
):
    """Confirm the payment and release the report for the scan."""
    record = await lifecycle.confirm_payment(
        body.scanId,
        body.paymentIntentId,
        timeout=config.payment_confirm_timeout,
    )
    return {
        "success": True,
        "message": "Payment verified successfully",
        "reportId": record.report_id,
        "report": report_payload(record),
    }
