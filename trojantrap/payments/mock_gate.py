"""Mock payment gate for development; every confirmation succeeds after a fixed delay."""

import asyncio
import secrets
from urllib.parse import quote

from ..engine.types import PaymentIntent
from ..utils.logging import get_logger
from .gate import METHOD_UPI, PAYMENT_SUCCEEDED, PaymentGate

logger = get_logger("payments.mock")


class MockPaymentGate(PaymentGate):
    """Stripe-shaped fake: ``pi_``/``upi_`` intent ids and ``<id>_secret_<hex>`` secrets."""

    name = "mock"

    def __init__(self, delay: float = 2.0, upi_id: str = "trojantrap@okaxis", payee_name: str = "TrojanTrap") -> None:
        self._delay = delay
        self._upi_id = upi_id
        self._payee_name = payee_name

    async def create_intent(self, amount, currency, metadata=None, method="card") -> PaymentIntent:
        prefix = "upi_" if method == METHOD_UPI else "pi_"
        intent_id = prefix + secrets.token_hex(8)
        client_secret = f"{intent_id}_secret_{secrets.token_hex(16)}"

        upi_link = None
        if method == METHOD_UPI:
            file_name = (metadata or {}).get("fileName", "")
            # Rupees for UPI links, intents carry minor units
            upi_link = (
                f"upi://pay?pa={self._upi_id}&pn={quote(self._payee_name)}"
                f"&am={amount / 100:g}&tn={quote(f'Premium Scan - {file_name}')}"
            )

        logger.info("mock_intent_created", intent_id=intent_id, amount=amount, currency=currency, method=method)
        return PaymentIntent(
            intent_id=intent_id,
            client_secret=client_secret,
            amount=amount,
            currency=currency,
            method=method,
            upi_link=upi_link,
        )

    async def confirm(self, intent_id: str) -> str:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        logger.info("mock_payment_confirmed", intent_id=intent_id)
        return PAYMENT_SUCCEEDED
