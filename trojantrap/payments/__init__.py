"""Payment gates package."""

from ..config import TrojanTrapConfig
from ..utils.logging import get_logger
from .gate import PaymentGate
from .mock_gate import MockPaymentGate
from .stripe_gate import StripePaymentGate, has_usable_stripe_key

logger = get_logger("payments")

__all__ = [
    "PaymentGate",
    "MockPaymentGate",
    "StripePaymentGate",
    "build_payment_gate",
]


def build_payment_gate(config: TrojanTrapConfig) -> PaymentGate:
    """Pick the gate once at startup: Stripe when configured with a real key, else the mock."""
    if config.payment_provider == "stripe":
        if has_usable_stripe_key(config.stripe_secret_key):
            logger.info("payment_gate_selected", gate="stripe")
            return StripePaymentGate(api_key=config.stripe_secret_key)
        logger.warning("stripe_key_unusable_falling_back_to_mock")
    logger.info("payment_gate_selected", gate="mock")
    return MockPaymentGate(
        delay=config.mock_payment_delay,
        upi_id=config.upi_id,
        payee_name=config.upi_payee_name,
    )
