"""Abstract payment gate: the only way the scan lifecycle talks to a payment provider."""

from abc import ABC, abstractmethod

from ..engine.types import PaymentIntent

PAYMENT_SUCCEEDED = "succeeded"
PAYMENT_FAILED = "failed"
PAYMENT_PENDING = "pending"

METHOD_CARD = "card"
METHOD_UPI = "upi"


class PaymentGate(ABC):
    """Issues payment intents and reports their status.

    Implementations are chosen once at construction time (see
    ``build_payment_gate``); business logic never branches on which one
    is in use.
    """

    name: str = "base"

    @abstractmethod
    async def create_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict | None = None,
        method: str = METHOD_CARD,
    ) -> PaymentIntent:
        """Create a payment intent for ``amount`` minor units of ``currency``."""
        ...

    @abstractmethod
    async def confirm(self, intent_id: str) -> str:
        """Return the intent status: ``succeeded``, ``failed`` or ``pending``.

        Raises:
            PaymentGateError: If the provider cannot be reached.
        """
        ...
