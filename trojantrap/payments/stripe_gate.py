"""Stripe payment gate: defers intent creation and status checks to Stripe."""

import asyncio
from functools import partial

import stripe

from ..engine.types import PaymentIntent
from ..errors import PaymentGateError
from ..utils.logging import get_logger
from .gate import METHOD_CARD, PAYMENT_FAILED, PAYMENT_PENDING, PAYMENT_SUCCEEDED, PaymentGate

logger = get_logger("payments.stripe")

_STATUS_MAP = {
    "succeeded": PAYMENT_SUCCEEDED,
    "canceled": PAYMENT_FAILED,
}

_PLACEHOLDER_MARKERS = ("your_stripe_secret_key", "placeholder", "changeme")


def has_usable_stripe_key(key: str | None) -> bool:
    """Reject empty, truncated and placeholder keys before talking to Stripe."""
    if not key:
        return False
    if not key.startswith(("sk_test_", "sk_live_")):
        return False
    if len(key) <= 50:
        return False
    lowered = key.lower()
    return not any(marker in lowered for marker in _PLACEHOLDER_MARKERS)


class StripePaymentGate(PaymentGate):
    """Card payments through Stripe PaymentIntents.

    The stripe library is synchronous; calls run in the default executor.
    """

    name = "stripe"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def _call(self, fn, **params):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(fn, api_key=self._api_key, **params))
        except stripe.StripeError as exc:
            logger.error("stripe_call_failed", error=str(exc))
            raise PaymentGateError(f"Stripe request failed: {exc}") from exc

    async def create_intent(self, amount, currency, metadata=None, method="card") -> PaymentIntent:
        if method != METHOD_CARD:
            raise PaymentGateError(f"Payment method {method!r} is not supported by the Stripe gate")
        intent = await self._call(
            stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            payment_method_types=[METHOD_CARD],
            metadata={k: str(v) for k, v in (metadata or {}).items()},
        )
        logger.info("stripe_intent_created", intent_id=intent["id"], amount=amount, currency=currency)
        return PaymentIntent(
            intent_id=intent["id"],
            client_secret=intent["client_secret"],
            amount=amount,
            currency=currency,
            method=METHOD_CARD,
        )

    async def confirm(self, intent_id: str) -> str:
        intent = await self._call(stripe.PaymentIntent.retrieve, id=intent_id)
        raw_status = intent["status"]
        status = _STATUS_MAP.get(raw_status, PAYMENT_PENDING)
        logger.info("stripe_intent_status", intent_id=intent_id, stripe_status=raw_status, status=status)
        return status
