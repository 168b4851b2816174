"""
Payment gateway client (Stripe).

Creates payment intents whose client secret the caller uses to confirm the
charge out of band. The Stripe SDK is synchronous, so calls run in the
threadpool and never block the event loop.
"""

import logging

import stripe
from starlette.concurrency import run_in_threadpool

from parcel_backend.app.core.config import settings
from parcel_backend.app.core.exceptions import UpstreamFailureError
from parcel_backend.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger("parcel_backend.payments.gateway")


class PaymentGateway:
    """
    Thin wrapper over ``stripe.PaymentIntent.create``.

    Single attempt per call; no timeout policy beyond the SDK's own.
    """

    def __init__(self, api_key: str = None, currency: str = None, breaker: CircuitBreaker = None):
        self.api_key = api_key if api_key is not None else settings.payment_gateway_key
        self.currency = currency or settings.payment_currency
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=settings.gateway_failure_threshold,
            reset_timeout=settings.gateway_reset_timeout,
        )

    def _create_intent(self, amount_in_cents: int):
        return stripe.PaymentIntent.create(
            api_key=self.api_key,
            amount=amount_in_cents,
            currency=self.currency,
            payment_method_types=["card"],
        )

    async def _create_intent_async(self, amount_in_cents: int):
        return await run_in_threadpool(self._create_intent, amount_in_cents)

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Returns:
            The intent's client secret

        Raises:
            UpstreamFailureError: gateway error or circuit open
        """
        try:
            intent = await self.breaker.call(self._create_intent_async, amount_in_cents)
        except CircuitOpenError:
            logger.error("Payment gateway circuit open, rejecting intent for %s cents", amount_in_cents)
            raise UpstreamFailureError("Payment gateway temporarily unavailable")
        except stripe.StripeError as e:
            logger.error("Payment intent creation failed: %s", e.user_message or str(e))
            raise UpstreamFailureError(
                "Payment initiation failed",
                details={"code": getattr(e, "code", None)}
            ) from e

        logger.info("Payment intent %s created for %s cents", intent.id, amount_in_cents)
        return intent.client_secret


payment_gateway = PaymentGateway()


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; one gateway (and one breaker) per process."""
    return payment_gateway
