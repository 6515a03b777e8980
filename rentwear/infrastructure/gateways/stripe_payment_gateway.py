import asyncio
import logging

import stripe

from rentwear.application.interfaces.payment_gateway import ChargeResult, PaymentGateway
from rentwear.domain.errors import GatewayError, PaymentDeclinedError, TransientError
from rentwear.domain.value_objects.money import Money
from rentwear.infrastructure.circuit_breaker import CircuitBreakerError, payment_breaker

logger = logging.getLogger(__name__)


def _guarded(operation, **params):
    """Run a blocking Stripe call inside the payment breaker."""
    with payment_breaker.calling():
        return operation(**params)


class StripePaymentGateway(PaymentGateway):
    def __init__(
        self,
        api_key: str | None,
        environment: str = "sandbox",
        timeout_seconds: float = 10.0,
        max_network_retries: int = 2,
    ) -> None:
        if not api_key:
            raise RuntimeError("STRIPE_SECRET_KEY is required for the Stripe gateway")
        if environment == "production" and api_key.startswith("sk_test_"):
            logger.warning("Production payment environment configured with a Stripe test key")
        if environment == "sandbox" and api_key.startswith("sk_live_"):
            logger.warning("Sandbox payment environment configured with a Stripe live key")
        self._api_key = api_key

        # Process-wide SDK settings, applied once at startup. Automatic
        # network retries reuse the same idempotency key, so they never
        # create a second charge.
        stripe.max_network_retries = max_network_retries
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)

    async def charge(
        self,
        amount: Money,
        source_id: str,
        idempotency_key: str,
        reference_id: str,
        note: str | None = None,
    ) -> ChargeResult:
        """
        Create and confirm a PaymentIntent, protected by the circuit breaker.

        Raises:
            PaymentDeclinedError: card declined or unusable payment method
            TransientError: outcome unknown (network, rate limit, open circuit)
            GatewayError: any other Stripe failure
        """
        try:
            # stripe has no async client; run the blocking call off the loop
            intent = await asyncio.to_thread(
                _guarded,
                stripe.PaymentIntent.create,
                api_key=self._api_key,
                idempotency_key=idempotency_key,
                amount=amount.to_cents(),
                currency=amount.currency_code.lower(),
                payment_method=source_id,
                confirm=True,
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
                description=note,
                metadata={"listing_id": reference_id, "idempotency_key": idempotency_key},
            )
        except CircuitBreakerError as exc:
            logger.error(
                "Payment circuit breaker is open - service unavailable",
                extra={"idempotency_key": idempotency_key, "circuit_state": str(exc)},
            )
            raise TransientError(idem_key=idempotency_key) from exc
        except stripe.CardError as exc:
            raise PaymentDeclinedError(
                exc.user_message or "Your card was declined.", idem_key=idempotency_key
            ) from exc
        except stripe.InvalidRequestError as exc:
            logger.warning(
                "Stripe rejected the payment request",
                extra={"idempotency_key": idempotency_key, "stripe_code": exc.code},
            )
            raise PaymentDeclinedError(
                "The payment method could not be used", idem_key=idempotency_key
            ) from exc
        except (stripe.APIConnectionError, stripe.RateLimitError) as exc:
            logger.warning(
                "Stripe unreachable, payment outcome unknown",
                extra={"idempotency_key": idempotency_key},
            )
            raise TransientError(idem_key=idempotency_key) from exc
        except stripe.StripeError as exc:
            logger.error(
                "Stripe API error",
                exc_info=exc,
                extra={"idempotency_key": idempotency_key},
            )
            raise GatewayError(idem_key=idempotency_key) from exc

        if intent.status == "succeeded":
            return ChargeResult(payment_id=intent.id, status=intent.status, amount=amount)
        if intent.status == "processing":
            raise TransientError(
                idem_key=idempotency_key,
                message="Payment is still processing, retry later",
            )
        raise PaymentDeclinedError(
            f"Payment was not completed (status: {intent.status})", idem_key=idempotency_key
        )

    async def refund(self, payment_id: str, amount: Money, idempotency_key: str) -> str:
        try:
            refund = await asyncio.to_thread(
                _guarded,
                stripe.Refund.create,
                api_key=self._api_key,
                idempotency_key=idempotency_key,
                payment_intent=payment_id,
                amount=amount.to_cents(),
            )
        except CircuitBreakerError as exc:
            raise TransientError(idem_key=idempotency_key) from exc
        except (stripe.APIConnectionError, stripe.RateLimitError) as exc:
            raise TransientError(idem_key=idempotency_key) from exc
        except stripe.StripeError as exc:
            logger.error(
                "Stripe refund failed",
                exc_info=exc,
                extra={"payment_id": payment_id, "idempotency_key": idempotency_key},
            )
            raise GatewayError(idem_key=idempotency_key) from exc
        return refund.id

    async def find_charge(self, idempotency_key: str) -> ChargeResult | None:
        """
        Search for a succeeded PaymentIntent created under this key.

        Charges store their key in metadata. Stripe search results can lag a
        few seconds behind a write, which is acceptable because the lookup
        only runs when a retried key can no longer book its dates.
        """
        escaped = idempotency_key.replace("\\", "\\\\").replace("'", "\\'")
        try:
            found = await asyncio.to_thread(
                _guarded,
                stripe.PaymentIntent.search,
                api_key=self._api_key,
                query=f"metadata['idempotency_key']:'{escaped}'",
            )
        except CircuitBreakerError as exc:
            raise TransientError(idem_key=idempotency_key) from exc
        except (stripe.APIConnectionError, stripe.RateLimitError) as exc:
            raise TransientError(idem_key=idempotency_key) from exc
        except stripe.StripeError as exc:
            logger.error(
                "Stripe payment lookup failed",
                exc_info=exc,
                extra={"idempotency_key": idempotency_key},
            )
            raise GatewayError(idem_key=idempotency_key) from exc

        for intent in found.data:
            if intent.status == "succeeded":
                return ChargeResult(
                    payment_id=intent.id,
                    status=intent.status,
                    amount=Money.from_cents(intent.amount, intent.currency.upper()),
                )
        return None
