import asyncio
import threading
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import stripe

from rentwear.domain.errors import GatewayError, PaymentDeclinedError, TransientError
from rentwear.domain.value_objects import Money
from rentwear.infrastructure.circuit_breaker import payment_breaker
from rentwear.infrastructure.gateways.stripe_payment_gateway import StripePaymentGateway

FIFTEEN_DOLLARS = Money(Decimal("15.00"), "USD")


@pytest.fixture
def gateway():
    return StripePaymentGateway(api_key="sk_test_123", environment="sandbox", timeout_seconds=3)


async def charge(gateway, key="key-1"):
    return await gateway.charge(
        amount=FIFTEEN_DOLLARS,
        source_id="pm_card_visa",
        idempotency_key=key,
        reference_id="1",
        note="Rental payment for Red silk dress",
    )


def test_requires_api_key():
    with pytest.raises(RuntimeError):
        StripePaymentGateway(api_key=None)


async def test_successful_charge_passes_cents_and_idempotency_key(gateway):
    create = Mock(return_value=SimpleNamespace(id="pi_123", status="succeeded"))

    with patch.object(stripe.PaymentIntent, "create", create):
        result = await charge(gateway)

    assert result.payment_id == "pi_123"
    assert result.amount == FIFTEEN_DOLLARS
    kwargs = create.call_args.kwargs
    assert kwargs["amount"] == 1500
    assert kwargs["currency"] == "usd"
    assert kwargs["idempotency_key"] == "key-1"
    assert kwargs["confirm"] is True
    assert kwargs["api_key"] == "sk_test_123"


async def test_card_error_is_a_decline(gateway):
    error = stripe.CardError("Your card has insufficient funds.", None, "card_declined")

    with patch.object(stripe.PaymentIntent, "create", Mock(side_effect=error)):
        with pytest.raises(PaymentDeclinedError) as exc_info:
            await charge(gateway)

    assert exc_info.value.reason == "Your card has insufficient funds."


async def test_connection_error_is_transient(gateway):
    error = stripe.APIConnectionError("Network unreachable")

    with patch.object(stripe.PaymentIntent, "create", Mock(side_effect=error)):
        with pytest.raises(TransientError) as exc_info:
            await charge(gateway, key="key-7")

    assert exc_info.value.idem_key == "key-7"


async def test_other_stripe_errors_are_gateway_errors(gateway):
    with patch.object(stripe.PaymentIntent, "create", Mock(side_effect=stripe.APIError("boom"))):
        with pytest.raises(GatewayError) as exc_info:
            await charge(gateway)

    assert not isinstance(exc_info.value, PaymentDeclinedError)
    assert "boom" not in exc_info.value.message


async def test_incomplete_intent_is_declined(gateway):
    create = Mock(return_value=SimpleNamespace(id="pi_123", status="requires_action"))

    with patch.object(stripe.PaymentIntent, "create", create):
        with pytest.raises(PaymentDeclinedError):
            await charge(gateway)


async def test_open_circuit_is_transient(gateway):
    payment_breaker.open()
    create = Mock()

    with patch.object(stripe.PaymentIntent, "create", create):
        with pytest.raises(TransientError):
            await charge(gateway)

    create.assert_not_called()


async def test_refund_uses_payment_intent(gateway):
    create = Mock(return_value=SimpleNamespace(id="re_1"))

    with patch.object(stripe.Refund, "create", create):
        refund_id = await gateway.refund("pi_123", FIFTEEN_DOLLARS, "refund-key-1")

    assert refund_id == "re_1"
    assert create.call_args.kwargs["payment_intent"] == "pi_123"
    assert create.call_args.kwargs["amount"] == 1500
    assert create.call_args.kwargs["idempotency_key"] == "refund-key-1"


async def test_charge_records_key_in_metadata(gateway):
    create = Mock(return_value=SimpleNamespace(id="pi_123", status="succeeded"))

    with patch.object(stripe.PaymentIntent, "create", create):
        await charge(gateway, key="key-3")

    assert create.call_args.kwargs["metadata"] == {"listing_id": "1", "idempotency_key": "key-3"}


async def test_find_charge_returns_succeeded_intent(gateway):
    found = SimpleNamespace(
        data=[
            SimpleNamespace(id="pi_1", status="canceled", amount=1500, currency="usd"),
            SimpleNamespace(id="pi_2", status="succeeded", amount=1500, currency="usd"),
        ]
    )
    search = Mock(return_value=found)

    with patch.object(stripe.PaymentIntent, "search", search):
        result = await gateway.find_charge("key-1")

    assert result.payment_id == "pi_2"
    assert result.amount == FIFTEEN_DOLLARS
    assert search.call_args.kwargs["query"] == "metadata['idempotency_key']:'key-1'"


async def test_find_charge_without_match(gateway):
    with patch.object(stripe.PaymentIntent, "search", Mock(return_value=SimpleNamespace(data=[]))):
        assert await gateway.find_charge("it's-mine") is None


async def test_charges_are_not_serialized_by_the_breaker(gateway):
    # Every call blocks until all four are in flight at once.
    barrier = threading.Barrier(4, timeout=5)

    def create(**kwargs):
        barrier.wait()
        return SimpleNamespace(id=f"pi_{kwargs['idempotency_key']}", status="succeeded")

    with patch.object(stripe.PaymentIntent, "create", create):
        results = await asyncio.gather(*(charge(gateway, key=f"key-{n}") for n in range(4)))

    assert sorted(result.payment_id for result in results) == [
        "pi_key-0",
        "pi_key-1",
        "pi_key-2",
        "pi_key-3",
    ]
