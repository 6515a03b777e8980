import asyncio
import logging
from datetime import date
from decimal import Decimal

import pytest

from rentwear.api.schemas.rentals import ProcessPaymentRequest
from rentwear.application.use_cases.book_listing import SCOPE
from rentwear.domain.entities.rental import Rental, RentalStatus
from rentwear.domain.errors import (
    AccountNotFoundError,
    ConflictError,
    GatewayError,
    IdempotencyConflictError,
    InvalidDateRangeError,
    ListingNotFoundError,
    PaymentDeclinedError,
    StorageError,
    TransientError,
    ValidationError,
)


def payment_request(**overrides) -> ProcessPaymentRequest:
    fields = {
        "source_id": "pm_card_visa",
        "listing_id": 1,
        "start_date": date(2024, 6, 5),
        "end_date": date(2024, 6, 7),
        "user_email": "renter@example.com",
        "pickup_location": "Main St 1",
        "dropoff_location": "Main St 1",
    }
    fields.update(overrides)
    return ProcessPaymentRequest(**fields)


class FailingRentalRepo:
    """Delegates to the real repo but fails the ledger write."""

    def __init__(self, inner, error: Exception):
        self._inner = inner
        self._error = error

    def __getattr__(self, name):
        return getattr(self._inner, name)

    async def record_confirmed(self, rental):
        raise self._error


async def test_end_to_end_booking_then_overlap(book_listing, paid_listing, gateway, rental_repo):
    response = await book_listing.execute(payment_request())

    assert response.success is True
    assert response.payment_id == "p1"
    assert response.rental_id == "r1"
    assert response.total_amount == Decimal("15.00")

    stored = await rental_repo.get("r1")
    assert stored.status == RentalStatus.CONFIRMED
    assert stored.payment_id == "p1"
    assert stored.renter_id == "renter-1"
    assert stored.total_amount == Decimal("15.00")

    with pytest.raises(ConflictError):
        await book_listing.execute(
            payment_request(start_date=date(2024, 6, 6), end_date=date(2024, 6, 9))
        )
    # Rejected before charging
    assert len(gateway.captured) == 1


async def test_single_day_costs_one_day(book_listing, paid_listing):
    response = await book_listing.execute(
        payment_request(start_date=date(2024, 6, 1), end_date=date(2024, 6, 1))
    )
    assert response.total_amount == Decimal("5.00")


async def test_adjacent_ranges_do_not_conflict(book_listing, paid_listing):
    await book_listing.execute(payment_request())
    response = await book_listing.execute(
        payment_request(start_date=date(2024, 6, 8), end_date=date(2024, 6, 9))
    )
    assert response.rental_id == "r2"


async def test_retry_with_same_key_does_not_charge_twice(book_listing, paid_listing, gateway):
    first = await book_listing.execute(payment_request(), idem_key="key-1")
    second = await book_listing.execute(payment_request(), idem_key="key-1")

    assert second == first
    assert len(gateway.captured) == 1


async def test_same_key_with_different_payload_is_rejected(book_listing, paid_listing):
    await book_listing.execute(payment_request(), idem_key="key-1")

    with pytest.raises(IdempotencyConflictError):
        await book_listing.execute(
            payment_request(start_date=date(2024, 7, 1), end_date=date(2024, 7, 2)),
            idem_key="key-1",
        )


async def test_replay_is_stored_under_booking_scope(book_listing, paid_listing, idempotency_repo):
    await book_listing.execute(payment_request(), idem_key="key-1")

    record = await idempotency_repo.get(scope=SCOPE, idem_key="key-1")
    assert record.reference_rental_id == "r1"
    assert record.response_json["paymentId"] == "p1"


async def test_declined_card_records_nothing(book_listing, paid_listing, gateway, rental_repo):
    with pytest.raises(PaymentDeclinedError) as exc_info:
        await book_listing.execute(payment_request(source_id="pm_card_chargeDeclined"))

    assert exc_info.value.reason == "Your card was declined."
    assert gateway.captured == []
    assert await rental_repo.get("r1") is None


async def test_gateway_failure_records_nothing(book_listing, paid_listing, gateway, rental_repo):
    gateway.fail_next(GatewayError())

    with pytest.raises(GatewayError):
        await book_listing.execute(payment_request())

    assert await rental_repo.list_for_renter("renter-1") == []


async def test_timeout_then_retry_with_same_key_charges_once(book_listing, paid_listing, gateway):
    gateway.fail_next(TransientError(idem_key="key-1"))

    with pytest.raises(TransientError) as exc_info:
        await book_listing.execute(payment_request(), idem_key="key-1")
    assert exc_info.value.idem_key == "key-1"

    response = await book_listing.execute(payment_request(), idem_key="key-1")
    assert response.payment_id == "p1"
    assert len(gateway.captured) == 1


async def test_amount_must_match_server_total(book_listing, paid_listing, gateway):
    with pytest.raises(ValidationError):
        await book_listing.execute(payment_request(amount=Decimal("10.00")))
    assert gateway.captured == []

    response = await book_listing.execute(payment_request(amount=Decimal("15.00")))
    assert response.total_amount == Decimal("15.00")


async def test_validation_order(book_listing, paid_listing, gateway):
    with pytest.raises(AccountNotFoundError):
        await book_listing.execute(payment_request(user_email="ghost@example.com"))
    with pytest.raises(ListingNotFoundError):
        await book_listing.execute(payment_request(listing_id=99))
    with pytest.raises(InvalidDateRangeError):
        await book_listing.execute(
            payment_request(start_date=date(2024, 6, 7), end_date=date(2024, 6, 5))
        )
    with pytest.raises(InvalidDateRangeError):
        await book_listing.execute(
            payment_request(start_date=date(2024, 8, 29), end_date=date(2024, 9, 2))
        )
    with pytest.raises(ValidationError):
        await book_listing.execute(payment_request(pickup_location="   "))

    assert gateway.captured == []


async def test_free_listing_cannot_be_paid_for(book_listing, free_listing, gateway):
    with pytest.raises(ValidationError):
        await book_listing.execute(payment_request(listing_id=free_listing.id))
    assert gateway.captured == []


async def test_concurrent_overlapping_bookings_confirm_exactly_one(
    book_listing, paid_listing, gateway, rental_repo
):
    results = await asyncio.gather(
        book_listing.execute(payment_request(), idem_key="a"),
        book_listing.execute(
            payment_request(start_date=date(2024, 6, 6), end_date=date(2024, 6, 8)),
            idem_key="b",
        ),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(successes) == 1
    assert len(conflicts) == 1
    # Every charge that lost the race was refunded
    assert len(gateway.captured) - len(gateway.refunds) == 1


async def test_conflict_after_charge_refunds(book_listing, paid_listing, gateway, rental_repo):
    original_charge = gateway.charge

    async def charge_while_competitor_books(**kwargs):
        competitor = Rental(
            id="competitor",
            listing_id=paid_listing.id,
            renter_id="other-1",
            start_date=date(2024, 6, 7),
            end_date=date(2024, 6, 8),
            total_amount=Decimal("10.00"),
            status=RentalStatus.PENDING,
        )
        competitor.confirm("p-competitor")
        await rental_repo.record_confirmed(competitor)
        return await original_charge(**kwargs)

    gateway.charge = charge_while_competitor_books

    with pytest.raises(ConflictError):
        await book_listing.execute(payment_request(), idem_key="key-1")

    assert gateway.refunds == {"p1": "re_1"}
    assert await rental_repo.get("r1") is None


async def test_failed_refund_is_a_storage_error(book_listing, paid_listing, gateway, rental_repo):
    original_charge = gateway.charge

    async def charge_while_competitor_books(**kwargs):
        competitor = Rental(
            id="competitor",
            listing_id=paid_listing.id,
            renter_id="other-1",
            start_date=date(2024, 6, 5),
            end_date=date(2024, 6, 5),
            total_amount=Decimal("5.00"),
        )
        competitor.confirm("p-competitor")
        await rental_repo.record_confirmed(competitor)
        return await original_charge(**kwargs)

    gateway.charge = charge_while_competitor_books
    gateway.fail_next_refund(GatewayError())

    with pytest.raises(StorageError) as exc_info:
        await book_listing.execute(payment_request(), idem_key="key-1")
    assert exc_info.value.payment_id == "p1"


async def test_ledger_failure_after_charge_is_reported(
    book_listing, paid_listing, gateway, rental_repo, caplog
):
    book_listing._rental_repo = FailingRentalRepo(rental_repo, RuntimeError("disk full"))

    with caplog.at_level(logging.CRITICAL, logger="rentwear.reconciliation"):
        with pytest.raises(StorageError) as exc_info:
            await book_listing.execute(payment_request(), idem_key="key-1")

    assert exc_info.value.idem_key == "key-1"
    assert exc_info.value.payment_id == "p1"
    assert len(gateway.captured) == 1
    assert any(r.name == "rentwear.reconciliation" for r in caplog.records)


async def test_generated_key_when_none_given(book_listing, paid_listing, rental_repo):
    await book_listing.execute(payment_request())

    stored = await rental_repo.get("r1")
    assert stored.idempotency_key == "idem-000001"


async def test_captured_timeout_is_refunded_when_retry_finds_dates_taken(
    book_listing, paid_listing, gateway
):
    gateway.fail_next(TransientError(idem_key="key-a"), after_capture=True)
    with pytest.raises(TransientError):
        await book_listing.execute(payment_request(), idem_key="key-a")

    await book_listing.execute(
        payment_request(
            user_email="other@example.com",
            start_date=date(2024, 6, 6),
            end_date=date(2024, 6, 8),
        ),
        idem_key="key-b",
    )

    with pytest.raises(ConflictError):
        await book_listing.execute(payment_request(), idem_key="key-a")

    assert [charge.payment_id for charge in gateway.captured] == ["p1", "p2"]
    assert gateway.refunds == {"p1": "re_1"}


async def test_unrefundable_captured_timeout_is_reported(
    book_listing, paid_listing, gateway, caplog
):
    gateway.fail_next(TransientError(idem_key="key-a"), after_capture=True)
    with pytest.raises(TransientError):
        await book_listing.execute(payment_request(), idem_key="key-a")
    await book_listing.execute(
        payment_request(user_email="other@example.com"), idem_key="key-b"
    )
    gateway.fail_next_refund(TransientError(idem_key="refund-key-a"))

    with caplog.at_level(logging.CRITICAL, logger="rentwear.reconciliation"):
        with pytest.raises(StorageError) as exc_info:
            await book_listing.execute(payment_request(), idem_key="key-a")

    assert exc_info.value.payment_id == "p1"
    assert any(getattr(record, "payment_id", None) == "p1" for record in caplog.records)


async def test_plain_conflict_does_not_refund(book_listing, paid_listing, gateway):
    await book_listing.execute(payment_request(), idem_key="key-a")

    with pytest.raises(ConflictError):
        await book_listing.execute(
            payment_request(user_email="other@example.com"), idem_key="key-b"
        )

    assert len(gateway.captured) == 1
    assert gateway.refunds == {}
