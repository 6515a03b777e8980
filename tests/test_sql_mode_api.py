"""
End-to-end over the SQL adapters: the API wired with USE_IN_MEMORY=false,
a SQLite test database and stub external services.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from rentwear.api.dependencies import (
    get_identity_resolver,
    get_object_store,
    get_payment_gateway,
    get_session,
)
from rentwear.config import Settings, get_settings
from rentwear.main import app

pytestmark = pytest.mark.integration

LISTING_FORM = {
    "title": "Red silk dress",
    "size": "M",
    "itemType": "Dress",
    "condition": "Like new",
    "startDate": "2024-06-01",
    "endDate": "2024-08-30",
    "rentalType": "rent",
    "pricePerDay": "5.00",
    "phoneNumber": "555-0100",
    "contactEmail": "owner@example.com",
}

PAYMENT = {
    "sourceId": "pm_card_visa",
    "listingId": 1,
    "startDate": "2024-06-05",
    "endDate": "2024-06-07",
    "userEmail": "renter@example.com",
    "pickupLocation": "Main St 1",
    "dropoffLocation": "Main St 1",
}


@pytest_asyncio.fixture
async def sql_client(session_maker, gateway, identity, object_store):
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_settings] = lambda: Settings(use_in_memory=False)
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_identity_resolver] = lambda: identity
    app.dependency_overrides[get_object_store] = lambda: object_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def test_booking_flow_over_sql(sql_client: AsyncClient, gateway):
    created = await sql_client.post(
        "/listings", data=LISTING_FORM, headers={"user-id": "owner@example.com"}
    )
    assert created.status_code == 201
    assert created.json()["listing"]["ownerId"] == "owner-1"

    paid = await sql_client.post(
        "/api/process-payment", json=PAYMENT, headers={"Idempotency-Key": "checkout-1"}
    )
    assert paid.status_code == 200
    assert paid.json()["totalAmount"] == "15.00"

    replay = await sql_client.post(
        "/api/process-payment", json=PAYMENT, headers={"Idempotency-Key": "checkout-1"}
    )
    assert replay.json() == paid.json()
    assert len(gateway.captured) == 1

    overlap = await sql_client.post(
        "/api/process-payment",
        json={**PAYMENT, "startDate": "2024-06-07", "endDate": "2024-06-08"},
    )
    assert overlap.status_code == 409

    history = await sql_client.get("/api/rentals", headers={"user-id": "renter@example.com"})
    assert [entry["id"] for entry in history.json()["rentals"]] == [paid.json()["rentalId"]]

    contact = await sql_client.get(
        f"/api/rental-contact-info/{paid.json()['rentalId']}",
        headers={"user-id": "renter@example.com"},
    )
    assert contact.json()["phone_number"] == "555-0100"

    search = await sql_client.get("/search", params={"query": "silk"})
    assert [item["id"] for item in search.json()["listings"]] == [1]
