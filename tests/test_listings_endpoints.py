from fastapi.testclient import TestClient

OWNER = {"user-id": "owner@example.com"}

RENT_FORM = {
    "title": "Red silk dress",
    "size": "M",
    "itemType": "Dress",
    "condition": "Like new",
    "washInstructions": "Dry clean only",
    "startDate": "2024-06-01",
    "endDate": "2024-08-30",
    "rentalType": "rent",
    "pricePerDay": "5.00",
    "phoneNumber": "555-0100",
    "contactEmail": "owner@example.com",
}


def test_post_rent_listing(client: TestClient):
    response = client.post("/listings", data=RENT_FORM, headers=OWNER)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Listing posted successfully"
    listing = body["listing"]
    assert listing["id"] == 1
    assert listing["pricePerDay"] == "5.00"
    assert listing["rentalType"] == "rent"
    assert listing["startDate"] == "2024-06-01"
    assert listing["phoneNumber"] == "555-0100"


def test_rent_listing_requires_price(client: TestClient):
    form = {k: v for k, v in RENT_FORM.items() if k != "pricePerDay"}

    response = client.post("/listings", data=form, headers=OWNER)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["success"] is False


def test_rent_listing_rejects_zero_price(client: TestClient):
    response = client.post("/listings", data={**RENT_FORM, "pricePerDay": "0"}, headers=OWNER)
    assert response.status_code == 400


def test_free_listing_ignores_price(client: TestClient):
    response = client.post(
        "/listings",
        data={**RENT_FORM, "rentalType": "free", "pricePerDay": ""},
        headers=OWNER,
    )

    assert response.status_code == 201
    assert response.json()["listing"]["pricePerDay"] is None
    assert response.json()["listing"]["rentalType"] == "free"


def test_end_before_start_is_rejected(client: TestClient):
    response = client.post(
        "/listings",
        data={**RENT_FORM, "startDate": "2024-06-10", "endDate": "2024-06-01"},
        headers=OWNER,
    )
    assert response.status_code == 400


def test_listing_requires_user(client: TestClient):
    response = client.post("/listings", data=RENT_FORM)

    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_REQUIRED"


def test_listing_with_image(client: TestClient, memory_bundle):
    response = client.post(
        "/listings",
        data=RENT_FORM,
        files={"image": ("dress.jpg", b"jpeg-bytes", "image/jpeg")},
        headers=OWNER,
    )

    assert response.status_code == 201
    image_url = response.json()["listing"]["imageUrl"]
    assert image_url.startswith("memory://clothing-images/")
    assert image_url.endswith("_dress.jpg")
    assert len(memory_bundle["object_store"].objects) == 1


def test_search_hides_contact_information(client: TestClient):
    client.post("/listings", data=RENT_FORM, headers=OWNER)
    client.post("/listings", data={**RENT_FORM, "title": "Wool coat", "itemType": "Coat"}, headers=OWNER)

    response = client.get("/search", params={"query": "coat"})

    assert response.status_code == 200
    listings = response.json()["listings"]
    assert [item["title"] for item in listings] == ["Wool coat"]
    assert "phoneNumber" not in listings[0]
    assert "contactEmail" not in listings[0]


def test_search_without_query_returns_everything(client: TestClient):
    client.post("/listings", data=RENT_FORM, headers=OWNER)

    response = client.get("/search")

    assert response.status_code == 200
    assert len(response.json()["listings"]) == 1


def test_rental_type_is_required(client: TestClient):
    form = {k: v for k, v in RENT_FORM.items() if k != "rentalType"}

    response = client.post("/listings", data=form, headers=OWNER)

    assert response.status_code == 400
    assert "rentalType" in response.json()["message"]
