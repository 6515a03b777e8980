from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

listings = Table(
    "listings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("title", String(255), nullable=False),
    Column("item_type", String(100), nullable=False),
    Column("size", String(50), nullable=False),
    Column("condition", String(100), nullable=False),
    Column("wash_instructions", String(1000)),
    Column("rental_type", String(8), nullable=False),
    Column("price_per_day", Numeric(12, 2)),
    Column("currency_code", String(3), nullable=False),
    Column("available_from", Date, nullable=False),
    Column("available_to", Date, nullable=False),
    Column("image_url", String(1024)),
    Column("phone_number", String(50)),
    Column("contact_email", String(255)),
    Column("created_at", DateTime(timezone=True)),
    CheckConstraint("available_from <= available_to", name="ck_listings_availability"),
    CheckConstraint(
        "(rental_type = 'rent' AND price_per_day IS NOT NULL) "
        "OR (rental_type = 'free' AND price_per_day IS NULL)",
        name="ck_listings_pricing",
    ),
)

rentals = Table(
    "rentals",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("listing_id", Integer, ForeignKey("listings.id"), nullable=False),
    Column("renter_id", String(64), nullable=False, index=True),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=False),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("payment_id", String(64)),
    Column("status", String(16), nullable=False),
    Column("idempotency_key", String(128)),
    Column("pickup_location", String(255)),
    Column("dropoff_location", String(255)),
    Column("created_at", DateTime(timezone=True)),
    UniqueConstraint("idempotency_key", name="uq_rentals_idempotency_key"),
    CheckConstraint("start_date <= end_date", name="ck_rentals_period"),
    CheckConstraint(
        "status <> 'confirmed' OR payment_id IS NOT NULL",
        name="ck_rentals_confirmed_payment",
    ),
)

# One row per occupied day of a confirmed rental. The unique key is the
# overlap guard: two confirmed rentals can never hold the same listing day.
rental_days = Table(
    "rental_days",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("listing_id", Integer, nullable=False),
    Column("day", Date, nullable=False),
    Column("rental_id", String(36), ForeignKey("rentals.id"), nullable=False),
    UniqueConstraint("listing_id", "day", name="uq_rental_days_listing_day"),
)

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(32), nullable=False),
    Column("idem_key", String(128), nullable=False),
    Column("request_hash", String(64), nullable=False),
    Column("response_json", JSON),
    Column("http_status", Integer),
    Column("reference_rental_id", String(36)),
    UniqueConstraint("scope", "idem_key", name="uq_idempotency_scope_key"),
)
