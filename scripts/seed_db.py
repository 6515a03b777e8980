import asyncio
import sys
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from rentwear.api.deps import AsyncSessionLocal, engine  # noqa: E402
from rentwear.domain.entities.listing import Listing, RentalType  # noqa: E402
from rentwear.infrastructure.db.engine import session_scope  # noqa: E402
from rentwear.infrastructure.db.repositories.listing_repo_sql import ListingRepoSQL  # noqa: E402
from rentwear.infrastructure.db.tables import metadata  # noqa: E402

SAMPLE_LISTINGS = [
    Listing(
        owner_id="seed-owner-1",
        title="Red silk evening dress",
        item_type="Dress",
        size="M",
        condition="Like new",
        wash_instructions="Dry clean only",
        rental_type=RentalType.RENT,
        price_per_day=Decimal("5.00"),
        available_from=date(2025, 1, 1),
        available_to=date(2025, 12, 31),
        phone="555-0100",
        contact_email="owner1@example.com",
    ),
    Listing(
        owner_id="seed-owner-2",
        title="Wool winter coat",
        item_type="Coat",
        size="L",
        condition="Good",
        rental_type=RentalType.FREE,
        available_from=date(2025, 1, 1),
        available_to=date(2025, 3, 31),
        phone="555-0101",
        contact_email="owner2@example.com",
    ),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created missing tables.")

    async with session_scope(AsyncSessionLocal) as session:
        repo = ListingRepoSQL(session)
        for listing in SAMPLE_LISTINGS:
            listing.created_at = datetime.now(timezone.utc)
            saved = await repo.create(listing)
            print(f"Seeded listing {saved.id}: {saved.title}")


if __name__ == "__main__":
    asyncio.run(seed())
