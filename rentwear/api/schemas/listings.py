from datetime import date, datetime
from typing import Any

from pydantic import ConfigDict, EmailStr, Field, constr, field_validator, model_validator

from rentwear.api.schemas.common import CamelModel, Money
from rentwear.domain.entities.listing import Listing, RentalType

RequiredText = constr(strip_whitespace=True, min_length=1, max_length=255)


class ListingForm(CamelModel):
    """Fields of the multipart form used to post a listing."""

    model_config = ConfigDict(extra="forbid")

    title: RequiredText
    size: constr(strip_whitespace=True, min_length=1, max_length=50)
    item_type: constr(strip_whitespace=True, min_length=1, max_length=100)
    condition: constr(strip_whitespace=True, min_length=1, max_length=100)
    wash_instructions: constr(strip_whitespace=True, max_length=1000) | None = None
    start_date: date
    end_date: date
    rental_type: RentalType
    price_per_day: Money | None = None
    phone_number: constr(strip_whitespace=True, min_length=3, max_length=50)
    contact_email: EmailStr

    @field_validator("price_per_day", mode="before")
    @classmethod
    def blank_price_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def validate_listing(self) -> "ListingForm":
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        if self.rental_type == RentalType.RENT:
            if self.price_per_day is None:
                raise ValueError("pricePerDay is required when rentalType is 'rent'")
            if self.price_per_day <= 0:
                raise ValueError("pricePerDay must be greater than 0")
        else:
            self.price_per_day = None
        return self


class PublicListing(CamelModel):
    """Listing as shown in search results; contact data is never included."""

    id: int
    owner_id: str
    title: str
    size: str
    item_type: str
    condition: str
    wash_instructions: str | None = None
    rental_type: RentalType
    price_per_day: Money | None = None
    start_date: date
    end_date: date
    image_url: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, listing: Listing) -> "PublicListing":
        return cls(**_listing_fields(listing))


class OwnedListing(PublicListing):
    """Listing as returned to its owner right after posting it."""

    phone_number: str | None = None
    contact_email: str | None = None

    @classmethod
    def from_entity(cls, listing: Listing) -> "OwnedListing":
        return cls(
            **_listing_fields(listing),
            phone_number=listing.phone,
            contact_email=listing.contact_email,
        )


def _listing_fields(listing: Listing) -> dict[str, Any]:
    return {
        "id": listing.id,
        "owner_id": listing.owner_id,
        "title": listing.title,
        "size": listing.size,
        "item_type": listing.item_type,
        "condition": listing.condition,
        "wash_instructions": listing.wash_instructions,
        "rental_type": listing.rental_type,
        "price_per_day": listing.price_per_day,
        "start_date": listing.available_from,
        "end_date": listing.available_to,
        "image_url": listing.image_url,
        "created_at": listing.created_at,
    }


class CreateListingResponse(CamelModel):
    success: bool = True
    message: str = "Listing posted successfully"
    listing: OwnedListing


class SearchListingsResponse(CamelModel):
    success: bool = True
    listings: list[PublicListing] = Field(default_factory=list)
