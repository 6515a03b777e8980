from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr

from rentwear.api.schemas.common import CamelModel, Money, PositiveMoney
from rentwear.domain.entities.rental import RentalStatus, RentalSummary


class ProcessPaymentRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    source_id: constr(strip_whitespace=True, min_length=1, max_length=255)
    amount: PositiveMoney | None = None
    listing_id: int
    start_date: date
    end_date: date
    user_email: EmailStr
    pickup_location: str
    dropoff_location: str


class ProcessPaymentResponse(CamelModel):
    success: bool = True
    payment_id: str
    rental_id: str
    total_amount: Money
    currency_code: str = "USD"


class FreeRentalRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    listing_id: int
    start_date: date
    end_date: date
    user_email: EmailStr
    pickup_location: str
    dropoff_location: str


class FreeRentalResponse(CamelModel):
    success: bool = True
    rental_id: str
    status: RentalStatus = RentalStatus.PENDING


class RentalListing(CamelModel):
    title: str
    size: str
    item_type: str
    image_url: str | None = None
    price_per_day: Money | None = None


class RentalEntry(CamelModel):
    id: str
    listing_id: int
    renter_id: str
    start_date: date
    end_date: date
    total_amount: Money
    currency_code: str
    payment_id: str | None = None
    status: RentalStatus
    pickup_location: str | None = None
    dropoff_location: str | None = None
    created_at: datetime | None = None
    listing: RentalListing | None = None

    @classmethod
    def from_summary(cls, summary: RentalSummary) -> "RentalEntry":
        rental = summary.rental
        listing = None
        if summary.listing:
            listing = RentalListing(
                title=summary.listing.title,
                size=summary.listing.size,
                item_type=summary.listing.item_type,
                image_url=summary.listing.image_url,
                price_per_day=summary.listing.price_per_day,
            )
        return cls(
            id=rental.id,
            listing_id=rental.listing_id,
            renter_id=rental.renter_id,
            start_date=rental.start_date,
            end_date=rental.end_date,
            total_amount=rental.total_amount,
            currency_code=rental.currency_code,
            payment_id=rental.payment_id,
            status=rental.status,
            pickup_location=rental.pickup_location,
            dropoff_location=rental.dropoff_location,
            created_at=rental.created_at,
            listing=listing,
        )


class RentalsResponse(CamelModel):
    success: bool = True
    rentals: list[RentalEntry] = Field(default_factory=list)


class ContactInfoResponse(BaseModel):
    success: bool = True
    phone_number: str | None = None
    contact_email: str | None = None
