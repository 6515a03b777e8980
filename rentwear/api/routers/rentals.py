from fastapi import APIRouter, Depends, Header, status

from rentwear.api.dependencies import get_use_cases
from rentwear.api.schemas.rentals import (
    ContactInfoResponse,
    FreeRentalRequest,
    FreeRentalResponse,
    ProcessPaymentRequest,
    ProcessPaymentResponse,
    RentalsResponse,
)

router = APIRouter()


@router.post(
    "/process-payment",
    response_model=ProcessPaymentResponse,
    status_code=status.HTTP_200_OK,
)
async def process_payment(
    payload: ProcessPaymentRequest,
    idem_key: str | None = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    use_cases=Depends(get_use_cases),
) -> ProcessPaymentResponse:
    """
    Charge the renter and record the rental.

    Retrying with the same Idempotency-Key after a timeout never charges twice.
    """
    return await use_cases["book_listing"].execute(request=payload, idem_key=idem_key)


@router.post(
    "/free-rentals",
    response_model=FreeRentalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_free_rental(
    payload: FreeRentalRequest,
    use_cases=Depends(get_use_cases),
) -> FreeRentalResponse:
    return await use_cases["request_free_rental"].execute(request=payload)


@router.get(
    "/rentals",
    response_model=RentalsResponse,
)
async def list_rentals(
    user_id: str | None = Header(default=None, alias="user-id"),
    use_cases=Depends(get_use_cases),
) -> RentalsResponse:
    return await use_cases["list_rentals"].execute(renter_email=user_id)


@router.get(
    "/rental-contact-info/{rental_id}",
    response_model=ContactInfoResponse,
)
async def get_rental_contact_info(
    rental_id: str,
    user_id: str | None = Header(default=None, alias="user-id"),
    use_cases=Depends(get_use_cases),
) -> ContactInfoResponse:
    return await use_cases["get_rental_contact"].execute(
        rental_id=rental_id,
        requester_email=user_id,
    )
