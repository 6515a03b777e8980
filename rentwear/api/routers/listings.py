from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status
from pydantic import ValidationError as SchemaValidationError

from rentwear.api.dependencies import get_use_cases
from rentwear.api.schemas.listings import CreateListingResponse, ListingForm, SearchListingsResponse
from rentwear.application.use_cases.create_listing import UploadedImage
from rentwear.domain.errors import ValidationError

router = APIRouter()


def _first_error(exc: SchemaValidationError) -> ValidationError:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "form"
    return ValidationError(field, error.get("msg", "is invalid"))


@router.post(
    "/listings",
    response_model=CreateListingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_listing(
    title: str | None = Form(default=None),
    size: str | None = Form(default=None),
    item_type: str | None = Form(default=None, alias="itemType"),
    condition: str | None = Form(default=None),
    wash_instructions: str | None = Form(default=None, alias="washInstructions"),
    start_date: str | None = Form(default=None, alias="startDate"),
    end_date: str | None = Form(default=None, alias="endDate"),
    price_per_day: str | None = Form(default=None, alias="pricePerDay"),
    rental_type: str | None = Form(default=None, alias="rentalType"),
    phone_number: str | None = Form(default=None, alias="phoneNumber"),
    contact_email: str | None = Form(default=None, alias="contactEmail"),
    image: UploadFile | None = File(default=None),
    user_id: str | None = Header(default=None, alias="user-id"),
    use_cases=Depends(get_use_cases),
) -> CreateListingResponse:
    fields = {
        "title": title,
        "size": size,
        "itemType": item_type,
        "condition": condition,
        "washInstructions": wash_instructions,
        "startDate": start_date,
        "endDate": end_date,
        "pricePerDay": price_per_day,
        "rentalType": rental_type,
        "phoneNumber": phone_number,
        "contactEmail": contact_email,
    }
    try:
        form = ListingForm.model_validate({k: v for k, v in fields.items() if v is not None})
    except SchemaValidationError as exc:
        raise _first_error(exc) from exc

    uploaded = None
    if image is not None and image.filename:
        uploaded = UploadedImage(
            filename=image.filename,
            content=await image.read(),
            content_type=image.content_type,
        )
    return await use_cases["create_listing"].execute(form=form, owner_email=user_id, image=uploaded)


@router.get(
    "/search",
    response_model=SearchListingsResponse,
)
async def search_listings(
    query: str | None = Query(default=None, max_length=200),
    use_cases=Depends(get_use_cases),
) -> SearchListingsResponse:
    return await use_cases["search_listings"].execute(query=query)
