import logging
from dataclasses import dataclass

from rentwear.api.schemas.listings import CreateListingResponse, ListingForm, OwnedListing
from rentwear.application.booking_rules import resolve_account_id
from rentwear.application.interfaces.clock import Clock
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.listing_repo import ListingRepo
from rentwear.application.interfaces.object_store import ObjectStore
from rentwear.application.interfaces.transaction_manager import TransactionManager
from rentwear.domain.entities.listing import Listing


@dataclass
class UploadedImage:
    filename: str
    content: bytes
    content_type: str | None = None


class CreateListingUseCase:
    def __init__(
        self,
        listing_repo: ListingRepo,
        identity_resolver: IdentityResolver,
        object_store: ObjectStore,
        transaction_manager: TransactionManager,
        clock: Clock,
        currency_code: str = "USD",
    ) -> None:
        self._listing_repo = listing_repo
        self._identity_resolver = identity_resolver
        self._object_store = object_store
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._currency_code = currency_code
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        form: ListingForm,
        owner_email: str | None,
        image: UploadedImage | None = None,
    ) -> CreateListingResponse:
        owner_id = await resolve_account_id(self._identity_resolver, owner_email)

        image_url = None
        if image and image.content:
            now = self._clock.now()
            object_name = f"{int(now.timestamp() * 1000)}_{image.filename}"
            image_url = await self._object_store.upload(
                name=object_name,
                content=image.content,
                content_type=image.content_type,
            )

        listing = Listing(
            owner_id=owner_id,
            title=form.title,
            item_type=form.item_type,
            size=form.size,
            condition=form.condition,
            wash_instructions=form.wash_instructions,
            rental_type=form.rental_type,
            price_per_day=form.price_per_day,
            currency_code=self._currency_code,
            available_from=form.start_date,
            available_to=form.end_date,
            image_url=image_url,
            phone=form.phone_number,
            contact_email=str(form.contact_email),
            created_at=self._clock.now(),
        )
        async with self._transaction_manager.start():
            saved = await self._listing_repo.create(listing)

        self._logger.info(
            "Listing posted",
            extra={
                "listing_id": saved.id,
                "owner_id": owner_id,
                "rental_type": saved.rental_type.value,
                "has_image": image_url is not None,
            },
        )
        return CreateListingResponse(listing=OwnedListing.from_entity(saved))
