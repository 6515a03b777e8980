from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rentwear.api.deps import AsyncSessionLocal
from rentwear.application.interfaces.clock import SystemClock
from rentwear.application.interfaces.id_generator import RealIdGenerator
from rentwear.application.interfaces.identity_resolver import IdentityResolver
from rentwear.application.interfaces.object_store import ObjectStore
from rentwear.application.interfaces.payment_gateway import PaymentGateway
from rentwear.application.use_cases.book_listing import BookListingUseCase
from rentwear.application.use_cases.create_listing import CreateListingUseCase
from rentwear.application.use_cases.get_rental_contact import GetRentalContactUseCase
from rentwear.application.use_cases.list_rentals import ListRentalsUseCase
from rentwear.application.use_cases.request_free_rental import RequestFreeRentalUseCase
from rentwear.application.use_cases.search_listings import SearchListingsUseCase
from rentwear.config import Settings, get_settings
from rentwear.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from rentwear.infrastructure.db.repositories.listing_repo_sql import ListingRepoSQL
from rentwear.infrastructure.db.repositories.rental_repo_sql import RentalRepoSQL
from rentwear.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from rentwear.infrastructure.gateways.identity_http import HttpIdentityResolver
from rentwear.infrastructure.gateways.object_store_http import HttpObjectStore
from rentwear.infrastructure.gateways.stripe_payment_gateway import StripePaymentGateway
from rentwear.infrastructure.in_memory import (
    InMemoryIdempotencyRepo,
    InMemoryIdentityResolver,
    InMemoryListingRepo,
    InMemoryObjectStore,
    InMemoryRentalRepo,
    NoopTransactionManager,
    StubPaymentGateway,
)

_id_generator = RealIdGenerator()
_clock = SystemClock()


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle():
    listing_repo = InMemoryListingRepo()
    return {
        "listing_repo": listing_repo,
        "rental_repo": InMemoryRentalRepo(listing_repo=listing_repo),
        "idempotency_repo": InMemoryIdempotencyRepo(),
        "tx_manager": NoopTransactionManager(),
        "payment_gateway": StubPaymentGateway(),
        # Demo mode: any email is a known account
        "identity_resolver": InMemoryIdentityResolver(auto_register=True),
        "object_store": InMemoryObjectStore(),
    }


@lru_cache(maxsize=4)
def _stripe_gateway(
    api_key: str | None,
    environment: str,
    timeout_seconds: float,
    max_network_retries: int,
) -> StripePaymentGateway:
    return StripePaymentGateway(
        api_key=api_key,
        environment=environment,
        timeout_seconds=timeout_seconds,
        max_network_retries=max_network_retries,
    )


@lru_cache(maxsize=4)
def _http_identity_resolver(
    base_url: str, api_key: str | None, timeout_seconds: float
) -> HttpIdentityResolver:
    return HttpIdentityResolver(base_url=base_url, api_key=api_key, timeout_seconds=timeout_seconds)


@lru_cache(maxsize=4)
def _http_object_store(
    base_url: str, bucket: str, api_key: str | None, timeout_seconds: float
) -> HttpObjectStore:
    return HttpObjectStore(
        base_url=base_url, bucket=bucket, api_key=api_key, timeout_seconds=timeout_seconds
    )


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> PaymentGateway:
    if settings.use_in_memory:
        return _in_memory_bundle()["payment_gateway"]
    return _stripe_gateway(
        settings.stripe_api_key,
        settings.payment_environment,
        settings.payment_timeout_seconds,
        settings.payment_max_network_retries,
    )


def get_identity_resolver(settings: Settings = Depends(get_settings)) -> IdentityResolver:
    if settings.use_in_memory:
        return _in_memory_bundle()["identity_resolver"]
    if not settings.identity_url:
        raise RuntimeError("IDENTITY_URL is required when USE_IN_MEMORY is false")
    return _http_identity_resolver(
        settings.identity_url, settings.identity_api_key, settings.http_timeout_seconds
    )


def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    if settings.use_in_memory:
        return _in_memory_bundle()["object_store"]
    if not settings.object_store_url:
        raise RuntimeError("OBJECT_STORE_URL is required when USE_IN_MEMORY is false")
    return _http_object_store(
        settings.object_store_url,
        settings.object_store_bucket,
        settings.object_store_api_key,
        settings.http_timeout_seconds,
    )


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    payment_gateway: PaymentGateway = Depends(get_payment_gateway),
    identity_resolver: IdentityResolver = Depends(get_identity_resolver),
    object_store: ObjectStore = Depends(get_object_store),
):
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        listing_repo = bundle["listing_repo"]
        rental_repo = bundle["rental_repo"]
        idempotency_repo = bundle["idempotency_repo"]
        tx_manager = bundle["tx_manager"]
    else:
        if not session:
            raise RuntimeError("DB session not available")
        listing_repo = ListingRepoSQL(session)
        rental_repo = RentalRepoSQL(session)
        idempotency_repo = IdempotencyRepoSQL(session)
        tx_manager = SQLAlchemyTransactionManager(session)

    return {
        "create_listing": CreateListingUseCase(
            listing_repo=listing_repo,
            identity_resolver=identity_resolver,
            object_store=object_store,
            transaction_manager=tx_manager,
            clock=_clock,
            currency_code=settings.currency_code,
        ),
        "search_listings": SearchListingsUseCase(listing_repo=listing_repo),
        "book_listing": BookListingUseCase(
            listing_repo=listing_repo,
            rental_repo=rental_repo,
            idempotency_repo=idempotency_repo,
            payment_gateway=payment_gateway,
            identity_resolver=identity_resolver,
            transaction_manager=tx_manager,
            id_generator=_id_generator,
            clock=_clock,
        ),
        "request_free_rental": RequestFreeRentalUseCase(
            listing_repo=listing_repo,
            rental_repo=rental_repo,
            identity_resolver=identity_resolver,
            transaction_manager=tx_manager,
            id_generator=_id_generator,
            clock=_clock,
        ),
        "list_rentals": ListRentalsUseCase(
            rental_repo=rental_repo,
            identity_resolver=identity_resolver,
        ),
        "get_rental_contact": GetRentalContactUseCase(
            rental_repo=rental_repo,
            listing_repo=listing_repo,
            identity_resolver=identity_resolver,
        ),
    }
