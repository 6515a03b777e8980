import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rentwear.api.deps import engine
from rentwear.api.routers.health import router as health_router
from rentwear.api.routers.listings import router as listings_router
from rentwear.api.routers.rentals import router as rentals_router
from rentwear.api.schemas.common import ErrorResponse
from rentwear.config import get_settings
from rentwear.domain.errors import (
    AuthenticationRequiredError,
    ConflictError,
    DomainError,
    GatewayError,
    IdempotencyConflictError,
    InvalidDateRangeError,
    NotFoundError,
    NotYetAvailableError,
    PaymentDeclinedError,
    StorageError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)
from rentwear.infrastructure.db.tables import metadata

settings = get_settings()

# Configure structured logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# First match wins; subclasses go before their parents.
ERROR_STATUS: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (InvalidDateRangeError, 400),
    (AuthenticationRequiredError, 401),
    (UnauthorizedError, 403),
    (NotYetAvailableError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IdempotencyConflictError, 409),
    (PaymentDeclinedError, 402),
    (GatewayError, 502),
    (TransientError, 503),
    (StorageError, 500),
]


def status_for(error: DomainError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title="RentWear API",
    version="0.1.0",
    lifespan=lifespan
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status_code = status_for(exc)
    body = ErrorResponse(message=exc.message, code=exc.code)

    if isinstance(exc, (TransientError, StorageError)):
        body.idempotency_key = exc.idem_key
    if isinstance(exc, GatewayError) and not isinstance(exc, PaymentDeclinedError):
        # Never leak processor internals
        body.message = "Payment processing failed"

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": status_code,
            "code": exc.code,
            "idempotency_key": getattr(exc, "idem_key", None),
        },
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "header")]
        field = ".".join(location) or "request"
        message = ValidationError(field, first.get("msg", "is invalid")).message
    body = ErrorResponse(message=message, code="VALIDATION_ERROR")
    return JSONResponse(status_code=400, content=body.model_dump(by_alias=True, exclude_none=True))


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    body = ErrorResponse(
        message="An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        code="INTERNAL_ERROR",
        error_id=error_id,
    )
    return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, exclude_none=True))


app.include_router(health_router, tags=["Health"])
app.include_router(listings_router, tags=["Listings"])
app.include_router(rentals_router, prefix="/api", tags=["Rentals"])
