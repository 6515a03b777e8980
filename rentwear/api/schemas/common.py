from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Two-decimal string on the wire ("15.00"), Decimal in Python.
_as_cents_string = PlainSerializer(lambda v: format(v, ".2f"), return_type=str, when_used="json")

Money = Annotated[Decimal, Field(max_digits=12, decimal_places=2), _as_cents_string]
PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2), _as_cents_string]


class CamelModel(BaseModel):
    """Base for payloads exchanged with the web client (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = False
    message: str
    code: str | None = None
    idempotency_key: str | None = None
    error_id: str | None = Field(default=None, alias="error_id")
