"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
Fields the business rules check are optional here so that every
violation can be reported together instead of failing on the first.
Values that cannot be parsed are nulled out and named in
``malformed_fields`` so the business validation can report them.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.json_schema import SkipJsonSchema

# Field name -> (camelCase key, parser)
_LENIENT_FIELDS: dict[str, tuple[str, TypeAdapter[Any]]] = {
    "client_id": ("clientId", TypeAdapter(str)),
    "amount_paid": ("amountPaid", TypeAdapter(Decimal)),
    "amount_remaining": ("amountRemaining", TypeAdapter(Decimal)),
    "payment_date": ("paymentDate", TypeAdapter(date)),
    "subscription_months": ("subscriptionMonths", TypeAdapter(int)),
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class CreateInvoiceRequest(BaseModel):
    """Request to create and email a new invoice.

    Accepts both snake_case and the camelCase keys sent by the invoice pages.
    """

    model_config = ConfigDict(populate_by_name=True)

    client_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("client_id", "clientId"),
        description="Client to invoice",
    )
    amount_paid: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices("amount_paid", "amountPaid"),
        description="Amount received now",
        examples=[5000],
    )
    amount_remaining: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices("amount_remaining", "amountRemaining"),
        description="Outstanding balance",
        examples=[3000],
    )
    payment_date: date | None = Field(
        default=None,
        validation_alias=AliasChoices("payment_date", "paymentDate"),
        description="Date of payment (future dates allowed)",
    )
    subscription_months: int | None = Field(
        default=None,
        validation_alias=AliasChoices("subscription_months", "subscriptionMonths"),
        description="Subscription length in months",
        examples=[3],
    )
    created_by: str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_by", "createdBy"),
        description="Staff member recording the payment",
    )
    malformed_fields: SkipJsonSchema[list[str]] = Field(default_factory=list, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def collect_malformed(cls, data: Any) -> Any:
        """Null out values of the wrong type and remember which fields they were."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        malformed: list[str] = []
        for name, (camel, adapter) in _LENIENT_FIELDS.items():
            for key in (name, camel):
                if key not in data or _is_blank(data[key]):
                    continue
                try:
                    data[key] = adapter.validate_python(data[key])
                except PydanticValidationError:
                    data[key] = None
                    if name not in malformed:
                        malformed.append(name)
        data["malformed_fields"] = malformed
        return data

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Form posts send empty strings for untouched inputs."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
