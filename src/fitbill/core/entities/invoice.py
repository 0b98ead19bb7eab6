"""
Invoice domain entities with Pydantic v2 validation.

Amounts are Decimal end to end; the total is always derived from the
paid and remaining parts and is never stored on its own.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, computed_field, field_validator

from fitbill.core.entities.client import Client


class InvoiceStatus(str, Enum):
    """Delivery status of a persisted invoice."""

    DRAFT = "draft"
    SENT = "sent"
    FAILED = "failed"


class ClientSummary(BaseModel):
    """Client fields embedded in invoice listings."""

    id: str
    full_name: str
    email: str | None = None


class Invoice(BaseModel):
    """
    Persisted invoice record.

    Created as DRAFT, then moved to SENT or FAILED by the delivery step.
    ``email_sent_at`` is written only together with a SENT status.
    """

    id: str | None = None
    invoice_number: str
    client_id: str
    amount_paid: Decimal
    amount_remaining: Decimal
    payment_date: date
    subscription_months: int = Field(ge=1)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    email_sent_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Populated by list queries only
    client: ClientSummary | None = None

    @field_validator("amount_paid", "amount_remaining", mode="before")
    @classmethod
    def coerce_decimal(cls, v: object) -> Decimal:
        """Go through str() so floats keep their printed value."""
        if isinstance(v, Decimal):
            return v
        if isinstance(v, (int, float, str)):
            return Decimal(str(v))
        raise TypeError(f"Cannot convert {type(v).__name__} to Decimal")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> Decimal:
        return self.amount_paid + self.amount_remaining


class InvoiceDocument(BaseModel):
    """Everything the PDF and the email need to describe one invoice."""

    invoice_number: str
    client_name: str
    client_email: str
    amount_paid: Decimal
    amount_remaining: Decimal
    payment_date: date
    subscription_months: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> Decimal:
        return self.amount_paid + self.amount_remaining

    @property
    def is_paid_in_full(self) -> bool:
        return self.amount_remaining == 0

    @classmethod
    def from_invoice(cls, invoice: Invoice, client: Client) -> "InvoiceDocument":
        """Build the render payload from a stored invoice and its client."""
        return cls(
            invoice_number=invoice.invoice_number,
            client_name=client.full_name,
            client_email=(client.email or "").strip(),
            amount_paid=invoice.amount_paid,
            amount_remaining=invoice.amount_remaining,
            payment_date=invoice.payment_date,
            subscription_months=invoice.subscription_months,
        )
