"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field, computed_field

from fitbill.core.entities import DispatchResult, Invoice


class ClientSummaryResponse(BaseModel):
    """Client fields shown next to an invoice."""

    id: str
    full_name: str
    email: str | None = None


class InvoiceResponse(BaseModel):
    """Invoice response DTO."""

    id: str = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="INV-YYYYMMDD-XXXX")
    client_id: str
    amount_paid: float
    amount_remaining: float
    total_amount: float = Field(..., description="amount_paid + amount_remaining")
    payment_date: date
    subscription_months: int
    status: str = Field(..., description="draft, sent or failed")
    email_sent_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    client: ClientSummaryResponse | None = None

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id or "",
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
            amount_paid=float(invoice.amount_paid),
            amount_remaining=float(invoice.amount_remaining),
            total_amount=float(invoice.total_amount),
            payment_date=invoice.payment_date,
            subscription_months=invoice.subscription_months,
            status=invoice.status.value,
            email_sent_at=invoice.email_sent_at,
            created_by=invoice.created_by,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
            client=(
                ClientSummaryResponse(**invoice.client.model_dump())
                if invoice.client
                else None
            ),
        )


class DispatchResponse(BaseModel):
    """How the invoice email went out."""

    delivered: bool
    provider_used: str = Field(..., description="primary, secondary or simulated")
    simulated: bool = False
    error_detail: str | None = None
    pdf_attached: bool = True

    @classmethod
    def from_result(cls, result: DispatchResult, pdf_attached: bool) -> "DispatchResponse":
        return cls(
            delivered=result.delivered,
            provider_used=result.provider_used.value,
            simulated=result.simulated,
            error_detail=result.error_detail,
            pdf_attached=pdf_attached,
        )


class CreateInvoiceResponse(BaseModel):
    """Response for invoice creation.

    ``success`` is false when the invoice was stored but the email failed
    (served with HTTP 207); ``error`` then says why.
    """

    success: bool
    message: str | None = None
    error: str | None = None
    invoice: InvoiceResponse
    email: DispatchResponse


class ResendInvoiceResponse(BaseModel):
    """Response for an invoice resend."""

    success: bool = True
    message: str
    invoice: InvoiceResponse
    email: DispatchResponse


class InvoiceDetailResponse(BaseModel):
    success: bool = True
    invoice: InvoiceResponse


class InvoiceListResponse(BaseModel):
    """Page of invoices, newest first, with the total match count."""

    success: bool = True
    invoices: list[InvoiceResponse] = Field(default_factory=list)
    total: int = 0
    limit: int
    offset: int


class ProviderHealthResponse(BaseModel):
    """Provider health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None
    details: dict = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None
    email: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_NOT_FOUND)
    - message: human-readable description; validation messages joined with ", "
    - errors: the individual validation messages, when there are several
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    success: bool = False
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    errors: list[str] = Field(default_factory=list)
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error(self) -> str:
        """Alias for message, the key the invoice pages read."""
        return self.message
