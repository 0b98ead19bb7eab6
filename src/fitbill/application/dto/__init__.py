"""Data transfer objects for the API boundary."""

from fitbill.application.dto.requests import CreateInvoiceRequest
from fitbill.application.dto.responses import (
    ClientSummaryResponse,
    CreateInvoiceResponse,
    DispatchResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceDetailResponse,
    InvoiceListResponse,
    InvoiceResponse,
    ProviderHealthResponse,
    ResendInvoiceResponse,
)

__all__ = [
    # Requests
    "CreateInvoiceRequest",
    # Responses
    "ClientSummaryResponse",
    "CreateInvoiceResponse",
    "DispatchResponse",
    "ErrorResponse",
    "HealthResponse",
    "InvoiceDetailResponse",
    "InvoiceListResponse",
    "InvoiceResponse",
    "ProviderHealthResponse",
    "ResendInvoiceResponse",
]
