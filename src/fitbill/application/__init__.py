"""
Application layer - Use cases, DTOs, and service factories.

Use cases are the only entry point for API handlers.
"""

from fitbill.application.dto import (
    CreateInvoiceRequest,
    CreateInvoiceResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    ResendInvoiceResponse,
)
from fitbill.application.use_cases import (
    CreateInvoiceUseCase,
    GetInvoicePdfUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ResendInvoiceUseCase,
)

__all__ = [
    # DTOs
    "CreateInvoiceRequest",
    "CreateInvoiceResponse",
    "ErrorResponse",
    "HealthResponse",
    "InvoiceListResponse",
    "InvoiceResponse",
    "ResendInvoiceResponse",
    # Use cases
    "CreateInvoiceUseCase",
    "GetInvoicePdfUseCase",
    "GetInvoiceUseCase",
    "ListInvoicesUseCase",
    "ResendInvoiceUseCase",
]
