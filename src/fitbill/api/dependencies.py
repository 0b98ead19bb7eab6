"""
Dependency injection container for FastAPI.

Provides use cases and services to route handlers. Tests swap these
out through ``app.dependency_overrides``.
"""

from fitbill.application.services import get_email_dispatcher
from fitbill.application.use_cases import (
    CreateInvoiceUseCase,
    GetInvoicePdfUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ResendInvoiceUseCase,
)
from fitbill.core.services import EmailDispatcher


def get_create_invoice_use_case() -> CreateInvoiceUseCase:
    return CreateInvoiceUseCase()


def get_resend_invoice_use_case() -> ResendInvoiceUseCase:
    return ResendInvoiceUseCase()


def get_list_invoices_use_case() -> ListInvoicesUseCase:
    return ListInvoicesUseCase()


def get_get_invoice_use_case() -> GetInvoiceUseCase:
    return GetInvoiceUseCase()


def get_invoice_pdf_use_case() -> GetInvoicePdfUseCase:
    return GetInvoicePdfUseCase()


def get_dispatcher() -> EmailDispatcher:
    """Get the process-wide email dispatcher."""
    return get_email_dispatcher()
