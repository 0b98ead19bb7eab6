"""Application use cases."""

from fitbill.application.use_cases.create_invoice import (
    CreateInvoiceResult,
    CreateInvoiceUseCase,
    validate_fields,
)
from fitbill.application.use_cases.get_invoice import GetInvoiceUseCase
from fitbill.application.use_cases.get_invoice_pdf import GetInvoicePdfUseCase, InvoicePdf
from fitbill.application.use_cases.list_invoices import InvoicePage, ListInvoicesUseCase
from fitbill.application.use_cases.resend_invoice import (
    ResendInvoiceResult,
    ResendInvoiceUseCase,
)

__all__ = [
    "CreateInvoiceResult",
    "CreateInvoiceUseCase",
    "GetInvoicePdfUseCase",
    "GetInvoiceUseCase",
    "InvoicePage",
    "InvoicePdf",
    "ListInvoicesUseCase",
    "ResendInvoiceResult",
    "ResendInvoiceUseCase",
    "validate_fields",
]
