"""Core domain services."""

from fitbill.core.services.email_dispatcher import EmailDispatcher
from fitbill.core.services.formatting import format_currency, format_date, format_months
from fitbill.core.services.invoice_delivery import DeliveryOutcome, InvoiceDeliveryService
from fitbill.core.services.invoice_email import (
    NO_PDF_NOTICE,
    InvoiceEmailComposer,
    attachment_filename,
)
from fitbill.core.services.invoice_number import InvoiceNumberGenerator

__all__ = [
    "EmailDispatcher",
    "InvoiceDeliveryService",
    "DeliveryOutcome",
    "InvoiceEmailComposer",
    "InvoiceNumberGenerator",
    "NO_PDF_NOTICE",
    "attachment_filename",
    "format_currency",
    "format_date",
    "format_months",
]
