"""Core domain entities."""

from fitbill.core.entities.client import Client
from fitbill.core.entities.email import (
    DispatchResult,
    EmailAttachment,
    EmailMessage,
    ProviderKind,
)
from fitbill.core.entities.invoice import (
    ClientSummary,
    Invoice,
    InvoiceDocument,
    InvoiceStatus,
)

__all__ = [
    # Client
    "Client",
    # Invoice
    "ClientSummary",
    "Invoice",
    "InvoiceDocument",
    "InvoiceStatus",
    # Email
    "DispatchResult",
    "EmailAttachment",
    "EmailMessage",
    "ProviderKind",
]
