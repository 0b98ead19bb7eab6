"""Core interfaces (ports) for dependency injection."""

from fitbill.core.interfaces.email import IEmailProvider
from fitbill.core.interfaces.pdf import IInvoicePdfRenderer
from fitbill.core.interfaces.storage import IClientStore, IInvoiceStore

__all__ = [
    # Storage
    "IInvoiceStore",
    "IClientStore",
    # Rendering
    "IInvoicePdfRenderer",
    # Email
    "IEmailProvider",
]
