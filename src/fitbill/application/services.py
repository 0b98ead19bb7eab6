"""
Service factory functions for dependency injection.

Wires infrastructure implementations to core services. Use cases import
from here; the core layer never imports infrastructure.
"""

from typing import TYPE_CHECKING

from fitbill.config import get_settings
from fitbill.core.services import (
    EmailDispatcher,
    InvoiceDeliveryService,
    InvoiceEmailComposer,
    InvoiceNumberGenerator,
)

if TYPE_CHECKING:
    from fitbill.core.interfaces import IInvoicePdfRenderer, IInvoiceStore


# Singleton service instances
_pdf_renderer: "IInvoicePdfRenderer | None" = None
_email_dispatcher: EmailDispatcher | None = None


def get_pdf_renderer() -> "IInvoicePdfRenderer":
    """Get or create the invoice PDF renderer."""
    global _pdf_renderer
    if _pdf_renderer is None:
        from fitbill.infrastructure.pdf import Fpdf2InvoiceRenderer

        _pdf_renderer = Fpdf2InvoiceRenderer(get_settings().pdf)
    return _pdf_renderer


def get_email_dispatcher() -> EmailDispatcher:
    """
    Get or create the email dispatcher.

    Providers check their credentials on every send, so one instance
    serves the whole process.
    """
    global _email_dispatcher
    if _email_dispatcher is None:
        from fitbill.infrastructure.email import build_email_dispatcher

        _email_dispatcher = build_email_dispatcher(get_settings().email)
    return _email_dispatcher


def get_invoice_composer() -> InvoiceEmailComposer:
    settings = get_settings()
    return InvoiceEmailComposer(
        company_name=settings.pdf.company_name,
        support_email=settings.pdf.support_email,
        base_url=settings.invoice.base_url,
    )


def get_number_generator(invoice_store: "IInvoiceStore") -> InvoiceNumberGenerator:
    return InvoiceNumberGenerator(
        invoice_store,
        max_attempts=get_settings().invoice.number_max_attempts,
    )


def get_delivery_service(
    invoice_store: "IInvoiceStore",
    renderer: "IInvoicePdfRenderer | None" = None,
    dispatcher: EmailDispatcher | None = None,
    composer: InvoiceEmailComposer | None = None,
) -> InvoiceDeliveryService:
    """
    Build the render + send + status-update service.

    Args:
        invoice_store: Store that receives the status update
        renderer: Optional renderer override
        dispatcher: Optional dispatcher override
        composer: Optional composer override
    """
    return InvoiceDeliveryService(
        invoice_store=invoice_store,
        renderer=renderer or get_pdf_renderer(),
        dispatcher=dispatcher or get_email_dispatcher(),
        composer=composer or get_invoice_composer(),
        render_timeout=get_settings().pdf.render_timeout,
    )


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _pdf_renderer, _email_dispatcher
    _pdf_renderer = None
    _email_dispatcher = None
