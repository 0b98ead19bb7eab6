"""
Invoice delivery: render the PDF, email it, record the outcome.

Shared by invoice creation and resend. A PDF failure never stops the
email; the message goes out without an attachment and says so.
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime

from fitbill.config import get_logger
from fitbill.core.entities import (
    Client,
    DispatchResult,
    Invoice,
    InvoiceDocument,
    InvoiceStatus,
)
from fitbill.core.exceptions import StorageError
from fitbill.core.interfaces import IInvoicePdfRenderer, IInvoiceStore
from fitbill.core.services.email_dispatcher import EmailDispatcher
from fitbill.core.services.invoice_email import InvoiceEmailComposer

logger = get_logger(__name__)


@dataclass
class DeliveryOutcome:
    """Result of one render + send + status update pass."""

    invoice: Invoice
    dispatch: DispatchResult
    pdf_attached: bool


class InvoiceDeliveryService:
    """Runs the render, send and status-update steps for one invoice."""

    def __init__(
        self,
        invoice_store: IInvoiceStore,
        renderer: IInvoicePdfRenderer,
        dispatcher: EmailDispatcher,
        composer: InvoiceEmailComposer,
        render_timeout: float = 30.0,
    ):
        self._store = invoice_store
        self._renderer = renderer
        self._dispatcher = dispatcher
        self._composer = composer
        self._render_timeout = render_timeout

    async def deliver(self, invoice: Invoice, client: Client) -> DeliveryOutcome:
        """Deliver a persisted invoice to its client."""
        if invoice.id is None:
            raise ValueError("Invoice must be persisted before delivery")

        document = InvoiceDocument.from_invoice(invoice, client)

        pdf_bytes = await self.render_pdf(document)
        message = self._composer.compose(document, pdf_bytes)
        dispatch = await self._dispatcher.send(message)

        updated = await self._record_status(invoice, dispatch)

        logger.info(
            "invoice_delivered" if dispatch.accepted else "invoice_delivery_failed",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            status=updated.status.value,
            provider=dispatch.provider_used.value,
            pdf_attached=pdf_bytes is not None,
        )

        return DeliveryOutcome(
            invoice=updated,
            dispatch=dispatch,
            pdf_attached=pdf_bytes is not None,
        )

    async def render_pdf(self, document: InvoiceDocument) -> bytes | None:
        """Render in a worker thread; None when rendering fails or times out."""
        try:
            # The worker thread is not interruptible; a timed-out render finishes unobserved
            return await asyncio.wait_for(
                asyncio.to_thread(self._renderer.render, document),
                timeout=self._render_timeout,
            )
        except TimeoutError:
            logger.error(
                "invoice_pdf_render_timeout",
                invoice_number=document.invoice_number,
                timeout_seconds=self._render_timeout,
            )
        except Exception as e:
            logger.error(
                "invoice_pdf_render_failed",
                invoice_number=document.invoice_number,
                error=str(e),
                error_type=e.__class__.__name__,
            )
        return None

    async def _record_status(self, invoice: Invoice, dispatch: DispatchResult) -> Invoice:
        if dispatch.accepted:
            status, sent_at = InvoiceStatus.SENT, datetime.now(UTC)
        else:
            status, sent_at = InvoiceStatus.FAILED, None

        try:
            return await self._store.update_invoice_status(
                invoice.id,  # type: ignore[arg-type]
                status,
                email_sent_at=sent_at,
            )
        except StorageError as e:
            # The record keeps its last persisted status
            logger.error(
                "invoice_status_update_failed",
                invoice_id=invoice.id,
                target_status=status.value,
                error=str(e),
            )
            return invoice
