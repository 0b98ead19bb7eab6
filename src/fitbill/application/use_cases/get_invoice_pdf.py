"""Get Invoice PDF Use Case: render a stored invoice for download."""

import asyncio
from dataclasses import dataclass

from fitbill.config import get_logger, get_settings
from fitbill.core.entities import InvoiceDocument
from fitbill.core.exceptions import ClientNotFoundError, InvoiceNotFoundError, RenderError
from fitbill.core.interfaces import IClientStore, IInvoicePdfRenderer, IInvoiceStore
from fitbill.core.services import attachment_filename

logger = get_logger(__name__)


@dataclass
class InvoicePdf:
    filename: str
    content: bytes


class GetInvoicePdfUseCase:
    """Render the PDF of an existing invoice. Nothing is sent or updated."""

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        client_store: IClientStore | None = None,
        renderer: IInvoicePdfRenderer | None = None,
        render_timeout: float | None = None,
    ):
        self._invoice_store = invoice_store
        self._client_store = client_store
        self._renderer = renderer
        self._render_timeout = render_timeout or get_settings().pdf.render_timeout

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from fitbill.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def _get_client_store(self) -> IClientStore:
        if self._client_store is None:
            from fitbill.infrastructure.storage.sqlite import get_client_store

            self._client_store = await get_client_store()
        return self._client_store

    def _get_renderer(self) -> IInvoicePdfRenderer:
        if self._renderer is None:
            from fitbill.application.services import get_pdf_renderer

            self._renderer = get_pdf_renderer()
        return self._renderer

    async def execute(self, invoice_id: str) -> InvoicePdf:
        """
        Raises:
            InvoiceNotFoundError: No invoice with this id.
            ClientNotFoundError: The invoice's client no longer exists.
            RenderError: Rendering failed or timed out.
        """
        invoice_store = await self._get_invoice_store()
        invoice = await invoice_store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        client_store = await self._get_client_store()
        client = await client_store.get_client(invoice.client_id)
        if client is None:
            raise ClientNotFoundError(invoice.client_id)

        document = InvoiceDocument.from_invoice(invoice, client)
        renderer = self._get_renderer()
        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(renderer.render, document),
                timeout=self._render_timeout,
            )
        except TimeoutError as e:
            raise RenderError(
                f"timed out after {self._render_timeout:g}s",
                invoice_number=invoice.invoice_number,
            ) from e

        logger.info(
            "invoice_pdf_generated",
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            size_bytes=len(content),
        )
        return InvoicePdf(filename=attachment_filename(invoice.invoice_number), content=content)
