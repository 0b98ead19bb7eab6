"""List Invoices Use Case."""

from dataclasses import dataclass

from fitbill.application.dto.responses import InvoiceListResponse, InvoiceResponse
from fitbill.config import get_settings
from fitbill.core.entities import Invoice, InvoiceStatus
from fitbill.core.interfaces import IInvoiceStore


@dataclass
class InvoicePage:
    invoices: list[Invoice]
    total: int
    limit: int
    offset: int


class ListInvoicesUseCase:
    """Page through invoices, newest first."""

    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from fitbill.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def execute(
        self,
        client_id: str | None = None,
        status: InvoiceStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> InvoicePage:
        """Out-of-range paging values are clamped rather than rejected."""
        settings = get_settings().invoice
        if limit is None:
            limit = settings.default_page_size
        limit = max(1, min(limit, settings.max_page_size))
        offset = max(0, offset)

        store = await self._get_invoice_store()
        invoices, total = await store.list_invoices(
            client_id=client_id or None,
            status=status,
            limit=limit,
            offset=offset,
        )
        return InvoicePage(invoices=invoices, total=total, limit=limit, offset=offset)

    @staticmethod
    def to_response(page: InvoicePage) -> InvoiceListResponse:
        return InvoiceListResponse(
            invoices=[InvoiceResponse.from_entity(i) for i in page.invoices],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )
