"""Get Invoice Use Case."""

from fitbill.application.dto.responses import InvoiceDetailResponse, InvoiceResponse
from fitbill.core.entities import Invoice
from fitbill.core.exceptions import InvoiceNotFoundError
from fitbill.core.interfaces import IInvoiceStore


class GetInvoiceUseCase:
    def __init__(self, invoice_store: IInvoiceStore | None = None):
        self._invoice_store = invoice_store

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from fitbill.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def execute(self, invoice_id: str) -> Invoice:
        store = await self._get_invoice_store()
        invoice = await store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    @staticmethod
    def to_response(invoice: Invoice) -> InvoiceDetailResponse:
        return InvoiceDetailResponse(invoice=InvoiceResponse.from_entity(invoice))
