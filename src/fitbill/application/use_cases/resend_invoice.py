"""Resend Invoice Use Case: re-render and re-email an existing invoice."""

from dataclasses import dataclass

from fitbill.application.dto.responses import (
    DispatchResponse,
    InvoiceResponse,
    ResendInvoiceResponse,
)
from fitbill.config import get_logger
from fitbill.core.entities import DispatchResult, Invoice
from fitbill.core.exceptions import (
    ClientEmailMissingError,
    DispatchError,
    InvoiceNotFoundError,
)
from fitbill.core.interfaces import IClientStore, IInvoiceStore
from fitbill.core.services import InvoiceDeliveryService

logger = get_logger(__name__)


@dataclass
class ResendInvoiceResult:
    invoice: Invoice
    dispatch: DispatchResult
    pdf_attached: bool

    @property
    def message(self) -> str:
        if self.dispatch.simulated:
            return "Invoice resend completed (email not sent - dev mode)"
        return "Invoice resent successfully"


class ResendInvoiceUseCase:
    """
    Send an existing invoice again.

    Invoice and client are read fresh on every call. The invoice row is
    updated in place; no new invoice is ever created.
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        client_store: IClientStore | None = None,
        delivery_service: InvoiceDeliveryService | None = None,
    ):
        self._invoice_store = invoice_store
        self._client_store = client_store
        self._delivery_service = delivery_service

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

    async def _get_delivery_service(self) -> InvoiceDeliveryService:
        if self._delivery_service is None:
            from fitbill.application.services import get_delivery_service

            self._delivery_service = get_delivery_service(await self._get_invoice_store())
        return self._delivery_service

    async def execute(self, invoice_id: str) -> ResendInvoiceResult:
        """
        Execute resend.

        Raises:
            InvoiceNotFoundError: No invoice with this id.
            ClientEmailMissingError: The client is gone or has no email.
            DispatchError: The provider rejected the message. The invoice
                is already marked failed when this is raised.
        """
        logger.info("resend_invoice_started", invoice_id=invoice_id)

        invoice_store = await self._get_invoice_store()
        invoice = await invoice_store.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)

        client_store = await self._get_client_store()
        client = await client_store.get_client(invoice.client_id)
        if client is None or not client.has_email:
            raise ClientEmailMissingError(
                invoice.client_id,
                "Client does not have a registered email address",
            )

        delivery = await self._get_delivery_service()
        outcome = await delivery.deliver(invoice, client)

        if not outcome.dispatch.accepted:
            raise DispatchError(
                outcome.dispatch.error_detail,
                provider=outcome.dispatch.provider_used.value,
            )

        logger.info(
            "resend_invoice_complete",
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            provider=outcome.dispatch.provider_used.value,
        )
        return ResendInvoiceResult(
            invoice=outcome.invoice,
            dispatch=outcome.dispatch,
            pdf_attached=outcome.pdf_attached,
        )

    @staticmethod
    def to_response(result: ResendInvoiceResult) -> ResendInvoiceResponse:
        return ResendInvoiceResponse(
            message=result.message,
            invoice=InvoiceResponse.from_entity(result.invoice),
            email=DispatchResponse.from_result(result.dispatch, result.pdf_attached),
        )
