"""Create Invoice Use Case: validate, number, store, then deliver by email."""

from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fitbill.application.dto.requests import CreateInvoiceRequest
from fitbill.application.dto.responses import (
    CreateInvoiceResponse,
    DispatchResponse,
    InvoiceResponse,
)
from fitbill.config import get_logger, get_settings
from fitbill.core.entities import Client, DispatchResult, Invoice
from fitbill.core.exceptions import (
    ClientEmailMissingError,
    ClientNotFoundError,
    DuplicateInvoiceNumberError,
    ValidationError,
)
from fitbill.core.interfaces import IClientStore, IInvoiceStore
from fitbill.core.services import InvoiceDeliveryService, InvoiceNumberGenerator

logger = get_logger(__name__)

CLIENT_MISSING = "Selected client does not exist"
CLIENT_EMAIL_MISSING = "Selected client does not have a registered email address"


@dataclass
class CreateInvoiceResult:
    """Result of creating an invoice."""

    invoice: Invoice
    dispatch: DispatchResult
    pdf_attached: bool

    @property
    def email_failed(self) -> bool:
        return not self.dispatch.accepted

    @property
    def message(self) -> str:
        if self.email_failed:
            reason = self.dispatch.error_detail or "Unknown error"
            return f"Invoice created but email failed to send: {reason}"
        if self.dispatch.simulated:
            return "Invoice created successfully (email not sent - dev mode)"
        return "Invoice created and sent successfully"


def validate_fields(request: CreateInvoiceRequest) -> list[str]:
    """Check the request fields; returns every violation in a fixed order."""
    errors: list[str] = []
    malformed = set(request.malformed_fields)

    if "client_id" in malformed:
        errors.append("Client ID is invalid")
    elif not request.client_id:
        errors.append("Client ID is required")

    if "amount_paid" in malformed:
        errors.append("Amount paid must be a number")
    elif request.amount_paid is None:
        errors.append("Amount paid is required")
    elif request.amount_paid <= 0:
        errors.append("Amount paid must be greater than zero")

    if "amount_remaining" in malformed:
        errors.append("Amount remaining must be a number")
    elif request.amount_remaining is None:
        errors.append("Amount remaining is required")
    elif request.amount_remaining < 0:
        errors.append("Amount remaining cannot be negative")

    if "payment_date" in malformed:
        errors.append("Payment date is invalid")
    elif request.payment_date is None:
        errors.append("Payment date is required")

    if request.subscription_months is None or request.subscription_months < 1:
        errors.append("Subscription duration must be a positive number")

    return errors


class CreateInvoiceUseCase:
    """
    Create an invoice and email it to the client.

    Nothing is written until validation passes. Once the row exists it is
    never rolled back: PDF and email failures only change its status.
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        client_store: IClientStore | None = None,
        number_generator: InvoiceNumberGenerator | None = None,
        delivery_service: InvoiceDeliveryService | None = None,
        max_attempts: int | None = None,
        retry_wait: float | None = None,
    ):
        self._invoice_store = invoice_store
        self._client_store = client_store
        self._number_generator = number_generator
        self._delivery_service = delivery_service

        settings = get_settings().invoice
        self._max_attempts = max_attempts or settings.create_max_attempts
        self._retry_wait = settings.create_retry_wait if retry_wait is None else retry_wait

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

    async def _get_number_generator(self) -> InvoiceNumberGenerator:
        if self._number_generator is None:
            from fitbill.application.services import get_number_generator

            self._number_generator = get_number_generator(await self._get_invoice_store())
        return self._number_generator

    async def _get_delivery_service(self) -> InvoiceDeliveryService:
        if self._delivery_service is None:
            from fitbill.application.services import get_delivery_service

            self._delivery_service = get_delivery_service(await self._get_invoice_store())
        return self._delivery_service

    async def validate(self, request: CreateInvoiceRequest) -> Client:
        """
        Run every business rule and return the client to invoice.

        Raises:
            ClientNotFoundError: The client is the only problem and it does not exist.
            ClientEmailMissingError: The client is the only problem and has no email.
            ValidationError: Anything else, with all messages collected.
        """
        errors = validate_fields(request)

        client = None
        if request.client_id:
            client_store = await self._get_client_store()
            client = await client_store.get_client(request.client_id)

            if client is None:
                if not errors:
                    raise ClientNotFoundError(request.client_id, CLIENT_MISSING)
                errors.append(CLIENT_MISSING)
            elif not client.has_email:
                if not errors:
                    raise ClientEmailMissingError(request.client_id, CLIENT_EMAIL_MISSING)
                errors.append(CLIENT_EMAIL_MISSING)

        if errors:
            logger.info("create_invoice_rejected", errors=errors)
            raise ValidationError(errors)

        return client  # type: ignore[return-value]

    async def execute(self, request: CreateInvoiceRequest) -> CreateInvoiceResult:
        """Execute create invoice use case."""
        logger.info("create_invoice_started", client_id=request.client_id)

        client = await self.validate(request)
        invoice = await self._insert_draft(request)

        delivery = await self._get_delivery_service()
        outcome = await delivery.deliver(invoice, client)

        result = CreateInvoiceResult(
            invoice=outcome.invoice,
            dispatch=outcome.dispatch,
            pdf_attached=outcome.pdf_attached,
        )
        logger.info(
            "create_invoice_complete",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            status=result.invoice.status.value,
            email_failed=result.email_failed,
        )
        return result

    async def _insert_draft(self, request: CreateInvoiceRequest) -> Invoice:
        """Number and insert the draft, redrawing the number if the insert races."""
        store = await self._get_invoice_store()
        generator = await self._get_number_generator()

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._retry_wait, max=self._retry_wait * 8),
            retry=retry_if_exception_type(DuplicateInvoiceNumberError),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                number = await generator.generate()
                draft = Invoice(
                    invoice_number=number,
                    client_id=request.client_id,  # type: ignore[arg-type]
                    amount_paid=request.amount_paid,  # type: ignore[arg-type]
                    amount_remaining=request.amount_remaining,  # type: ignore[arg-type]
                    payment_date=request.payment_date,  # type: ignore[arg-type]
                    subscription_months=request.subscription_months,  # type: ignore[arg-type]
                    created_by=request.created_by,
                )
                return await store.create_invoice(draft)

        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def to_response(result: CreateInvoiceResult) -> CreateInvoiceResponse:
        """Convert result to API response."""
        return CreateInvoiceResponse(
            success=not result.email_failed,
            message=None if result.email_failed else result.message,
            error=result.message if result.email_failed else None,
            invoice=InvoiceResponse.from_entity(result.invoice),
            email=DispatchResponse.from_result(result.dispatch, result.pdf_attached),
        )


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "invoice_insert_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )
