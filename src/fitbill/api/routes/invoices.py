"""Invoice endpoints: create, list, fetch, download and resend."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from fitbill.api.dependencies import (
    get_create_invoice_use_case,
    get_get_invoice_use_case,
    get_invoice_pdf_use_case,
    get_list_invoices_use_case,
    get_resend_invoice_use_case,
)
from fitbill.application.dto.requests import CreateInvoiceRequest
from fitbill.application.dto.responses import (
    CreateInvoiceResponse,
    ErrorResponse,
    InvoiceDetailResponse,
    InvoiceListResponse,
    ResendInvoiceResponse,
)
from fitbill.application.use_cases import (
    CreateInvoiceUseCase,
    GetInvoicePdfUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ResendInvoiceUseCase,
)
from fitbill.core.entities import InvoiceStatus

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=CreateInvoiceResponse,
    responses={
        207: {"model": CreateInvoiceResponse, "description": "Invoice stored, email failed"},
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_invoice(
    request: CreateInvoiceRequest,
    response: Response,
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> CreateInvoiceResponse:
    """
    Create an invoice and email it to the client.

    Returns 207 when the invoice was stored but the email did not go out.
    """
    result = await use_case.execute(request)
    if result.email_failed:
        response.status_code = status.HTTP_207_MULTI_STATUS
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    client_id: str | None = None,
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    limit: int | None = None,
    offset: int = 0,
    use_case: ListInvoicesUseCase = Depends(get_list_invoices_use_case),
) -> InvoiceListResponse:
    """List invoices newest first. ``limit`` is clamped to 1..200."""
    page = await use_case.execute(
        client_id=client_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return use_case.to_response(page)


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_invoice(
    invoice_id: str,
    use_case: GetInvoiceUseCase = Depends(get_get_invoice_use_case),
) -> InvoiceDetailResponse:
    invoice = await use_case.execute(invoice_id)
    return use_case.to_response(invoice)


@router.get(
    "/{invoice_id}/pdf",
    responses={
        200: {"content": {"application/pdf": {}}},
        404: {"model": ErrorResponse, "description": "Invoice not found"},
        500: {"model": ErrorResponse, "description": "PDF generation failed"},
    },
)
async def download_invoice_pdf(
    invoice_id: str,
    use_case: GetInvoicePdfUseCase = Depends(get_invoice_pdf_use_case),
) -> Response:
    """Render and download the invoice PDF."""
    result = await use_case.execute(invoice_id)
    return Response(
        content=result.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
        },
    )


@router.post(
    "/{invoice_id}/resend",
    response_model=ResendInvoiceResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def resend_invoice(
    invoice_id: str,
    use_case: ResendInvoiceUseCase = Depends(get_resend_invoice_use_case),
) -> ResendInvoiceResponse:
    """Re-render and re-send an existing invoice. Never creates a new one."""
    result = await use_case.execute(invoice_id)
    return use_case.to_response(result)
