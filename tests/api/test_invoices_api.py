"""Tests for the invoice endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from fitbill.api.dependencies import (
    get_create_invoice_use_case,
    get_get_invoice_use_case,
    get_invoice_pdf_use_case,
    get_list_invoices_use_case,
    get_resend_invoice_use_case,
)
from fitbill.api.main import app
from fitbill.application.use_cases import (
    CreateInvoiceUseCase,
    GetInvoicePdfUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    ResendInvoiceUseCase,
)
from fitbill.core.entities import InvoiceStatus
from fitbill.core.exceptions import InvoiceNumberExhaustedError


@pytest.fixture
def wired_app(invoice_store, client_store, number_generator, delivery_service, renderer):
    """App whose use cases run on the in-memory stores and stub providers."""
    app.dependency_overrides[get_create_invoice_use_case] = lambda: CreateInvoiceUseCase(
        invoice_store, client_store, number_generator, delivery_service, retry_wait=0
    )
    app.dependency_overrides[get_resend_invoice_use_case] = lambda: ResendInvoiceUseCase(
        invoice_store, client_store, delivery_service
    )
    app.dependency_overrides[get_list_invoices_use_case] = lambda: ListInvoicesUseCase(
        invoice_store
    )
    app.dependency_overrides[get_get_invoice_use_case] = lambda: GetInvoiceUseCase(
        invoice_store
    )
    app.dependency_overrides[get_invoice_pdf_use_case] = lambda: GetInvoicePdfUseCase(
        invoice_store, client_store, renderer, render_timeout=5
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(wired_app):
    async with AsyncClient(transport=ASGITransport(app=wired_app), base_url="http://test") as c:
        yield c


class TestCreateInvoice:
    async def test_created_and_sent(self, client, create_payload, provider):
        response = await client.post("/api/invoices", json=create_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Invoice created and sent successfully"
        assert data["invoice"]["invoice_number"].startswith("INV-20240115-")
        assert data["invoice"]["total_amount"] == 8000.0
        assert data["invoice"]["status"] == "sent"
        assert data["email"]["provider_used"] == "primary"
        assert data["email"]["pdf_attached"] is True
        assert len(provider.sent) == 1

    async def test_snake_case_body_accepted(self, client):
        response = await client.post(
            "/api/invoices",
            json={
                "client_id": "client-1",
                "amount_paid": "1500.50",
                "amount_remaining": 0,
                "payment_date": "2024-02-01",
                "subscription_months": 1,
            },
        )

        assert response.status_code == 200
        assert response.json()["invoice"]["total_amount"] == 1500.5

    async def test_email_failure_is_multi_status(
        self, client, create_payload, provider, invoice_store
    ):
        provider.delivered = False
        provider.error_detail = "Connection refused"

        response = await client.post("/api/invoices", json=create_payload)

        assert response.status_code == 207
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Invoice created but email failed to send: Connection refused"
        assert data["invoice"]["status"] == "failed"
        assert len(invoice_store.invoices) == 1

    async def test_missing_fields_are_joined(self, client, invoice_store):
        response = await client.post("/api/invoices", json={})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["message"].startswith("Client ID is required, Amount paid is required")
        assert data["error"] == data["message"]
        assert len(data["errors"]) == 5
        assert invoice_store.invoices == {}

    async def test_client_without_email(self, client, create_payload, invoice_store):
        create_payload["clientId"] = "client-2"

        response = await client.post("/api/invoices", json=create_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "CLIENT_EMAIL_MISSING"
        assert "does not have a registered email address" in data["message"]
        assert invoice_store.invoices == {}

    async def test_unknown_client(self, client, create_payload):
        create_payload["clientId"] = "nobody"

        response = await client.post("/api/invoices", json=create_payload)

        assert response.status_code == 404
        assert response.json()["message"] == "Selected client does not exist"

    async def test_malformed_amount(self, client, create_payload):
        create_payload["amountPaid"] = "lots"

        response = await client.post("/api/invoices", json=create_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["errors"] == ["Amount paid must be a number"]

    async def test_malformed_and_invalid_fields_reported_together(self, client, invoice_store):
        response = await client.post(
            "/api/invoices",
            json={
                "clientId": "",
                "amountPaid": -100,
                "amountRemaining": -50,
                "paymentDate": "15/01/2024",
                "subscriptionMonths": 1.5,
            },
        )

        assert response.status_code == 400
        data = response.json()
        assert data["errors"] == [
            "Client ID is required",
            "Amount paid must be greater than zero",
            "Amount remaining cannot be negative",
            "Payment date is invalid",
            "Subscription duration must be a positive number",
        ]
        assert data["message"] == ", ".join(data["errors"])
        _, total = await invoice_store.list_invoices()
        assert total == 0

    async def test_number_exhaustion_is_server_error(self, create_payload):
        use_case = AsyncMock()
        use_case.execute.side_effect = InvoiceNumberExhaustedError(10)
        app.dependency_overrides[get_create_invoice_use_case] = lambda: use_case
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                response = await c.post("/api/invoices", json=create_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["error_code"] == "INVOICE_NUMBER_EXHAUSTED"

    async def test_unexpected_error_hides_details(self, create_payload):
        use_case = AsyncMock()
        use_case.execute.side_effect = RuntimeError("secret connection string")
        app.dependency_overrides[get_create_invoice_use_case] = lambda: use_case
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                response = await c.post("/api/invoices", json=create_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"

    async def test_internal_value_error_is_server_error(self, create_payload):
        use_case = AsyncMock()
        use_case.execute.side_effect = ValueError("Invoice must be persisted before delivery")
        app.dependency_overrides[get_create_invoice_use_case] = lambda: use_case
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                response = await c.post("/api/invoices", json=create_payload)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "ValueError"
        assert data["message"] == "Internal server error"

    async def test_request_id_echoed(self, client, create_payload):
        response = await client.post(
            "/api/invoices", json=create_payload, headers={"X-Request-ID": "req-42"}
        )

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.headers["X-Response-Time"].endswith("ms")


class TestReadInvoices:
    async def test_list(self, client, stored_invoice):
        response = await client.get("/api/invoices")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["limit"] == 50
        assert data["invoices"][0]["id"] == stored_invoice.id

    async def test_list_status_filter(self, client, invoice_store, stored_invoice):
        await invoice_store.update_invoice_status(stored_invoice.id, InvoiceStatus.FAILED)

        sent = await client.get("/api/invoices", params={"status": "sent"})
        failed = await client.get("/api/invoices", params={"status": "failed"})

        assert sent.json()["total"] == 0
        assert failed.json()["total"] == 1

    async def test_list_rejects_unknown_status(self, client):
        response = await client.get("/api/invoices", params={"status": "paid"})
        assert response.status_code == 422

    async def test_list_clamps_limit(self, client):
        response = await client.get("/api/invoices", params={"limit": 5000, "offset": -3})

        data = response.json()
        assert data["limit"] == 200
        assert data["offset"] == 0

    async def test_get(self, client, stored_invoice):
        response = await client.get(f"/api/invoices/{stored_invoice.id}")

        assert response.status_code == 200
        assert response.json()["invoice"]["amount_remaining"] == 3000.0

    async def test_get_missing(self, client):
        response = await client.get("/api/invoices/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVOICE_NOT_FOUND"

    async def test_pdf_download(self, client, stored_invoice):
        response = await client.get(f"/api/invoices/{stored_invoice.id}/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="Invoice-INV-20240115-AB12.pdf"'
        )
        assert response.content.startswith(b"%PDF")

    async def test_pdf_render_failure(self, client, renderer, stored_invoice):
        renderer.fail = True

        response = await client.get(f"/api/invoices/{stored_invoice.id}/pdf")

        assert response.status_code == 500
        assert response.json()["error_code"] == "PDF_RENDER_FAILED"


class TestResendInvoice:
    async def test_resend(self, client, stored_invoice, provider, invoice_store):
        response = await client.post(f"/api/invoices/{stored_invoice.id}/resend")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Invoice resent successfully"
        assert data["invoice"]["id"] == stored_invoice.id
        assert len(provider.sent) == 1
        assert len(invoice_store.invoices) == 1

    async def test_resend_missing(self, client):
        response = await client.post("/api/invoices/missing/resend")
        assert response.status_code == 404

    async def test_resend_client_without_email(self, client, invoice_store, stored_invoice):
        invoice_store.invoices[stored_invoice.id] = stored_invoice.model_copy(
            update={"client_id": "client-2"}
        )

        response = await client.post(f"/api/invoices/{stored_invoice.id}/resend")

        assert response.status_code == 400
        assert response.json()["message"] == "Client does not have a registered email address"

    async def test_resend_email_failure(self, client, stored_invoice, provider, invoice_store):
        provider.delivered = False
        provider.error_detail = "Invalid API key"

        response = await client.post(f"/api/invoices/{stored_invoice.id}/resend")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "EMAIL_DISPATCH_FAILED"
        assert data["message"] == "Email failed to send: Invalid API key"
        assert invoice_store.invoices[stored_invoice.id].status == InvoiceStatus.FAILED
