"""Unit tests for invoice and client entities."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from fitbill.core.entities import (
    Client,
    DispatchResult,
    EmailAttachment,
    EmailMessage,
    Invoice,
    InvoiceDocument,
    InvoiceStatus,
    ProviderKind,
)


def _invoice(**overrides) -> Invoice:
    data = {
        "invoice_number": "INV-20240115-AB12",
        "client_id": "client-1",
        "amount_paid": 5000,
        "amount_remaining": 3000,
        "payment_date": date(2024, 1, 15),
        "subscription_months": 3,
    }
    data.update(overrides)
    return Invoice(**data)


class TestInvoiceStatus:
    def test_values(self):
        assert [s.value for s in InvoiceStatus] == ["draft", "sent", "failed"]


class TestInvoice:
    def test_defaults_to_draft(self):
        invoice = _invoice()
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.email_sent_at is None
        assert invoice.id is None

    def test_total_is_derived(self):
        assert _invoice().total_amount == Decimal("8000")

    def test_total_has_no_float_drift(self):
        invoice = _invoice(amount_paid=1234.56, amount_remaining=4321.44)
        assert invoice.total_amount == Decimal("5556.00")

    def test_float_keeps_printed_value(self):
        invoice = _invoice(amount_paid=0.1, amount_remaining=0.2)
        assert invoice.amount_paid == Decimal("0.1")
        assert invoice.total_amount == Decimal("0.3")

    def test_total_in_serialized_output(self):
        dumped = _invoice().model_dump()
        assert dumped["total_amount"] == Decimal("8000")

    def test_months_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            _invoice(subscription_months=0)


class TestInvoiceDocument:
    def test_from_invoice(self):
        client = Client(id="client-1", full_name="Rahul Sharma", email=" rahul@example.com ")
        document = InvoiceDocument.from_invoice(_invoice(), client)
        assert document.client_name == "Rahul Sharma"
        assert document.client_email == "rahul@example.com"
        assert document.total_amount == Decimal("8000")
        assert not document.is_paid_in_full

    def test_paid_in_full(self):
        client = Client(id="client-1", full_name="Rahul Sharma", email="rahul@example.com")
        document = InvoiceDocument.from_invoice(_invoice(amount_remaining=0), client)
        assert document.is_paid_in_full


class TestClient:
    @pytest.mark.parametrize(
        ("email", "expected"),
        [("a@b.com", True), ("", False), ("   ", False), (None, False)],
    )
    def test_has_email(self, email, expected):
        assert Client(id="c", full_name="X", email=email).has_email is expected


class TestEmailEntities:
    def test_attachment_names(self):
        message = EmailMessage(
            to="a@b.com",
            subject="s",
            html="<p>x</p>",
            attachments=[EmailAttachment("Invoice-X.pdf", b"%PDF", "application/pdf")],
        )
        assert message.attachment_names == ["Invoice-X.pdf"]

    def test_simulated_counts_as_accepted(self):
        result = DispatchResult(delivered=False, provider_used=ProviderKind.SIMULATED)
        assert result.simulated
        assert result.accepted

    def test_real_failure_not_accepted(self):
        result = DispatchResult(
            delivered=False, provider_used=ProviderKind.PRIMARY, error_detail="auth"
        )
        assert not result.accepted
