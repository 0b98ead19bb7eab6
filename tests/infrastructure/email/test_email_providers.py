"""Tests for the SMTP and Resend email providers."""

import base64
import json
import smtplib
from unittest.mock import patch

import httpx
import pytest

from fitbill.config.settings import EmailSettings
from fitbill.core.entities import EmailAttachment, EmailMessage, ProviderKind
from fitbill.infrastructure.email import (
    ResendEmailProvider,
    SmtpEmailProvider,
    build_email_dispatcher,
)


@pytest.fixture
def message() -> EmailMessage:
    return EmailMessage(
        to="rahul@example.com",
        subject="Invoice INV-20240115-AB12 - 15/01/2024",
        html="<p>Dear Rahul Sharma,</p>",
        attachments=[
            EmailAttachment(
                filename="Invoice-INV-20240115-AB12.pdf",
                content=b"%PDF-1.4 fake",
                content_type="application/pdf",
            )
        ],
    )


def email_settings(**overrides) -> EmailSettings:
    values = {
        "gmail_user": "",
        "gmail_app_password": "",
        "resend_api_key": "",
        "resend_from_email": "",
        "from_address": "",
    }
    values.update(overrides)
    return EmailSettings(**values)


class TestSmtpEmailProvider:
    def test_configured_needs_both_credentials(self):
        assert not SmtpEmailProvider(email_settings(gmail_user="gym@gmail.com")).is_configured()
        assert SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", gmail_app_password="app-pass")
        ).is_configured()

    def test_build_mime(self, message):
        provider = SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", gmail_app_password="app-pass")
        )

        mime = provider.build_mime(message)

        assert mime["To"] == "rahul@example.com"
        assert mime["From"] == "WTF Fitness <gym@gmail.com>"
        assert mime["Subject"] == message.subject
        html_part = mime.get_body(preferencelist=("html",))
        assert "Dear Rahul Sharma" in html_part.get_content()
        attachments = list(mime.iter_attachments())
        assert [a.get_filename() for a in attachments] == ["Invoice-INV-20240115-AB12.pdf"]
        assert attachments[0].get_content_type() == "application/pdf"
        assert attachments[0].get_content() == b"%PDF-1.4 fake"

    def test_from_address_override(self, message):
        provider = SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", from_address="billing@wtf.in")
        )
        assert provider.build_mime(message)["From"] == "billing@wtf.in"

    async def test_send_uses_starttls_and_login(self, message):
        provider = SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", gmail_app_password="app-pass")
        )

        with patch("smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            result = await provider.send(message)

        assert result.delivered is True
        assert result.provider_used == ProviderKind.PRIMARY
        smtp_cls.assert_called_once_with("smtp.gmail.com", 587, timeout=15.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("gym@gmail.com", "app-pass")
        server.send_message.assert_called_once()

    async def test_auth_failure_reported(self, message):
        provider = SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", gmail_app_password="wrong")
        )

        with patch("smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"Bad credentials")
            result = await provider.send(message)

        assert result.delivered is False
        assert "Bad credentials" in result.error_detail
        server.send_message.assert_not_called()

    async def test_connection_error_reported(self, message):
        provider = SmtpEmailProvider(
            email_settings(gmail_user="gym@gmail.com", gmail_app_password="app-pass")
        )

        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError("Connection refused")):
            result = await provider.send(message)

        assert result.delivered is False
        assert result.error_detail == "Connection refused"


class TestResendEmailProvider:
    def test_configured_by_api_key(self):
        assert not ResendEmailProvider(email_settings()).is_configured()
        assert ResendEmailProvider(email_settings(resend_api_key="re_123")).is_configured()

    def test_payload(self, message):
        provider = ResendEmailProvider(email_settings(resend_api_key="re_123"))

        payload = provider.build_payload(message)

        assert payload["from"] == "WTF Fitness <onboarding@resend.dev>"
        assert payload["to"] == ["rahul@example.com"]
        assert payload["subject"] == message.subject
        assert payload["attachments"] == [
            {
                "filename": "Invoice-INV-20240115-AB12.pdf",
                "content": base64.b64encode(b"%PDF-1.4 fake").decode("ascii"),
            }
        ]

    def test_payload_without_attachment(self, message):
        message.attachments = []
        provider = ResendEmailProvider(
            email_settings(resend_api_key="re_123", resend_from_email="invoices@wtf.in")
        )

        payload = provider.build_payload(message)

        assert "attachments" not in payload
        assert payload["from"] == "invoices@wtf.in"

    async def test_send_posts_with_bearer_token(self, message):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "email_123"})

        provider = ResendEmailProvider(
            email_settings(resend_api_key="re_123"),
            transport=httpx.MockTransport(handler),
        )

        result = await provider.send(message)

        assert result.delivered is True
        assert result.provider_used == ProviderKind.SECONDARY
        assert str(requests[0].url) == "https://api.resend.com/emails"
        assert requests[0].headers["Authorization"] == "Bearer re_123"
        assert json.loads(requests[0].content)["to"] == ["rahul@example.com"]

    async def test_rejection_message_surfaces(self, message):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"message": "Invalid `from` field."})

        provider = ResendEmailProvider(
            email_settings(resend_api_key="re_123"),
            transport=httpx.MockTransport(handler),
        )

        result = await provider.send(message)

        assert result.delivered is False
        assert result.error_detail == "Invalid `from` field."

    async def test_rejection_without_json_body(self, message):
        provider = ResendEmailProvider(
            email_settings(resend_api_key="re_123"),
            transport=httpx.MockTransport(lambda request: httpx.Response(503, text="down")),
        )

        result = await provider.send(message)

        assert result.error_detail == "HTTP 503"

    async def test_transport_error(self, message):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        provider = ResendEmailProvider(
            email_settings(resend_api_key="re_123"),
            transport=httpx.MockTransport(handler),
        )

        result = await provider.send(message)

        assert result.delivered is False
        assert result.error_detail == "Name or service not known"


class TestBuildEmailDispatcher:
    def test_smtp_has_priority(self):
        dispatcher = build_email_dispatcher(
            email_settings(
                gmail_user="gym@gmail.com",
                gmail_app_password="app-pass",
                resend_api_key="re_123",
            )
        )
        assert dispatcher.active_kind == ProviderKind.PRIMARY

    def test_resend_when_smtp_incomplete(self):
        dispatcher = build_email_dispatcher(
            email_settings(gmail_user="gym@gmail.com", resend_api_key="re_123")
        )
        assert dispatcher.active_kind == ProviderKind.SECONDARY

    def test_simulated_without_credentials(self):
        assert build_email_dispatcher(email_settings()).active_kind == ProviderKind.SIMULATED
