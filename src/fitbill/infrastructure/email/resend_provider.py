"""Resend transactional-email API provider."""

import base64

import httpx

from fitbill.config import get_logger
from fitbill.config.settings import EmailSettings
from fitbill.core.entities import DispatchResult, EmailMessage, ProviderKind
from fitbill.core.interfaces import IEmailProvider

logger = get_logger(__name__)

RESEND_SANDBOX_SENDER = "onboarding@resend.dev"


class ResendEmailProvider(IEmailProvider):
    """Secondary provider. One JSON POST per message; attachments go base64."""

    kind = ProviderKind.SECONDARY

    def __init__(
        self,
        settings: EmailSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport

    def is_configured(self) -> bool:
        return self._settings.resend_configured

    @property
    def default_from(self) -> str:
        return (
            self._settings.from_address
            or self._settings.resend_from_email
            or f"{self._settings.sender_name} <{RESEND_SANDBOX_SENDER}>"
        )

    def build_payload(self, message: EmailMessage) -> dict:
        payload = {
            "from": message.from_address or self.default_from,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.attachments:
            payload["attachments"] = [
                {
                    "filename": a.filename,
                    "content": base64.b64encode(a.content).decode("ascii"),
                }
                for a in message.attachments
            ]
        return payload

    async def send(self, message: EmailMessage) -> DispatchResult:
        headers = {"Authorization": f"Bearer {self._settings.resend_api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.http_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._settings.resend_api_url,
                    json=self.build_payload(message),
                    headers=headers,
                )
        except httpx.HTTPError as e:
            logger.warning("resend_request_failed", to=message.to, error=str(e))
            return DispatchResult(
                delivered=False,
                provider_used=self.kind,
                error_detail=str(e) or type(e).__name__,
            )

        if response.is_success:
            return DispatchResult(delivered=True, provider_used=self.kind)

        detail = _error_message(response)
        logger.warning(
            "resend_rejected",
            to=message.to,
            status_code=response.status_code,
            error=detail,
        )
        return DispatchResult(delivered=False, provider_used=self.kind, error_detail=detail)


def _error_message(response: httpx.Response) -> str:
    """Pull the API's error message out of a non-2xx response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
