"""SMTP email provider (Gmail app-password credentials)."""

import asyncio
import smtplib
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr

from fitbill.config import get_logger
from fitbill.config.settings import EmailSettings
from fitbill.core.entities import DispatchResult, EmailMessage, ProviderKind
from fitbill.core.interfaces import IEmailProvider

logger = get_logger(__name__)


class SmtpEmailProvider(IEmailProvider):
    """
    Primary provider. Sends through an authenticated SMTP relay with STARTTLS.

    smtplib is blocking, so the whole session runs in a worker thread.
    """

    kind = ProviderKind.PRIMARY

    def __init__(self, settings: EmailSettings):
        self._settings = settings

    def is_configured(self) -> bool:
        return self._settings.smtp_configured

    @property
    def default_from(self) -> str:
        if self._settings.from_address:
            return self._settings.from_address
        return formataddr((self._settings.sender_name, self._settings.gmail_user))

    def build_mime(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["Subject"] = message.subject
        mime["From"] = message.from_address or self.default_from
        mime["To"] = message.to
        mime.set_content("This invoice email is best viewed in an HTML-capable client.")
        mime.add_alternative(message.html, subtype="html")

        for attachment in message.attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            mime.add_attachment(
                attachment.content,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return mime

    def _send_blocking(self, mime: MimeMessage) -> None:
        with smtplib.SMTP(
            self._settings.smtp_host,
            self._settings.smtp_port,
            timeout=self._settings.smtp_timeout,
        ) as server:
            server.starttls()
            server.login(self._settings.gmail_user, self._settings.gmail_app_password)
            server.send_message(mime)

    async def send(self, message: EmailMessage) -> DispatchResult:
        mime = self.build_mime(message)
        try:
            await asyncio.to_thread(self._send_blocking, mime)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("smtp_send_failed", to=message.to, error=str(e))
            return DispatchResult(
                delivered=False,
                provider_used=self.kind,
                error_detail=str(e) or type(e).__name__,
            )

        return DispatchResult(delivered=True, provider_used=self.kind)
