"""
Email dispatch over an ordered list of providers.

The first configured provider handles the message. There is no fallback
to the next provider when the chosen one fails. With nothing configured
the envelope is logged and reported as simulated.
"""

from collections.abc import Sequence

from fitbill.config import get_logger
from fitbill.core.entities import DispatchResult, EmailMessage, ProviderKind
from fitbill.core.interfaces import IEmailProvider

logger = get_logger(__name__)


class EmailDispatcher:
    """Picks a provider per call and sends through it."""

    def __init__(self, providers: Sequence[IEmailProvider]):
        self._providers = list(providers)

    def select_provider(self) -> IEmailProvider | None:
        for provider in self._providers:
            if provider.is_configured():
                return provider
        return None

    @property
    def active_kind(self) -> ProviderKind:
        provider = self.select_provider()
        return provider.kind if provider else ProviderKind.SIMULATED

    async def send(self, message: EmailMessage) -> DispatchResult:
        provider = self.select_provider()
        if provider is None:
            return self._simulate(message)

        try:
            result = await provider.send(message)
        except Exception as e:
            # Providers report transport errors themselves; this is a bug path
            logger.exception(
                "email_provider_crashed",
                provider=provider.kind.value,
                to=message.to,
            )
            return DispatchResult(
                delivered=False,
                provider_used=provider.kind,
                error_detail=str(e) or e.__class__.__name__,
            )

        if result.delivered:
            logger.info(
                "email_sent",
                provider=result.provider_used.value,
                to=message.to,
                subject=message.subject,
            )
        else:
            logger.error(
                "email_send_failed",
                provider=result.provider_used.value,
                to=message.to,
                error=result.error_detail,
            )
        return result

    @staticmethod
    def _simulate(message: EmailMessage) -> DispatchResult:
        logger.info(
            "email_simulated",
            to=message.to,
            subject=message.subject,
            attachments=message.attachment_names,
            hint="Set GMAIL_USER/GMAIL_APP_PASSWORD or RESEND_API_KEY to send mail",
        )
        return DispatchResult(delivered=False, provider_used=ProviderKind.SIMULATED)
