"""Wire the configured email providers into a dispatcher."""

from fitbill.config.settings import EmailSettings, get_settings
from fitbill.core.services import EmailDispatcher
from fitbill.infrastructure.email.resend_provider import ResendEmailProvider
from fitbill.infrastructure.email.smtp_provider import SmtpEmailProvider


def build_email_dispatcher(settings: EmailSettings | None = None) -> EmailDispatcher:
    """Providers in priority order: SMTP, then Resend."""
    if settings is None:
        settings = get_settings().email
    return EmailDispatcher([
        SmtpEmailProvider(settings),
        ResendEmailProvider(settings),
    ])
