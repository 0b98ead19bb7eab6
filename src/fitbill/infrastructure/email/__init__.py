"""Email delivery infrastructure."""

from fitbill.infrastructure.email.factory import build_email_dispatcher
from fitbill.infrastructure.email.resend_provider import ResendEmailProvider
from fitbill.infrastructure.email.smtp_provider import SmtpEmailProvider

__all__ = [
    "ResendEmailProvider",
    "SmtpEmailProvider",
    "build_email_dispatcher",
]
