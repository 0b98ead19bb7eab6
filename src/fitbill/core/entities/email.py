"""Email envelope and dispatch outcome entities."""

from dataclasses import dataclass, field
from enum import Enum


class ProviderKind(str, Enum):
    """Which delivery path handled a message."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    SIMULATED = "simulated"


@dataclass
class EmailAttachment:
    """Binary attachment."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class EmailMessage:
    """Outgoing email envelope."""

    to: str
    subject: str
    html: str
    from_address: str | None = None
    attachments: list[EmailAttachment] = field(default_factory=list)

    @property
    def attachment_names(self) -> list[str]:
        return [a.filename for a in self.attachments]


@dataclass
class DispatchResult:
    """Outcome of one send call. Not persisted."""

    delivered: bool
    provider_used: ProviderKind
    error_detail: str | None = None

    @property
    def simulated(self) -> bool:
        return self.provider_used == ProviderKind.SIMULATED

    @property
    def accepted(self) -> bool:
        """Delivered for real, or simulated in development mode."""
        return self.delivered or self.simulated
