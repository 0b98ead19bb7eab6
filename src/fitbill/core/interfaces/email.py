"""Abstract email provider interface."""

from abc import ABC, abstractmethod

from fitbill.core.entities import DispatchResult, EmailMessage, ProviderKind


class IEmailProvider(ABC):
    """
    One delivery path for outgoing mail.

    Implementations catch their own transport errors and report them in
    the returned DispatchResult instead of raising.
    """

    kind: ProviderKind

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials for this provider are present."""
        ...

    @abstractmethod
    async def send(self, message: EmailMessage) -> DispatchResult:
        """Send one message."""
        ...
