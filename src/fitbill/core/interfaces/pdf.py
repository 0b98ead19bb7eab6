"""Abstract PDF renderer interface."""

from abc import ABC, abstractmethod

from fitbill.core.entities import InvoiceDocument


class IInvoicePdfRenderer(ABC):
    """Interface for invoice PDF rendering implementations."""

    @abstractmethod
    def render(self, document: InvoiceDocument) -> bytes:
        """
        Render an invoice into PDF bytes.

        Raises:
            RenderError: On any internal rendering failure.
        """
        ...
