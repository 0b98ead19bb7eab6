"""
Abstract storage interfaces.

Define contracts for invoice and client persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from fitbill.core.entities import Client, Invoice, InvoiceStatus


class IInvoiceStore(ABC):
    """Interface for invoice persistence."""

    @abstractmethod
    async def create_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert a new invoice and return it with id and timestamps.

        Raises:
            DuplicateInvoiceNumberError: invoice_number is already taken.
        """
        pass

    @abstractmethod
    async def update_invoice_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        email_sent_at: datetime | None = None,
    ) -> Invoice:
        """
        Set the delivery status. ``email_sent_at`` is left untouched when None.

        Raises:
            InvoiceNotFoundError: No invoice with this id.
        """
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Get invoice by ID."""
        pass

    @abstractmethod
    async def get_invoice_by_number(self, invoice_number: str) -> Invoice | None:
        """Get invoice by its human-readable number."""
        pass

    @abstractmethod
    async def list_invoices(
        self,
        client_id: str | None = None,
        status: InvoiceStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        """List invoices newest first; returns the page and the total match count."""
        pass


class IClientStore(ABC):
    """Interface for client lookup."""

    @abstractmethod
    async def get_client(self, client_id: str) -> Client | None:
        """Get client by ID."""
        pass

    @abstractmethod
    async def create_client(self, client: Client) -> Client:
        """Insert a client (seeding and tests; the CRUD pages own clients)."""
        pass
