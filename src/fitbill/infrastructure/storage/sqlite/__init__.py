"""SQLite storage implementations."""

from fitbill.infrastructure.storage.sqlite.client_store import SQLiteClientStore
from fitbill.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from fitbill.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore

# Singleton instances
_invoice_store: SQLiteInvoiceStore | None = None
_client_store: SQLiteClientStore | None = None


async def get_invoice_store() -> SQLiteInvoiceStore:
    """Get singleton invoice store instance."""
    global _invoice_store
    if _invoice_store is None:
        _invoice_store = SQLiteInvoiceStore()
    return _invoice_store


async def get_client_store() -> SQLiteClientStore:
    """Get singleton client store instance."""
    global _client_store
    if _client_store is None:
        _client_store = SQLiteClientStore()
    return _client_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Stores
    "SQLiteClientStore",
    "SQLiteInvoiceStore",
    "get_client_store",
    "get_invoice_store",
]
