"""SQLite implementation of invoice storage."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

import aiosqlite

from fitbill.config import get_logger
from fitbill.core.entities import ClientSummary, Invoice, InvoiceStatus
from fitbill.core.exceptions import (
    DatabaseError,
    DuplicateInvoiceNumberError,
    InvoiceNotFoundError,
)
from fitbill.core.interfaces import IInvoiceStore
from fitbill.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

_SELECT_WITH_CLIENT = """
    SELECT i.*,
           c.full_name AS client_full_name,
           c.email AS client_email
    FROM invoices i
    LEFT JOIN clients c ON c.id = i.client_id
"""


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        now = datetime.now(UTC)
        invoice_id = invoice.id or uuid.uuid4().hex

        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO invoices (
                        id, invoice_number, client_id,
                        amount_paid, amount_remaining, payment_date,
                        subscription_months, status, email_sent_at,
                        created_by, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        invoice_id,
                        invoice.invoice_number,
                        invoice.client_id,
                        str(invoice.amount_paid),
                        str(invoice.amount_remaining),
                        invoice.payment_date.isoformat(),
                        invoice.subscription_months,
                        invoice.status.value,
                        invoice.email_sent_at.isoformat() if invoice.email_sent_at else None,
                        invoice.created_by,
                        now.isoformat(),
                        now.isoformat(),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if "invoice_number" in str(e):
                raise DuplicateInvoiceNumberError(invoice.invoice_number) from e
            raise DatabaseError("create_invoice", str(e)) from e
        except aiosqlite.Error as e:
            raise DatabaseError("create_invoice", str(e)) from e

        logger.info(
            "invoice_created",
            invoice_id=invoice_id,
            invoice_number=invoice.invoice_number,
            client_id=invoice.client_id,
        )
        return invoice.model_copy(
            update={"id": invoice_id, "created_at": now, "updated_at": now}
        )

    async def update_invoice_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        email_sent_at: datetime | None = None,
    ) -> Invoice:
        now = datetime.now(UTC).isoformat()
        try:
            async with get_transaction() as conn:
                if email_sent_at is None:
                    cursor = await conn.execute(
                        "UPDATE invoices SET status = ?, updated_at = ? WHERE id = ?",
                        (status.value, now, invoice_id),
                    )
                else:
                    cursor = await conn.execute(
                        """
                        UPDATE invoices
                        SET status = ?, email_sent_at = ?, updated_at = ?
                        WHERE id = ?
                        """,
                        (status.value, email_sent_at.isoformat(), now, invoice_id),
                    )
                if cursor.rowcount == 0:
                    raise InvoiceNotFoundError(invoice_id)

                cursor = await conn.execute(
                    f"{_SELECT_WITH_CLIENT} WHERE i.id = ?",
                    (invoice_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError("update_invoice_status", str(e)) from e

        logger.info("invoice_status_updated", invoice_id=invoice_id, status=status.value)
        return self._row_to_invoice(row)

    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        return await self._fetch_one("i.id = ?", invoice_id, "get_invoice")

    async def get_invoice_by_number(self, invoice_number: str) -> Invoice | None:
        return await self._fetch_one(
            "i.invoice_number = ?", invoice_number, "get_invoice_by_number"
        )

    async def list_invoices(
        self,
        client_id: str | None = None,
        status: InvoiceStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        conditions = []
        params: list = []
        if client_id:
            conditions.append("i.client_id = ?")
            params.append(client_id)
        if status:
            conditions.append("i.status = ?")
            params.append(status.value)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"SELECT COUNT(*) FROM invoices i {where}",
                    params,
                )
                total = (await cursor.fetchone())[0]

                cursor = await conn.execute(
                    f"""
                    {_SELECT_WITH_CLIENT}
                    {where}
                    ORDER BY i.created_at DESC, i.rowid DESC
                    LIMIT ? OFFSET ?
                    """,
                    [*params, limit, offset],
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise DatabaseError("list_invoices", str(e)) from e

        return [self._row_to_invoice(r) for r in rows], total

    async def _fetch_one(self, condition: str, value: str, operation: str) -> Invoice | None:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    f"{_SELECT_WITH_CLIENT} WHERE {condition}",
                    (value,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError(operation, str(e)) from e

        return self._row_to_invoice(row) if row else None

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
        client = None
        if row["client_full_name"] is not None:
            client = ClientSummary(
                id=row["client_id"],
                full_name=row["client_full_name"],
                email=row["client_email"],
            )

        return Invoice(
            id=row["id"],
            invoice_number=row["invoice_number"],
            client_id=row["client_id"],
            amount_paid=Decimal(row["amount_paid"]),
            amount_remaining=Decimal(row["amount_remaining"]),
            payment_date=date.fromisoformat(row["payment_date"]),
            subscription_months=row["subscription_months"],
            status=InvoiceStatus(row["status"]),
            email_sent_at=_parse_datetime(row["email_sent_at"]),
            created_by=row["created_by"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
            client=client,
        )


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
