"""SQLite implementation of client lookup."""

from datetime import UTC, datetime

import aiosqlite

from fitbill.config import get_logger
from fitbill.core.entities import Client
from fitbill.core.exceptions import DatabaseError
from fitbill.core.interfaces import IClientStore
from fitbill.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteClientStore(IClientStore):
    """Reads clients for invoicing; the CRUD pages write them."""

    async def get_client(self, client_id: str) -> Client | None:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM clients WHERE id = ?",
                    (client_id,),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError("get_client", str(e)) from e

        return self._row_to_client(row) if row else None

    async def create_client(self, client: Client) -> Client:
        created_at = client.created_at or datetime.now(UTC)
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO clients (id, client_code, full_name, email, phone_number, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        client.id,
                        client.client_code,
                        client.full_name,
                        client.email,
                        client.phone_number,
                        created_at.isoformat(),
                    ),
                )
        except aiosqlite.Error as e:
            raise DatabaseError("create_client", str(e)) from e

        logger.info("client_created", client_id=client.id)
        return client.model_copy(update={"created_at": created_at})

    @staticmethod
    def _row_to_client(row: aiosqlite.Row) -> Client:
        return Client(
            id=row["id"],
            client_code=row["client_code"],
            full_name=row["full_name"],
            email=row["email"],
            phone_number=row["phone_number"],
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
        )
