"""Pytest configuration and shared fakes."""

import itertools
import uuid
from datetime import UTC, date, datetime

import pytest

from fitbill.core.entities import (
    Client,
    DispatchResult,
    EmailMessage,
    Invoice,
    InvoiceDocument,
    InvoiceStatus,
    ProviderKind,
)
from fitbill.core.exceptions import (
    DatabaseError,
    DuplicateInvoiceNumberError,
    InvoiceNotFoundError,
    RenderError,
)
from fitbill.core.interfaces import (
    IClientStore,
    IEmailProvider,
    IInvoicePdfRenderer,
    IInvoiceStore,
)
from fitbill.core.services import (
    EmailDispatcher,
    InvoiceDeliveryService,
    InvoiceEmailComposer,
    InvoiceNumberGenerator,
)

FAKE_PDF = b"%PDF-1.4 fake invoice"


class InMemoryInvoiceStore(IInvoiceStore):
    """Dict-backed invoice store with the same uniqueness rule as SQLite."""

    def __init__(self) -> None:
        self.invoices: dict[str, Invoice] = {}
        self.by_number: dict[str, str] = {}
        self.fail_status_update = False
        self.status_updates: list[tuple[str, InvoiceStatus, datetime | None]] = []
        self._seq = itertools.count()
        self._order: dict[str, int] = {}

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        if invoice.invoice_number in self.by_number:
            raise DuplicateInvoiceNumberError(invoice.invoice_number)
        now = datetime.now(UTC)
        stored = invoice.model_copy(
            update={"id": uuid.uuid4().hex, "created_at": now, "updated_at": now}
        )
        self.invoices[stored.id] = stored
        self.by_number[stored.invoice_number] = stored.id
        self._order[stored.id] = next(self._seq)
        return stored

    async def update_invoice_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        email_sent_at: datetime | None = None,
    ) -> Invoice:
        self.status_updates.append((invoice_id, status, email_sent_at))
        if self.fail_status_update:
            raise DatabaseError("update_invoice_status", "database is locked")
        current = self.invoices.get(invoice_id)
        if current is None:
            raise InvoiceNotFoundError(invoice_id)
        update: dict = {"status": status, "updated_at": datetime.now(UTC)}
        if email_sent_at is not None:
            update["email_sent_at"] = email_sent_at
        self.invoices[invoice_id] = current.model_copy(update=update)
        return self.invoices[invoice_id]

    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        return self.invoices.get(invoice_id)

    async def get_invoice_by_number(self, invoice_number: str) -> Invoice | None:
        invoice_id = self.by_number.get(invoice_number)
        return self.invoices.get(invoice_id) if invoice_id else None

    async def list_invoices(
        self,
        client_id: str | None = None,
        status: InvoiceStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        matches = [
            i for i in self.invoices.values()
            if (client_id is None or i.client_id == client_id)
            and (status is None or i.status == status)
        ]
        matches.sort(key=lambda i: self._order[i.id], reverse=True)
        return matches[offset:offset + limit], len(matches)


class InMemoryClientStore(IClientStore):
    def __init__(self, clients: list[Client] | None = None) -> None:
        self.clients = {c.id: c for c in clients or []}

    async def get_client(self, client_id: str) -> Client | None:
        return self.clients.get(client_id)

    async def create_client(self, client: Client) -> Client:
        self.clients[client.id] = client
        return client


class StubRenderer(IInvoicePdfRenderer):
    """Returns fixed bytes, or raises when ``fail`` is set."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.rendered: list[InvoiceDocument] = []

    def render(self, document: InvoiceDocument) -> bytes:
        self.rendered.append(document)
        if self.fail:
            raise RenderError("font cache corrupted", invoice_number=document.invoice_number)
        return FAKE_PDF


class RecordingProvider(IEmailProvider):
    """Email provider that records messages instead of sending them."""

    def __init__(
        self,
        kind: ProviderKind = ProviderKind.PRIMARY,
        configured: bool = True,
        delivered: bool = True,
        error_detail: str | None = None,
        raises: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.configured = configured
        self.delivered = delivered
        self.error_detail = error_detail
        self.raises = raises
        self.sent: list[EmailMessage] = []

    def is_configured(self) -> bool:
        return self.configured

    async def send(self, message: EmailMessage) -> DispatchResult:
        self.sent.append(message)
        if self.raises is not None:
            raise self.raises
        return DispatchResult(
            delivered=self.delivered,
            provider_used=self.kind,
            error_detail=self.error_detail,
        )


@pytest.fixture
def sample_client() -> Client:
    return Client(
        id="client-1",
        client_code="WTF-001",
        full_name="Rahul Sharma",
        email="rahul@example.com",
        phone_number="+91 98450 00000",
    )


@pytest.fixture
def client_without_email() -> Client:
    return Client(id="client-2", full_name="Anita Rao", email="   ")


@pytest.fixture
def invoice_store() -> InMemoryInvoiceStore:
    return InMemoryInvoiceStore()


@pytest.fixture
def client_store(sample_client, client_without_email) -> InMemoryClientStore:
    return InMemoryClientStore([sample_client, client_without_email])


@pytest.fixture
def renderer() -> StubRenderer:
    return StubRenderer()


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def dispatcher(provider) -> EmailDispatcher:
    return EmailDispatcher([provider])


@pytest.fixture
def composer() -> InvoiceEmailComposer:
    return InvoiceEmailComposer(
        company_name="Witness The Fitness",
        support_email="witnessthefitnessblr@gmail.com",
    )


@pytest.fixture
def delivery_service(invoice_store, renderer, dispatcher, composer) -> InvoiceDeliveryService:
    return InvoiceDeliveryService(
        invoice_store=invoice_store,
        renderer=renderer,
        dispatcher=dispatcher,
        composer=composer,
        render_timeout=5.0,
    )


@pytest.fixture
def number_generator(invoice_store) -> InvoiceNumberGenerator:
    return InvoiceNumberGenerator(invoice_store, today=lambda: date(2024, 1, 15))


@pytest.fixture
async def stored_invoice(invoice_store, sample_client) -> Invoice:
    return await invoice_store.create_invoice(
        Invoice(
            invoice_number="INV-20240115-AB12",
            client_id=sample_client.id,
            amount_paid="5000",
            amount_remaining="3000",
            payment_date=date(2024, 1, 15),
            subscription_months=3,
        )
    )


@pytest.fixture
def create_payload() -> dict:
    """Body the invoice page posts when recording a payment."""
    return {
        "clientId": "client-1",
        "amountPaid": 5000,
        "amountRemaining": 3000,
        "paymentDate": "2024-01-15",
        "subscriptionMonths": 3,
    }


@pytest.fixture
def make_provider() -> type[RecordingProvider]:
    """Factory for recording providers with custom behaviour."""
    return RecordingProvider


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_path(tmp_path):
    """Fresh migrated database file."""
    from fitbill.infrastructure.storage.sqlite.migrations import initialize_database

    path = tmp_path / "fitbill.db"
    await initialize_database(path, create_backup_before=False)
    return path


@pytest.fixture
async def sqlite_pool(db_path, monkeypatch):
    """Install a pool on the migrated database as the process-wide pool."""
    from fitbill.infrastructure.storage.sqlite import connection

    pool = connection.ConnectionPool(db_path, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    monkeypatch.setattr(connection, "_pool", pool)
    yield pool
    await pool.close()
