"""Client entity as seen by the invoice core (owned by the CRUD pages)."""

from datetime import datetime

from pydantic import BaseModel


class Client(BaseModel):
    """A gym client who can be invoiced."""

    id: str
    client_code: str | None = None
    full_name: str
    email: str | None = None
    phone_number: str | None = None
    created_at: datetime | None = None

    @property
    def has_email(self) -> bool:
        """True only when a non-blank email address is on record."""
        return bool(self.email and self.email.strip())
