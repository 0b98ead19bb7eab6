"""
Invoice number generation.

Numbers look like ``INV-20240115-K7Q2``: the creation date plus a random
4-character suffix over A-Z0-9. The store lookup here is advisory; the
unique index on invoice_number is what actually guarantees uniqueness.
"""

import secrets
import string
from collections.abc import Callable
from datetime import date

from fitbill.config import get_logger
from fitbill.core.exceptions import InvoiceNumberExhaustedError
from fitbill.core.interfaces import IInvoiceStore

logger = get_logger(__name__)

ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 4
DEFAULT_MAX_ATTEMPTS = 10

# Largest multiple of 36 below 256; bytes at or above it are redrawn
_REJECTION_LIMIT = 256 - (256 % len(ALPHABET))


class InvoiceNumberGenerator:
    """Draws random invoice numbers until one is unused."""

    def __init__(
        self,
        invoice_store: IInvoiceStore,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        today: Callable[[], date] = date.today,
    ):
        self._store = invoice_store
        self._max_attempts = max_attempts
        self._random_bytes = random_bytes
        self._today = today

    def prefix(self) -> str:
        return f"INV-{self._today():%Y%m%d}-"

    def random_suffix(self) -> str:
        """Uniform suffix via rejection sampling over random bytes."""
        chars: list[str] = []
        while len(chars) < SUFFIX_LENGTH:
            for byte in self._random_bytes(SUFFIX_LENGTH - len(chars)):
                if byte < _REJECTION_LIMIT:
                    chars.append(ALPHABET[byte % len(ALPHABET)])
        return "".join(chars)

    def candidate(self) -> str:
        return self.prefix() + self.random_suffix()

    async def generate(self) -> str:
        """
        Return an invoice number not present in the store.

        Raises:
            InvoiceNumberExhaustedError: Every attempt collided.
        """
        for attempt in range(1, self._max_attempts + 1):
            number = self.candidate()
            existing = await self._store.get_invoice_by_number(number)
            if existing is None:
                return number

            logger.warning(
                "invoice_number_collision",
                invoice_number=number,
                attempt=attempt,
                max_attempts=self._max_attempts,
            )

        logger.error("invoice_number_exhausted", attempts=self._max_attempts)
        raise InvoiceNumberExhaustedError(self._max_attempts)
