"""
Domain exceptions for the FitBill application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class FitBillError(Exception):
    """Base exception for all FitBill errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(FitBillError):
    """
    Caller input failed business rules.

    Carries every violation found, in order; the message joins them.
    """

    def __init__(self, errors: list[str] | str, code: str = "VALIDATION_ERROR"):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(
            ", ".join(self.errors),
            code=code,
            details={"errors": self.errors},
        )


class ClientEmailMissingError(ValidationError):
    """Client exists but has no address to send the invoice to."""

    def __init__(self, client_id: str, message: str):
        super().__init__([message], code="CLIENT_EMAIL_MISSING")
        self.details["client_id"] = client_id


# Not-found Exceptions
class NotFoundError(FitBillError):
    """Referenced entity does not exist."""

    def __init__(
        self,
        message: str,
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, details=details)


class ClientNotFoundError(NotFoundError):
    """Client not found in storage."""

    def __init__(self, client_id: str, message: str = "Selected client does not exist"):
        super().__init__(
            message,
            code="CLIENT_NOT_FOUND",
            details={"client_id": client_id},
        )


class InvoiceNotFoundError(NotFoundError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: str):
        super().__init__(
            "Invoice not found",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


# Storage Exceptions
class StorageError(FitBillError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class DuplicateInvoiceNumberError(StorageError):
    """Insert rejected by the unique index on invoice_number."""

    def __init__(self, invoice_number: str):
        super().__init__(
            f"Invoice number already exists: {invoice_number}",
            code="DUPLICATE_INVOICE_NUMBER",
            details={"invoice_number": invoice_number},
        )


# Invoice lifecycle Exceptions
class InvoiceNumberExhaustedError(FitBillError):
    """No unused invoice number found within the allowed attempts."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Failed to generate a unique invoice number after {attempts} attempts",
            code="INVOICE_NUMBER_EXHAUSTED",
            details={"attempts": attempts},
        )


class RenderError(FitBillError):
    """PDF generation failed."""

    def __init__(self, reason: str, invoice_number: str | None = None):
        super().__init__(
            f"Failed to generate invoice PDF: {reason}",
            code="PDF_RENDER_FAILED",
            details={"reason": reason, "invoice_number": invoice_number},
        )


class DispatchError(FitBillError):
    """Email provider did not accept the message."""

    def __init__(self, reason: str | None, provider: str | None = None):
        super().__init__(
            f"Email failed to send: {reason or 'Unknown error'}",
            code="EMAIL_DISPATCH_FAILED",
            details={"reason": reason, "provider": provider},
        )
