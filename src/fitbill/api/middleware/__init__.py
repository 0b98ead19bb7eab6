"""API middleware."""

from fitbill.api.middleware.error_handler import ErrorHandlerMiddleware
from fitbill.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
