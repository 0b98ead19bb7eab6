"""API route modules."""

from fitbill.api.routes.health import router as health_router
from fitbill.api.routes.invoices import router as invoices_router

__all__ = [
    "health_router",
    "invoices_router",
]
