"""API route modules."""

from .health_routes import router as health_router
from .htmx_routes import router as htmx_router
from .pages_routes import router as pages_router

__all__ = [
    "health_router",
    "htmx_router",
    "pages_router",
]
