"""API routes module."""

from app.api.routes.categories import router as categories_router
from app.api.routes.health import router as health_router
from app.api.routes.lifecycle import router as lifecycle_router
from app.api.routes.pricing import router as pricing_router

__all__ = ["categories_router", "health_router", "lifecycle_router", "pricing_router"]
