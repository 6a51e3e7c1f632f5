"""API routers package."""
from .health import router as health_router
from .movies import router as movies_router

__all__ = ["health_router", "movies_router"]
