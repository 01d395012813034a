from .health import router as health_router
from .v1 import book_router, string_router

__all__ = ["book_router", "health_router", "string_router"]
