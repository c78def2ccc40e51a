"""API routes."""

from .analyses import router as analyses_router
from .documents import router as documents_router
from .events import router as events_router
from .generation import router as generation_router
from .users import router as users_router

__all__ = [
    "analyses_router",
    "documents_router",
    "events_router",
    "generation_router",
    "users_router",
]
