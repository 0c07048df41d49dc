"""Feature routers exposed by the FastAPI application."""

from .auth import router as auth_router
from .games import router as games_router
from .meta import router as meta_router
from .pages import router as pages_router
from .search import router as search_router
from .stats import router as stats_router

__all__ = [
    "auth_router",
    "games_router",
    "meta_router",
    "pages_router",
    "search_router",
    "stats_router",
]
