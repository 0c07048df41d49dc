"""Entry point for the RetroVault collection API server."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.middleware.sessions import SessionMiddleware

from .config import get_settings
from .dependencies import close_mongo_client, get_mongo_database
from .errors import register_exception_handlers
from .logging_utils import get_logger
from .repositories import (
    ensure_game_cache_indexes,
    ensure_game_indexes,
    ensure_user_indexes,
)
from .routers import (
    auth_router,
    games_router,
    meta_router,
    pages_router,
    search_router,
    stats_router,
)
from .security import AuthGateMiddleware
from .version import get_application_version

logger = get_logger("backend")

SESSION_COOKIE_NAME = "retrovault_session"

_INDEX_INITIALIZERS: tuple[tuple[str, Callable[[AsyncIOMotorDatabase], Awaitable[None]]], ...] = (
    ("users", ensure_user_indexes),
    ("games", ensure_game_indexes),
    ("game cache", ensure_game_cache_indexes),
)


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        """Create collection indexes once at startup and close Mongo on shutdown."""
        database = get_mongo_database()
        for label, ensure_indexes in _INDEX_INITIALIZERS:
            try:
                await ensure_indexes(database)
            except Exception:  # pragma: no cover
                logger.exception("Failed to ensure %s indexes during startup.", label)
        if not settings.catalog_configured:
            logger.warning("RAWG_API_KEY is not set; catalog search will serve cached results only.")
        try:
            yield
        finally:
            close_mongo_client()

    settings = get_settings()

    app = FastAPI(
        title="RetroVault API",
        version=get_application_version(),
        description="Track a personal retro game collection and search the RAWG catalog.",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Added innermost first: the auth gate needs the decoded session.
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )

    allow_origins = list(settings.cors_allow_origins)
    allow_credentials = True
    if not allow_origins:
        allow_origins = ["*"]
        allow_credentials = False
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(pages_router)
    app.include_router(auth_router)
    app.include_router(search_router)
    app.include_router(games_router)
    app.include_router(stats_router)

    return app


app = create_app()
