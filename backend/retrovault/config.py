"""Runtime configuration helpers."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .logging_utils import get_logger

DEFAULT_RAWG_BASE_URL = "https://api.rawg.io/api"
DEFAULT_SESSION_MAX_AGE = 60 * 60 * 24 * 30
DEFAULT_BCRYPT_ROUNDS = 12

logger = get_logger("config")


@dataclass(frozen=True)
class Settings:
    """Application settings sourced from environment variables."""

    mongo_uri: str
    mongo_db: str
    mongo_users_collection: str
    mongo_games_collection: str
    mongo_game_cache_collection: str
    rawg_api_key: Optional[str]
    rawg_base_url: str
    session_secret: str
    session_max_age: int
    session_https_only: bool
    bcrypt_rounds: int
    cors_allow_origins: tuple[str, ...]

    @property
    def catalog_configured(self) -> bool:
        """Return True when an external catalog credential is available."""
        return bool(self.rawg_api_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Construct settings using environment variables with sane defaults."""
        return cls(
            mongo_uri=os.getenv("MONGO_URI", "mongodb://127.0.0.1:47017"),
            mongo_db=os.getenv("MONGO_DB_NAME", "retrovault"),
            mongo_users_collection=os.getenv("MONGO_USERS_COLLECTION", "users"),
            mongo_games_collection=os.getenv("MONGO_GAMES_COLLECTION", "games"),
            mongo_game_cache_collection=os.getenv(
                "MONGO_GAME_CACHE_COLLECTION", "game_cache"
            ),
            rawg_api_key=(os.getenv("RAWG_API_KEY") or "").strip() or None,
            rawg_base_url=os.getenv("RAWG_BASE_URL", DEFAULT_RAWG_BASE_URL),
            session_secret=_load_session_secret(),
            session_max_age=_load_int("SESSION_MAX_AGE", DEFAULT_SESSION_MAX_AGE),
            session_https_only=_load_bool("SESSION_HTTPS_ONLY", False),
            bcrypt_rounds=_load_int("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS),
            cors_allow_origins=_load_cors_origins(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()


def _load_session_secret() -> str:
    raw = (os.getenv("SESSION_SECRET") or "").strip()
    if raw:
        return raw
    logger.warning(
        "SESSION_SECRET is not set; using a random secret. Sessions will not survive a restart."
    )
    return secrets.token_urlsafe(32)


def _load_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer value for %s: %r", name, raw)
        return default


def _load_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _load_cors_origins() -> tuple[str, ...]:
    """Return tuple of allowed CORS origins based on environment variables."""
    raw = os.getenv("API_CORS_ALLOW_ORIGINS")
    if raw:
        return tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    # sensible defaults for local development frontends
    return ("http://localhost:3000", "http://127.0.0.1:3000")
