"""FastAPI dependency providers."""

from functools import lru_cache

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config import get_settings
from .rawg import RawgClient
from .security import get_current_principal

__all__ = [
    "close_mongo_client",
    "get_current_principal",
    "get_mongo_client",
    "get_mongo_database",
    "get_rawg_client",
]


@lru_cache(maxsize=1)
def get_rawg_client() -> RawgClient:
    """Return a singleton RAWG client; it reports itself unconfigured without a key."""
    settings = get_settings()
    return RawgClient(settings.rawg_api_key, base_url=settings.rawg_base_url)


@lru_cache(maxsize=1)
def get_mongo_client() -> AsyncIOMotorClient:
    """Return a singleton Motor client."""
    settings = get_settings()
    return AsyncIOMotorClient(settings.mongo_uri)


def get_mongo_database() -> AsyncIOMotorDatabase:
    """Return the configured MongoDB database."""
    settings = get_settings()
    return get_mongo_client()[settings.mongo_db]


def close_mongo_client() -> None:
    """Close the cached MongoDB client if one was created."""
    if get_mongo_client.cache_info().currsize:
        get_mongo_client().close()
        get_mongo_client.cache_clear()
