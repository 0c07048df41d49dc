"""MongoDB repository for cached RAWG search results."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel

from ..config import get_settings
from ..logging_utils import get_logger

logger = get_logger("repositories.game_cache")

SEARCH_PAGE_SIZE = 20


def _strip_storage_fields(document: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(document or {})
    cleaned.pop("_id", None)
    return cleaned


class GameCacheRepository:
    """Encapsulates Mongo persistence for catalog entries keyed by external id."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        settings = get_settings()
        self._collection: AsyncIOMotorCollection = database[settings.mongo_game_cache_collection]

    @staticmethod
    def search_filter(
        query: str,
        platform_id: Optional[str] = None,
        platform_name: Optional[str] = None,
    ) -> dict[str, Any]:
        """Case-insensitive substring match on title or platform.

        With a platform filter the entry must also list ``platform_id`` among
        its upstream platform ids, or (for entries cached without ids) carry
        ``platform_name`` as its platform, ignoring case.
        """
        pattern = re.escape(query.strip())
        text_match: dict[str, Any] = {
            "$or": [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"platform": {"$regex": pattern, "$options": "i"}},
            ]
        }
        platform_clauses: list[dict[str, Any]] = []
        if platform_id:
            platform_clauses.append({"platform_ids": platform_id})
        if platform_name:
            platform_clauses.append(
                {"platform": {"$regex": f"^{re.escape(platform_name)}$", "$options": "i"}}
            )
        if not platform_clauses:
            return text_match
        return {"$and": [text_match, {"$or": platform_clauses}]}

    async def search(
        self,
        query: str,
        *,
        platform_id: Optional[str] = None,
        platform_name: Optional[str] = None,
        limit: int = SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        cursor = (
            self._collection.find(self.search_filter(query, platform_id, platform_name))
            .sort("title", ASCENDING)
            .limit(limit)
        )
        documents = await cursor.to_list(length=limit)
        return [_strip_storage_fields(document) for document in documents]

    async def find_by_external_id(self, external_id: int) -> dict[str, Any] | None:
        document = await self._collection.find_one({"external_id": external_id})
        return _strip_storage_fields(document) if document else None

    async def upsert(self, document: dict[str, Any]) -> None:
        """Insert or refresh the entry for ``document['external_id']``; last write wins."""
        external_id = document.get("external_id")
        if not isinstance(external_id, int):
            raise ValueError("Cache documents must include an integer 'external_id'.")
        payload = dict(document)
        payload["cached_at"] = datetime.now(timezone.utc)
        await self._collection.update_one(
            {"external_id": external_id},
            {"$set": payload},
            upsert=True,
        )

    async def ensure_indexes(self) -> None:
        logger.info("Ensuring Mongo indexes for game cache collection.")
        await self._collection.create_indexes(
            [
                IndexModel([("external_id", ASCENDING)], unique=True, name="external_id_unique"),
                IndexModel([("title", ASCENDING)], name="cache_title_lookup"),
                IndexModel([("platform", ASCENDING)], name="cache_platform_lookup"),
                IndexModel([("platform_ids", ASCENDING)], name="cache_platform_ids_lookup"),
                IndexModel([("cached_at", ASCENDING)], name="cache_cached_at"),
            ]
        )


async def ensure_game_cache_indexes(database: AsyncIOMotorDatabase) -> None:
    """Ensure indexes exist for the game cache collection."""
    repository = GameCacheRepository(database)
    await repository.ensure_indexes()
