"""MongoDB repository helpers for collection game records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import uuid4

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

from ..config import get_settings
from ..logging_utils import get_logger

logger = get_logger("repositories.games")

# Fields a client may never set directly.
PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at", "_id"})


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _strip_storage_fields(document: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(document or {})
    cleaned.pop("_id", None)
    return cleaned


class GameRepository:
    """Owner-scoped Mongo persistence for game records.

    Every lookup filters on both the record id and the owner id, so a record
    owned by someone else behaves exactly like a missing one.
    """

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        settings = get_settings()
        self._collection: AsyncIOMotorCollection = database[settings.mongo_games_collection]

    @staticmethod
    def owner_filter(user_id: str) -> dict[str, Any]:
        return {"user_id": user_id}

    @staticmethod
    def id_filter(user_id: str, game_id: str) -> dict[str, Any]:
        return {"user_id": user_id, "id": game_id}

    async def list_for_owner(
        self, user_id: str, *, newest_first: bool = True
    ) -> list[dict[str, Any]]:
        cursor = self._collection.find(self.owner_filter(user_id)).sort(
            "created_at", DESCENDING if newest_first else ASCENDING
        )
        documents = await cursor.to_list(length=None)
        return [_strip_storage_fields(document) for document in documents]

    async def find_by_id(self, user_id: str, game_id: str) -> dict[str, Any] | None:
        document = await self._collection.find_one(self.id_filter(user_id, game_id))
        return _strip_storage_fields(document) if document else None

    async def create(self, user_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        now = _now()
        document = {key: value for key, value in fields.items() if key not in PROTECTED_FIELDS}
        document.update(
            {
                "id": uuid4().hex,
                "user_id": user_id,
                "created_at": now,
                "updated_at": now,
            }
        )
        await self._collection.insert_one(dict(document))
        logger.info("Mongo write: created game '%s' for user '%s'", document["id"], user_id)
        return document

    async def update(
        self,
        user_id: str,
        game_id: str,
        *,
        changes: dict[str, Any],
        removals: Iterable[str] = (),
    ) -> dict[str, Any] | None:
        """Apply ``$set``/``$unset`` to an owned record; None when not found."""
        document = await self.find_by_id(user_id, game_id)
        if not document:
            return None

        updates = {key: value for key, value in changes.items() if key not in PROTECTED_FIELDS}
        updates["updated_at"] = _now()
        unset = {key: "" for key in removals if key not in PROTECTED_FIELDS}

        operation: dict[str, Any] = {"$set": updates}
        if unset:
            operation["$unset"] = unset
        result = await self._collection.update_one(self.id_filter(user_id, game_id), operation)
        if getattr(result, "matched_count", 0) == 0:
            return None

        document.update(updates)
        for key in unset:
            document.pop(key, None)
        return document

    async def delete(self, user_id: str, game_id: str) -> bool:
        result = await self._collection.delete_one(self.id_filter(user_id, game_id))
        return getattr(result, "deleted_count", 0) > 0

    async def ensure_indexes(self) -> None:
        logger.info("Ensuring Mongo indexes for games collection.")
        await self._collection.create_indexes(
            [
                IndexModel(
                    [("user_id", ASCENDING), ("id", ASCENDING)],
                    unique=True,
                    name="owner_game_unique",
                ),
                IndexModel(
                    [("user_id", ASCENDING), ("created_at", DESCENDING)],
                    name="games_owner_recent",
                ),
            ]
        )


async def ensure_game_indexes(database: AsyncIOMotorDatabase) -> None:
    """Ensure indexes exist for the games collection."""
    repository = GameRepository(database)
    await repository.ensure_indexes()
