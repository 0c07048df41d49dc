"""MongoDB repository helpers for registered users."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel

from ..config import get_settings
from ..logging_utils import get_logger

logger = get_logger("repositories.users")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _strip_storage_fields(document: dict[str, Any]) -> dict[str, Any]:
    cleaned = dict(document or {})
    cleaned.pop("_id", None)
    return cleaned


class UserRepository:
    """Encapsulates Mongo persistence for user credentials."""

    def __init__(self, database: AsyncIOMotorDatabase) -> None:
        settings = get_settings()
        self._collection: AsyncIOMotorCollection = database[settings.mongo_users_collection]

    @staticmethod
    def canonical_email(email: str) -> str:
        return email.strip().lower()

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        document = await self._collection.find_one({"email": self.canonical_email(email)})
        return _strip_storage_fields(document) if document else None

    async def find_by_id(self, user_id: str) -> dict[str, Any] | None:
        document = await self._collection.find_one({"id": user_id})
        return _strip_storage_fields(document) if document else None

    async def create(self, *, email: str, password_hash: str, name: str | None) -> dict[str, Any]:
        """Insert a new user. Raises ``DuplicateKeyError`` when the email is taken."""
        now = _now()
        document = {
            "id": uuid4().hex,
            "email": self.canonical_email(email),
            "password_hash": password_hash,
            "name": name,
            "created_at": now,
            "updated_at": now,
        }
        await self._collection.insert_one(dict(document))
        logger.info("Mongo write: created user '%s'", document["id"])
        return document

    async def ensure_indexes(self) -> None:
        logger.info("Ensuring Mongo indexes for users collection.")
        await self._collection.create_indexes(
            [
                IndexModel([("email", ASCENDING)], unique=True, name="users_email_unique"),
                IndexModel([("id", ASCENDING)], unique=True, name="users_id_unique"),
            ]
        )


async def ensure_user_indexes(database: AsyncIOMotorDatabase) -> None:
    """Ensure indexes exist for the users collection."""
    repository = UserRepository(database)
    await repository.ensure_indexes()
