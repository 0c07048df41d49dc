"""Owner-scoped CRUD over a user's game collection."""

from __future__ import annotations

from typing import Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import NotFoundError
from ..logging_utils import get_logger
from ..repositories import GameRepository
from ..schemas import GameCreate, GameRecord, GameUpdate

logger = get_logger("services.collection")

GAME_NOT_FOUND = "Game not found"


def _map_game_document(document: dict[str, Any]) -> GameRecord:
    return GameRecord.model_validate(document)


def _clean_purchase_info(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    cleaned = {key: item for key, item in value.items() if item is not None}
    return cleaned or None


def _create_document(payload: GameCreate) -> dict[str, Any]:
    document = payload.model_dump(mode="python", exclude_none=True)
    purchase_info = _clean_purchase_info(document.pop("purchase_info", None))
    if purchase_info:
        document["purchase_info"] = purchase_info
    return document


def _split_update(payload: GameUpdate) -> tuple[dict[str, Any], list[str]]:
    """Separate fields being set from optional fields explicitly cleared with null."""
    changes: dict[str, Any] = {}
    removals: list[str] = []
    for key, value in payload.model_dump(mode="python", exclude_unset=True).items():
        if key == "purchase_info":
            value = _clean_purchase_info(value)
        if value is None:
            removals.append(key)
        else:
            changes[key] = value
    return changes, removals


async def list_games(database: AsyncIOMotorDatabase, user_id: str) -> List[GameRecord]:
    repository = GameRepository(database)
    documents = await repository.list_for_owner(user_id)
    return [_map_game_document(document) for document in documents]


async def create_game(
    database: AsyncIOMotorDatabase,
    user_id: str,
    payload: GameCreate,
) -> GameRecord:
    repository = GameRepository(database)
    document = await repository.create(user_id, _create_document(payload))
    return _map_game_document(document)


async def get_game(database: AsyncIOMotorDatabase, user_id: str, game_id: str) -> GameRecord:
    repository = GameRepository(database)
    document = await repository.find_by_id(user_id, game_id)
    if not document:
        raise NotFoundError(GAME_NOT_FOUND)
    return _map_game_document(document)


async def update_game(
    database: AsyncIOMotorDatabase,
    user_id: str,
    game_id: str,
    payload: GameUpdate,
) -> GameRecord:
    repository = GameRepository(database)
    changes, removals = _split_update(payload)
    document = await repository.update(user_id, game_id, changes=changes, removals=removals)
    if not document:
        raise NotFoundError(GAME_NOT_FOUND)
    logger.info("Updated game '%s' (%d field(s) set, %d cleared)", game_id, len(changes), len(removals))
    return _map_game_document(document)


async def delete_game(database: AsyncIOMotorDatabase, user_id: str, game_id: str) -> None:
    repository = GameRepository(database)
    if not await repository.delete(user_id, game_id):
        raise NotFoundError(GAME_NOT_FOUND)
    logger.info("Deleted game '%s'", game_id)
