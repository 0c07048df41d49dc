"""Routers for the signed-in user's game collection."""

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_current_principal, get_mongo_database
from ..schemas import (
    EmptyDataEnvelope,
    GameCreate,
    GameEnvelope,
    GameListEnvelope,
    GameUpdate,
)
from ..services.collection import (
    create_game,
    delete_game,
    get_game,
    list_games,
    update_game,
)

router = APIRouter(prefix="/api/games", tags=["games"])


@router.get(
    "",
    response_model=GameListEnvelope,
    response_model_exclude_none=True,
    summary="List the user's games, newest first.",
)
async def list_user_games(
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> GameListEnvelope:
    return GameListEnvelope(data=await list_games(database, principal))


@router.post(
    "",
    response_model=GameEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Add a game to the user's collection.",
)
async def create_user_game(
    payload: GameCreate,
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> GameEnvelope:
    return GameEnvelope(data=await create_game(database, principal, payload))


@router.get(
    "/{game_id}",
    response_model=GameEnvelope,
    response_model_exclude_none=True,
    summary="Fetch one of the user's games.",
)
async def get_user_game(
    game_id: str,
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> GameEnvelope:
    return GameEnvelope(data=await get_game(database, principal, game_id))


@router.put(
    "/{game_id}",
    response_model=GameEnvelope,
    response_model_exclude_none=True,
    summary="Update one of the user's games.",
)
async def update_user_game(
    game_id: str,
    payload: GameUpdate,
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> GameEnvelope:
    return GameEnvelope(data=await update_game(database, principal, game_id, payload))


@router.delete(
    "/{game_id}",
    response_model=EmptyDataEnvelope,
    summary="Remove one of the user's games.",
)
async def delete_user_game(
    game_id: str,
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> EmptyDataEnvelope:
    await delete_game(database, principal, game_id)
    return EmptyDataEnvelope()
