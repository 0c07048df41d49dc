"""Router for catalog search backed by the local RAWG cache."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_current_principal, get_mongo_database, get_rawg_client
from ..rawg import RawgClient
from ..schemas import SearchEnvelope
from ..services.search import populate_cache, search_catalog

# Shares the /api/games prefix; include before the games router so
# "/search" is not captured by "/{game_id}".
router = APIRouter(
    prefix="/api/games",
    tags=["search"],
    dependencies=[Depends(get_current_principal)],
)


@router.get(
    "/search",
    response_model=SearchEnvelope,
    response_model_exclude_none=True,
    summary="Search the game catalog, serving cached results when available.",
)
async def search_games(
    background_tasks: BackgroundTasks,
    q: Optional[str] = Query(default=None, description="Title text to search for."),
    platform: Optional[str] = Query(
        default=None,
        description="Optional platform key such as 'nes' or 'snes'; unknown keys are ignored.",
    ),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
    client: RawgClient = Depends(get_rawg_client),
) -> SearchEnvelope:
    outcome = await search_catalog(database, client, q, platform)
    response = SearchEnvelope(
        count=outcome.count,
        data=outcome.items,
        cached=outcome.served_from_cache,
    )
    if outcome.cache_entries:
        background_tasks.add_task(populate_cache, database, outcome.cache_entries, client)
    return response
