"""Router for collection statistics."""

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_current_principal, get_mongo_database
from ..schemas import StatsEnvelope
from ..services.stats import compute_stats

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get(
    "",
    response_model=StatsEnvelope,
    summary="Summarize the user's collection.",
)
async def get_collection_stats(
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> StatsEnvelope:
    return StatsEnvelope(stats=await compute_stats(database, principal))
