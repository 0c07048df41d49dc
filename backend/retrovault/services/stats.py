"""Collection statistics derived on demand from a user's game records."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..logging_utils import get_logger
from ..repositories import GameRepository
from ..schemas import BreakdownEntry, CollectionStats, GameStatus

logger = get_logger("services.stats")


def _breakdown(values: Iterable[Optional[str]]) -> List[BreakdownEntry]:
    """Count values, most frequent first; ties keep first-encounter order."""
    counts: dict[str, int] = {}
    for value in values:
        if value:
            counts[value] = counts.get(value, 0) + 1
    ordered = sorted(counts.items(), key=lambda pair: pair[1], reverse=True)
    return [BreakdownEntry(name=name, count=count) for name, count in ordered]


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _price(document: dict[str, Any]) -> Decimal:
    price = (document.get("purchase_info") or {}).get("price")
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        return Decimal(str(price))
    return Decimal("0")


def summarize_games(documents: List[dict[str, Any]]) -> CollectionStats:
    """Aggregate counts and breakdowns over stored game documents.

    ``documents`` should be in creation order so tie-breaking is stable.
    """
    owned = [doc for doc in documents if doc.get("status") == GameStatus.OWNED.value]
    wishlist_count = sum(1 for doc in documents if doc.get("status") == GameStatus.WISHLIST.value)

    years = [doc["year"] for doc in documents if isinstance(doc.get("year"), int)]
    average_year = (
        _round_half_up(Decimal(sum(years)) / Decimal(len(years))) if years else None
    )
    total_value = sum((_price(doc) for doc in documents), Decimal("0"))

    return CollectionStats(
        total_games=len(documents),
        owned_count=len(owned),
        wishlist_count=wishlist_count,
        total_value=float(total_value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
        average_year=average_year,
        platform_breakdown=_breakdown(doc.get("platform") for doc in documents),
        genre_breakdown=_breakdown(doc.get("genre") for doc in documents),
        condition_breakdown=_breakdown(doc.get("condition") for doc in owned),
        status_breakdown=[
            BreakdownEntry(name="Owned", count=len(owned)),
            BreakdownEntry(name="Wishlist", count=wishlist_count),
        ],
    )


async def compute_stats(database: AsyncIOMotorDatabase, user_id: str) -> CollectionStats:
    repository = GameRepository(database)
    documents = await repository.list_for_owner(user_id, newest_first=False)
    stats = summarize_games(documents)
    logger.debug("Computed stats over %d game(s) for user '%s'.", stats.total_games, user_id)
    return stats
