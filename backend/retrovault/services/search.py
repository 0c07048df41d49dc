"""Catalog search that serves cached RAWG results before calling upstream."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, NamedTuple, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import UpstreamUnavailable, ValidationError
from ..logging_utils import get_logger
from ..rawg import PlatformMapping, RawgClient, resolve_platform_filter
from ..repositories import GameCacheRepository
from ..repositories.game_cache import SEARCH_PAGE_SIZE
from ..schemas import CachedCatalogEntry, CatalogMetadata, NormalizedResult

logger = get_logger("services.search")

UNKNOWN_PLATFORM = "Unknown"
NOTES_EXCERPT_LENGTH = 200
NOT_CONFIGURED_MESSAGE = "RAWG API not configured. Please use manual entry."
SEARCH_FAILED_MESSAGE = "Search failed. Please use manual entry."


@dataclass
class SearchOutcome:
    """Normalized items plus the entries still to be written to the cache."""

    items: List[NormalizedResult]
    served_from_cache: bool
    count: int
    cache_entries: List[CachedCatalogEntry] = field(default_factory=list)


class CacheWriteResult(NamedTuple):
    external_id: int
    ok: bool
    error: Optional[str] = None


# --------------------------------------------------------------------- #
# Normalization                                                         #
# --------------------------------------------------------------------- #


def _platform_entries(item: dict[str, Any]) -> list[dict[str, Any]]:
    entries = []
    for wrapper in item.get("platforms") or []:
        platform = (wrapper or {}).get("platform") or {}
        if platform.get("name"):
            entries.append(platform)
    return entries


def resolve_item_platform(item: dict[str, Any], mapping: Optional[PlatformMapping]) -> str:
    """Pick the display platform: the filtered one when listed, else the first, else Unknown."""
    platforms = _platform_entries(item)
    if mapping is not None:
        for platform in platforms:
            if str(platform.get("id")) == mapping.upstream_id:
                return platform["name"]
    if platforms:
        return platforms[0]["name"]
    return UNKNOWN_PLATFORM


def _release_year(released: Any) -> Optional[int]:
    if not isinstance(released, str) or len(released) < 4:
        return None
    try:
        return int(released[:4])
    except ValueError:
        return None


def _clamp(value: Any, lower: float, upper: float) -> Optional[float]:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return None
    return max(lower, min(upper, value))


def _names(entries: Any) -> list[str]:
    return [entry["name"] for entry in entries or [] if entry and entry.get("name")]


def build_cache_entry(item: dict[str, Any], mapping: Optional[PlatformMapping]) -> CachedCatalogEntry:
    """Convert one upstream search item into its cache snapshot."""
    genres = _names(item.get("genres"))
    metacritic = _clamp(item.get("metacritic"), 0, 100)
    platforms = _platform_entries(item)
    return CachedCatalogEntry(
        external_id=int(item["id"]),
        title=item["name"],
        platform=resolve_item_platform(item, mapping),
        platform_ids=[str(platform["id"]) for platform in platforms if platform.get("id") is not None],
        year=_release_year(item.get("released")),
        genre=genres[0] if genres else None,
        cover_image_url=item.get("background_image") or None,
        rating=_clamp(item.get("rating"), 0, 5),
        metacritic=int(metacritic) if metacritic is not None else None,
        description=(item.get("description_raw") or "").strip() or None,
        metadata=CatalogMetadata(
            platforms=[platform["name"] for platform in platforms],
            genres=genres,
            developers=_names(item.get("developers")),
            publishers=_names(item.get("publishers")),
        ),
    )


def merge_details(entry: CachedCatalogEntry, details: dict[str, Any]) -> CachedCatalogEntry:
    """Fold a RAWG details payload (description, developers, publishers) into an entry."""
    description = (details.get("description_raw") or "").strip() or entry.description
    metadata = entry.metadata.model_copy(
        update={
            "developers": _names(details.get("developers")) or entry.metadata.developers,
            "publishers": _names(details.get("publishers")) or entry.metadata.publishers,
        }
    )
    return entry.model_copy(update={"description": description, "metadata": metadata})


def synthesize_notes(description: Optional[str], rating: Optional[float]) -> Optional[str]:
    """Notes text for a new record: a description excerpt, else a rating summary."""
    if description:
        text = " ".join(description.split())
        if len(text) <= NOTES_EXCERPT_LENGTH:
            return text
        excerpt = text[:NOTES_EXCERPT_LENGTH].rsplit(" ", 1)[0].rstrip(",.;:")
        return f"{excerpt}..."
    if rating:
        return f"Added from RAWG. Rating: {rating:g}/5"
    return None


def normalize_entry(entry: CachedCatalogEntry) -> NormalizedResult:
    return NormalizedResult(
        external_id=entry.external_id,
        title=entry.title,
        platform=entry.platform,
        year=entry.year,
        genre=entry.genre,
        cover_image_url=entry.cover_image_url,
        notes=synthesize_notes(entry.description, entry.rating),
    )


# --------------------------------------------------------------------- #
# Orchestration                                                         #
# --------------------------------------------------------------------- #


async def search_catalog(
    database: AsyncIOMotorDatabase,
    client: RawgClient,
    query: Optional[str],
    platform: Optional[str] = None,
) -> SearchOutcome:
    """Serve a search from the local cache, falling back to RAWG on a miss.

    Upstream results are returned together with the cache entries to persist;
    the caller schedules :func:`populate_cache` once the response is built.
    Raises :class:`UpstreamUnavailable` when RAWG cannot be used.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Query parameter 'q' is required")

    mapping = resolve_platform_filter(platform)
    if platform and mapping is None:
        logger.info("Ignoring unknown platform filter '%s'.", platform)

    repository = GameCacheRepository(database)
    try:
        cached = await repository.search(
            query,
            platform_id=mapping.upstream_id if mapping else None,
            platform_name=mapping.display_name if mapping else None,
            limit=SEARCH_PAGE_SIZE,
        )
    except Exception as error:
        logger.exception("Cache lookup failed for '%s'.", query)
        raise UpstreamUnavailable(SEARCH_FAILED_MESSAGE, reason="failed") from error
    if cached:
        items = [normalize_entry(CachedCatalogEntry.model_validate(document)) for document in cached]
        logger.info("Catalog search for '%s' served %d cached result(s).", query, len(items))
        return SearchOutcome(items=items, served_from_cache=True, count=len(items))

    if not client.is_configured:
        logger.info("Catalog search for '%s' missed the cache and RAWG is not configured.", query)
        raise UpstreamUnavailable(NOT_CONFIGURED_MESSAGE, reason="unconfigured")

    try:
        payload = await client.search_games(
            query,
            platform_id=mapping.upstream_id if mapping else None,
        )
    except Exception as error:
        logger.warning("RAWG search failed for '%s': %s", query, error)
        raise UpstreamUnavailable(SEARCH_FAILED_MESSAGE, reason="failed") from error

    entries: list[CachedCatalogEntry] = []
    for item in payload.get("results") or []:
        if not item or item.get("id") is None or not item.get("name"):
            logger.debug("Skipping RAWG item without id or name: %r", item)
            continue
        entries.append(build_cache_entry(item, mapping))

    items = [normalize_entry(entry) for entry in entries]
    count = payload.get("count")
    logger.info("Catalog search for '%s' returned %d RAWG result(s).", query, len(items))
    return SearchOutcome(
        items=items,
        served_from_cache=False,
        count=count if isinstance(count, int) else len(items),
        cache_entries=entries,
    )


async def _enrich_entry(
    repository: GameCacheRepository,
    client: RawgClient,
    entry: CachedCatalogEntry,
) -> CachedCatalogEntry:
    """Add description, developers and publishers, reusing a described cache entry when present."""
    existing = await repository.find_by_external_id(entry.external_id)
    if existing and existing.get("description"):
        cached = CachedCatalogEntry.model_validate(existing)
        metadata = entry.metadata.model_copy(
            update={
                "developers": cached.metadata.developers,
                "publishers": cached.metadata.publishers,
            }
        )
        return entry.model_copy(update={"description": cached.description, "metadata": metadata})
    try:
        details = await client.get_game_details(entry.external_id)
    except Exception as error:
        logger.warning("RAWG details unavailable for game %s: %s", entry.external_id, error)
        return entry
    return merge_details(entry, details or {})


async def populate_cache(
    database: AsyncIOMotorDatabase,
    entries: Iterable[CachedCatalogEntry],
    client: Optional[RawgClient] = None,
) -> list[CacheWriteResult]:
    """Upsert each entry independently; failures are logged and reported, never raised.

    With a configured ``client`` each entry is first enriched from the RAWG
    details endpoint so later cache hits can quote the description.
    """
    repository = GameCacheRepository(database)
    enrich = client is not None and client.is_configured
    results: list[CacheWriteResult] = []
    for entry in entries:
        try:
            if enrich:
                entry = await _enrich_entry(repository, client, entry)
            document = entry.model_dump(mode="python", exclude_none=True)
            await repository.upsert(document)
        except Exception as error:
            logger.exception("Failed to cache RAWG game %s.", entry.external_id)
            results.append(CacheWriteResult(entry.external_id, False, str(error)))
        else:
            results.append(CacheWriteResult(entry.external_id, True))

    written = sum(1 for result in results if result.ok)
    logger.info("Cache population finished: %d/%d entr(ies) written.", written, len(results))
    return results
