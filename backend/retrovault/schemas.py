"""Pydantic schemas that describe the API payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

MIN_GAME_YEAR = 1970
MIN_PASSWORD_LENGTH = 6


def max_game_year() -> int:
    """Latest release year accepted for a game (next calendar year)."""
    return datetime.now(timezone.utc).year + 1


def _check_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    upper = max_game_year()
    if value < MIN_GAME_YEAR or value > upper:
        raise ValueError(f"Year must be between {MIN_GAME_YEAR} and {upper}")
    return value


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class GameStatus(str, Enum):
    """Whether a game is in the collection or only wanted."""

    OWNED = "owned"
    WISHLIST = "wishlist"


class GameCondition(str, Enum):
    """Physical condition of an owned game."""

    MINT = "mint"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# --------------------------------------------------------------------- #
# Accounts and sessions                                                 #
# --------------------------------------------------------------------- #


class SignupRequest(BaseModel):
    """Account creation payload. Presence and length are checked by the auth service."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class SessionCreate(BaseModel):
    """Credential submission payload."""

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None


class UserPublic(BaseModel):
    """User identity safe to return to clients."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    email: str


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserPublic


class SuccessEnvelope(BaseModel):
    success: bool = True


# --------------------------------------------------------------------- #
# Game records                                                          #
# --------------------------------------------------------------------- #


class PurchaseInfo(BaseModel):
    """Where, when and for how much an owned game was bought."""

    model_config = ConfigDict(extra="ignore")

    price: Optional[float] = Field(default=None, ge=0)
    date: Optional[datetime] = None
    location: Optional[str] = None

    @field_validator("location")
    @classmethod
    def strip_location(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class GameFields(BaseModel):
    """Optional attributes shared by create and update payloads.

    Unknown keys (including any client-supplied owner such as ``userId``)
    are discarded.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, use_enum_values=True)

    year: Optional[int] = None
    genre: Optional[str] = None
    cover_image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("coverImageUrl", "cover_image_url"),
    )
    notes: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    condition: Optional[GameCondition] = None
    purchase_info: Optional[PurchaseInfo] = Field(
        default=None,
        validation_alias=AliasChoices("purchaseInfo", "purchase_info"),
    )

    @field_validator("year")
    @classmethod
    def check_year_range(cls, value: Optional[int]) -> Optional[int]:
        return _check_year(value)

    @field_validator("genre", "cover_image_url", "notes")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class GameCreate(GameFields):
    """Payload accepted when adding a game to the collection."""

    title: str
    platform: str
    status: GameStatus = Field(default=GameStatus.OWNED, validate_default=True)

    @field_validator("title", "platform")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value


class GameUpdate(GameFields):
    """Partial update payload; only fields present in the request are applied."""

    title: Optional[str] = None
    platform: Optional[str] = None
    status: Optional[GameStatus] = None

    @field_validator("title", "platform", "status", mode="before")
    @classmethod
    def reject_blank(cls, value):
        if value is None:
            raise ValueError("This field is required")
        if isinstance(value, str) and not value.strip():
            raise ValueError("This field is required")
        return value.strip() if isinstance(value, str) else value


class GameRecord(BaseModel):
    """A single collection entry as returned to its owner."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    user_id: str = Field(serialization_alias="userId")
    title: str
    platform: str
    year: Optional[int] = None
    genre: Optional[str] = None
    status: GameStatus
    cover_image_url: Optional[str] = Field(default=None, serialization_alias="coverImageUrl")
    notes: Optional[str] = None
    rating: Optional[float] = None
    condition: Optional[GameCondition] = None
    purchase_info: Optional[PurchaseInfo] = Field(default=None, serialization_alias="purchaseInfo")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class GameEnvelope(BaseModel):
    success: bool = True
    data: GameRecord


class GameListEnvelope(BaseModel):
    success: bool = True
    data: List[GameRecord] = Field(default_factory=list)


class EmptyDataEnvelope(BaseModel):
    success: bool = True
    data: dict = Field(default_factory=dict)


# --------------------------------------------------------------------- #
# Catalog search                                                        #
# --------------------------------------------------------------------- #


class CatalogMetadata(BaseModel):
    """Name lists kept alongside a cached catalog entry."""

    model_config = ConfigDict(extra="ignore")

    platforms: List[str] = Field(default_factory=list)
    genres: List[str] = Field(default_factory=list)
    developers: List[str] = Field(default_factory=list)
    publishers: List[str] = Field(default_factory=list)


class CachedCatalogEntry(BaseModel):
    """Snapshot of one external catalog item, keyed by ``external_id``.

    ``platform_ids`` holds the upstream ids of every listed platform so a
    filtered search can match the entry regardless of the display name.
    """

    model_config = ConfigDict(extra="ignore")

    external_id: int
    title: str
    platform: str
    platform_ids: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    genre: Optional[str] = None
    cover_image_url: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    metacritic: Optional[int] = Field(default=None, ge=0, le=100)
    description: Optional[str] = None
    metadata: CatalogMetadata = Field(default_factory=CatalogMetadata)
    cached_at: Optional[datetime] = None


class NormalizedResult(BaseModel):
    """Search result shape shared by cache hits and upstream results."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: int = Field(serialization_alias="externalId")
    title: str
    platform: str
    year: Optional[int] = None
    genre: Optional[str] = None
    cover_image_url: Optional[str] = Field(default=None, serialization_alias="coverImageUrl")
    notes: Optional[str] = None


class SearchEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[NormalizedResult] = Field(default_factory=list)
    cached: bool


# --------------------------------------------------------------------- #
# Statistics                                                            #
# --------------------------------------------------------------------- #


class BreakdownEntry(BaseModel):
    name: str
    count: int


class CollectionStats(BaseModel):
    """Derived figures over a user's collection."""

    model_config = ConfigDict(populate_by_name=True)

    total_games: int = Field(serialization_alias="totalGames")
    owned_count: int = Field(serialization_alias="ownedCount")
    wishlist_count: int = Field(serialization_alias="wishlistCount")
    total_value: float = Field(serialization_alias="totalValue")
    average_year: Optional[int] = Field(serialization_alias="averageYear")
    platform_breakdown: List[BreakdownEntry] = Field(serialization_alias="platformBreakdown")
    genre_breakdown: List[BreakdownEntry] = Field(serialization_alias="genreBreakdown")
    condition_breakdown: List[BreakdownEntry] = Field(serialization_alias="conditionBreakdown")
    status_breakdown: List[BreakdownEntry] = Field(serialization_alias="statusBreakdown")


class StatsEnvelope(BaseModel):
    success: bool = True
    stats: CollectionStats
