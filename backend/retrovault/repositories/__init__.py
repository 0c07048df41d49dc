"""Repository helpers for MongoDB persistence."""

from .game_cache import GameCacheRepository, ensure_game_cache_indexes
from .games import GameRepository, ensure_game_indexes
from .users import UserRepository, ensure_user_indexes

__all__ = [
    "GameCacheRepository",
    "GameRepository",
    "UserRepository",
    "ensure_game_cache_indexes",
    "ensure_game_indexes",
    "ensure_user_indexes",
]
