"""RAWG video game database integration."""

from .client import RawgClient
from .errors import RawgError, RawgNotConfiguredError, RawgNotFoundError
from .platforms import PLATFORMS, PlatformMapping, resolve_platform_filter

__all__ = [
    "PLATFORMS",
    "PlatformMapping",
    "RawgClient",
    "RawgError",
    "RawgNotConfiguredError",
    "RawgNotFoundError",
    "resolve_platform_filter",
]
