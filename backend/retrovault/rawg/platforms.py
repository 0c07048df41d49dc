"""Static lookup of the retro platforms RAWG searches can be narrowed to."""

from __future__ import annotations

from typing import Mapping, NamedTuple, Optional


class PlatformMapping(NamedTuple):
    """RAWG identifier and display name for a platform filter key."""

    upstream_id: str
    display_name: str


# Keys are the filter values clients send; ids and names follow RAWG's platform list.
PLATFORMS: Mapping[str, PlatformMapping] = {
    "nes": PlatformMapping("49", "NES"),
    "snes": PlatformMapping("79", "SNES"),
    "n64": PlatformMapping("83", "Nintendo 64"),
    "game-boy": PlatformMapping("26", "Game Boy"),
    "game-boy-color": PlatformMapping("43", "Game Boy Color"),
    "game-boy-advance": PlatformMapping("24", "Game Boy Advance"),
    "genesis": PlatformMapping("167", "Genesis"),
    "master-system": PlatformMapping("74", "SEGA Master System"),
    "saturn": PlatformMapping("107", "SEGA Saturn"),
    "dreamcast": PlatformMapping("106", "Dreamcast"),
    "playstation": PlatformMapping("27", "PlayStation"),
    "atari-2600": PlatformMapping("23", "Atari 2600"),
}


def resolve_platform_filter(platform: Optional[str]) -> Optional[PlatformMapping]:
    """Return the mapping for a filter key, or None when absent or unrecognised."""
    if not platform:
        return None
    return PLATFORMS.get(platform.strip().lower())
