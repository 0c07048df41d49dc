"""Resolve the application version reported by the API and outbound requests."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "retrovault"
FALLBACK_VERSION = "0.0.0"


def _read_version_file() -> str | None:
    version_file = Path(__file__).resolve().parents[2] / "VERSION"
    try:
        version = version_file.read_text(encoding="utf8").strip()
    except FileNotFoundError:
        return None
    return version or None


@lru_cache(maxsize=1)
def get_application_version() -> str:
    """Return the version from the repo VERSION file, else the installed distribution."""
    version = _read_version_file()
    if version:
        return version
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION
