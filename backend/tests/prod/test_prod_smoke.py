"""Production-only smoke tests for a deployed RetroVault instance."""

from __future__ import annotations

import os
from pathlib import Path

import httpx
import pytest
from motor.motor_asyncio import AsyncIOMotorClient

ENV_FILE_CANDIDATES = (".env", ".env.local", ".env.prod", ".env.production")


def _parse_env_file(path: Path) -> dict[str, str]:
    """Return ``KEY=value`` pairs from a dotenv style file, ignoring comments."""
    variables: dict[str, str] = {}
    try:
        lines = path.read_text(encoding="utf8").splitlines()
    except OSError:
        return variables
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip().removeprefix("export ").strip()
        value = value.strip()
        if value[:1] in {'"', "'"} and value[-1:] == value[:1]:
            value = value[1:-1]
        elif " #" in value:
            value = value.split(" #", 1)[0].rstrip()
        if key:
            variables[key] = value
    return variables


def _bootstrap_env_from_files() -> None:
    """Fill ``os.environ`` from repo-local env files without overriding real variables."""
    repo_root = Path(__file__).resolve().parents[3]
    env_root = Path(os.getenv("RETROVAULT_ENV_ROOT", repo_root))
    configured = [entry for entry in os.getenv("RETROVAULT_PROD_ENV_FILES", "").split(":") if entry]

    candidates = [env_root / name for name in (*configured, *ENV_FILE_CANDIDATES)]
    candidates.append(Path(__file__).with_name(".env"))
    seen: set[Path] = set()
    for path in candidates:
        if path in seen or not path.is_file():
            continue
        seen.add(path)
        for key, value in _parse_env_file(path).items():
            os.environ.setdefault(key, value)


_bootstrap_env_from_files()


@pytest.fixture()
def anyio_backend() -> str:
    """Force prod anyio tests to use asyncio backend only."""
    return "asyncio"


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        pytest.skip(f"Environment variable '{name}' not provided for production smoke tests.")
    return value


def _api_base() -> str:
    return _require_env("PROD_API_BASE_URL").rstrip("/")


@pytest.mark.prod
def test_api_healthcheck_is_healthy() -> None:
    """Verify the `/health` endpoint is reachable in production."""
    with httpx.Client(timeout=5.0) as client:
        response = client.get(f"{_api_base()}/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload.get("status") == "ok"
    assert payload.get("version")


@pytest.mark.prod
def test_collection_requires_session() -> None:
    """Protected API routes must answer 401 JSON to anonymous callers."""
    with httpx.Client(timeout=5.0) as client:
        response = client.get(f"{_api_base()}/api/games")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized"}


@pytest.mark.prod
def test_login_page_is_served() -> None:
    with httpx.Client(timeout=5.0) as client:
        response = client.get(f"{_api_base()}/login")
    assert response.status_code == 200
    assert "text/html" in response.headers.get("content-type", "")


@pytest.mark.prod
@pytest.mark.anyio
async def test_mongo_ping_succeeds() -> None:
    """Ensure the production MongoDB cluster is reachable and responsive."""
    mongo_uri = _require_env("PROD_MONGO_URI")
    client = AsyncIOMotorClient(mongo_uri, serverSelectionTimeoutMS=3000)
    try:
        result = await client.admin.command("ping")
    finally:
        client.close()
    assert result.get("ok") == 1.0
