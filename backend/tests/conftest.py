"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
WORKSPACE_ROOT = ROOT.parent
for path in (ROOT, WORKSPACE_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Cheap hashes and a stable signing key for the whole suite.
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

from retrovault.config import get_settings  # noqa: E402
from retrovault.dependencies import get_mongo_database, get_rawg_client  # noqa: E402
from retrovault.main import create_app  # noqa: E402
from backend.tests.utils import StubDatabase, StubRawgClient  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register custom CLI flags for backend test suite."""
    parser.addoption(
        "--prod-smoke",
        action="store_true",
        default=False,
        help=(
            "Run tests marked with @pytest.mark.prod against a deployed instance. "
            "Also enabled when RUN_PROD_SMOKE is set to a truthy value."
        ),
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "prod: smoke tests that hit deployed infrastructure")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip production smoke tests unless explicitly enabled."""
    if config.getoption("--prod-smoke"):
        return
    env_flag = os.getenv("RUN_PROD_SMOKE", "").strip()
    if env_flag.lower() in {"1", "true", "yes", "on"}:
        return
    skip_prod = pytest.mark.skip(reason="Production smoke tests disabled; pass --prod-smoke to enable.")
    for item in items:
        if "prod" in item.keywords:
            item.add_marker(skip_prod)


@pytest.fixture()
def anyio_backend() -> str:
    """Force AnyIO tests to run against asyncio to avoid optional dependencies."""
    return "asyncio"


@pytest.fixture()
def stub_db() -> StubDatabase:
    settings = get_settings()
    return StubDatabase(unique_fields={settings.mongo_users_collection: ("email",)})


@pytest.fixture()
def api_client(stub_db: StubDatabase) -> TestClient:
    """Provide a FastAPI TestClient with dependency overrides reset after use.

    The catalog is unconfigured by default; tests override ``get_rawg_client``
    to script upstream behaviour.
    """
    get_settings.cache_clear()
    app = create_app()
    app.dependency_overrides[get_mongo_database] = lambda: stub_db
    app.dependency_overrides[get_rawg_client] = lambda: StubRawgClient(configured=False)
    app.state.stub_db = stub_db
    client = TestClient(app)
    try:
        yield client
    finally:
        app.dependency_overrides.clear()
