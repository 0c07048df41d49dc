"""Meta endpoints (health, diagnostics, etc.)."""

from fastapi import APIRouter

from ..version import get_application_version

router = APIRouter(tags=["meta"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Simple health endpoint for uptime checks."""
    return {"status": "ok", "version": get_application_version()}
