"""Session handling and route classification for authenticated access."""

from __future__ import annotations

from typing import Any, Final, Mapping, Optional
from urllib.parse import quote

from fastapi import Request
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from .errors import Unauthenticated, error_response
from .logging_utils import get_logger

logger = get_logger("security")

SESSION_PRINCIPAL_KEY: Final[str] = "principal_id"
API_PREFIX: Final[str] = "/api"
LOGIN_PATH: Final[str] = "/login"

PUBLIC_PATHS: Final[frozenset[str]] = frozenset(
    {
        "/api/signup",
        "/api/session",
        LOGIN_PATH,
        "/health",
        "/docs",
        "/docs/oauth2-redirect",
        "/redoc",
        "/openapi.json",
        "/favicon.ico",
    }
)
PUBLIC_PREFIXES: Final[tuple[str, ...]] = ("/static/",)


def is_public_path(path: str) -> bool:
    """Return True for routes reachable without a session."""
    normalized = path.rstrip("/") or "/"
    return normalized in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def is_api_path(path: str) -> bool:
    return path == API_PREFIX or path.startswith(f"{API_PREFIX}/")


def principal_from_session(session: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the principal id stored in a validated session, if any."""
    if not session:
        return None
    principal = session.get(SESSION_PRINCIPAL_KEY)
    return principal if isinstance(principal, str) and principal else None


def start_session(request: Request, principal_id: str) -> None:
    request.session.clear()
    request.session[SESSION_PRINCIPAL_KEY] = principal_id


def end_session(request: Request) -> None:
    request.session.clear()


def get_current_principal(request: Request) -> str:
    """FastAPI dependency resolving the authenticated principal id; fails closed."""
    principal = principal_from_session(request.scope.get("session"))
    if principal is None:
        raise Unauthenticated()
    return principal


class AuthGateMiddleware:
    """Reject or redirect requests to protected routes that carry no session.

    Must run inside ``SessionMiddleware`` so the signed cookie has already
    been verified and decoded into ``scope["session"]``.
    """

    def __init__(self, app: ASGIApp, *, login_path: str = LOGIN_PATH) -> None:
        self.app = app
        self.login_path = login_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if is_public_path(path) or principal_from_session(scope.get("session")):
            await self.app(scope, receive, send)
            return

        if is_api_path(path):
            logger.info("Rejected unauthenticated API request to %s", path)
            response = error_response(401, "Unauthorized")
        else:
            response = RedirectResponse(
                url=f"{self.login_path}?next={quote(path)}",
                status_code=303,
            )
        await response(scope, receive, send)
