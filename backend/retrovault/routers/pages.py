"""Minimal HTML pages; unauthenticated visits are redirected to /login by the auth gate."""

from html import escape

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_current_principal, get_mongo_database
from ..services.auth import fetch_user

router = APIRouter(tags=["pages"], include_in_schema=False)

_PAGE = """<!doctype html>
<html lang="en">
<head><meta charset="utf-8"><title>RetroVault</title></head>
<body>{body}</body>
</html>
"""


@router.get("/login", response_class=HTMLResponse)
async def login_page(next_path: str = Query(default="/", alias="next")) -> HTMLResponse:
    # Only same-site relative targets.
    if not next_path.startswith("/") or next_path.startswith("//"):
        next_path = "/"
    body = (
        "<h1>Sign in</h1>"
        "<p>Submit your credentials to <code>POST /api/session</code>, "
        f"then continue to <a href=\"{escape(next_path, quote=True)}\">your collection</a>.</p>"
    )
    return HTMLResponse(_PAGE.format(body=body))


@router.get("/", response_class=HTMLResponse)
async def home_page(
    principal: str = Depends(get_current_principal),
    database: AsyncIOMotorDatabase = Depends(get_mongo_database),
) -> HTMLResponse:
    user = await fetch_user(database, principal)
    name = escape(user.name or user.email) if user else "collector"
    body = f"<h1>Welcome back, {name}</h1><p>Your games are at <code>/api/games</code>.</p>"
    return HTMLResponse(_PAGE.format(body=body))
