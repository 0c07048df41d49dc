"""Domain exceptions and the JSON envelope handlers that translate them."""

from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_utils import get_logger

logger = get_logger("errors")


class ValidationError(ValueError):
    """Raised when client-supplied data is missing or out of range."""


class ConflictError(ValueError):
    """Raised when a unique resource (such as an account email) already exists."""


class NotFoundError(LookupError):
    """Raised when a resource is absent or owned by another principal."""


class Unauthenticated(Exception):
    """Raised when a request carries no valid session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class UpstreamUnavailable(Exception):
    """Raised when the external catalog cannot serve a search.

    ``reason`` is ``"unconfigured"`` when no credential is set and ``"failed"``
    when the upstream call raised.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: Literal["unconfigured", "failed"] = "failed",
    ) -> None:
        super().__init__(message)
        self.reason = reason

    @property
    def status_code(self) -> int:
        if self.reason == "unconfigured":
            return status.HTTP_503_SERVICE_UNAVAILABLE
        return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_payload(message: str, **extra: Any) -> dict[str, Any]:
    """Build the failure envelope shared by every API route."""
    payload: dict[str, Any] = {"success": False, "error": message}
    payload.update(extra)
    return payload


def error_response(
    status_code: int,
    message: str,
    *,
    headers: Optional[dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_payload(message, **extra),
        headers=headers,
    )


def format_validation_error(exc: RequestValidationError) -> str:
    """Return a field-level message for the first validation failure."""
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        # Pydantic prefixes messages raised from validators.
        message = message.removeprefix("Value error, ")
        if location:
            return f"{'.'.join(location)}: {message}"
        return message
    return "Invalid request."


def register_exception_handlers(app: FastAPI) -> None:
    """Translate domain and framework errors into the JSON envelope."""

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = format_validation_error(exc)
        logger.info("Rejected request payload: %s", message)
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(ValidationError)
    async def _handle_validation(_: Request, exc: ValidationError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(ConflictError)
    async def _handle_conflict(_: Request, exc: ConflictError) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(NotFoundError)
    async def _handle_not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(Unauthenticated)
    async def _handle_unauthenticated(_: Request, exc: Unauthenticated) -> JSONResponse:
        return error_response(status.HTTP_401_UNAUTHORIZED, str(exc))

    @app.exception_handler(UpstreamUnavailable)
    async def _handle_upstream(_: Request, exc: UpstreamUnavailable) -> JSONResponse:
        return error_response(exc.status_code, str(exc), fallbackToManual=True)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
