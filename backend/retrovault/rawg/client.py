"""HTTP client for the RAWG video game database API."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import anyio
import cloudscraper
from requests import Response

from ..logging_utils import get_logger
from ..version import get_application_version
from .errors import RawgError, RawgNotConfiguredError, RawgNotFoundError

DEFAULT_BASE_URL = "https://api.rawg.io/api"
DEFAULT_PAGE_SIZE = 10

logger = get_logger("rawg.client")


class RawgClient:
    """Minimal client wrapper around the RAWG API."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        scraper: Optional[cloudscraper.CloudScraper] = None,
        max_attempts: int = 3,
        retry_backoff_base: float = 0.5,
    ) -> None:
        self.api_key = api_key or None
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff_base = max(0.0, retry_backoff_base)
        self._scraper = scraper or cloudscraper.create_scraper()
        # RAWG asks API consumers to identify themselves.
        self._scraper.headers.update(
            {"User-Agent": f"RetroVault/{get_application_version()}"}
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    # --------------------------------------------------------------------- #
    # Public API methods                                                    #
    # --------------------------------------------------------------------- #

    async def search_games(
        self,
        query: str,
        *,
        platform_id: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Dict[str, Any]:
        """Search games by title, optionally restricted to one RAWG platform id.

        Returns the raw payload: ``{"count": int, "results": [...]}``.
        """
        params: Dict[str, Any] = {"search": query, "page_size": page_size}
        if platform_id:
            params["platforms"] = platform_id
        payload = await self._request_json("GET", "/games", params=params)
        payload.setdefault("results", [])
        payload.setdefault("count", len(payload["results"]))
        return payload

    async def get_game_details(self, game_id: int) -> Dict[str, Any]:
        """Fetch the full record (including ``description_raw``) for one game."""
        return await self._request_json("GET", f"/games/{game_id}")

    # --------------------------------------------------------------------- #
    # Internal helpers                                                      #
    # --------------------------------------------------------------------- #

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.api_key:
            raise RawgNotConfiguredError("RAWG_API_KEY is not configured.")
        query = dict(params or {})
        query["key"] = self.api_key
        response = await self._request(method, path, params=query)
        try:
            return response.json()
        except ValueError as exc:
            raise RawgError(f"Failed to parse JSON response from '{path}'.") from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Response:
        url = f"{self.base_url}{path}"
        attempts = 0
        last_exception: Exception | None = None
        last_response: Response | None = None

        while attempts < self.max_attempts:
            attempts += 1
            attempt_started = time.perf_counter()
            try:
                response = await anyio.to_thread.run_sync(
                    self._make_request_sync,
                    method,
                    url,
                    params,
                )
            except Exception as exc:
                last_exception = exc
                logger.warning(
                    "RAWG request attempt failed due to exception.",
                    extra={
                        "rawg_method": method,
                        "rawg_path": path,
                        "rawg_attempt": attempts,
                        "rawg_duration_ms": round(
                            (time.perf_counter() - attempt_started) * 1000.0, 2
                        ),
                        "rawg_error": str(exc),
                    },
                )
            else:
                duration_ms = round((time.perf_counter() - attempt_started) * 1000.0, 2)
                if response.status_code == 404:
                    logger.info(
                        "RAWG resource returned 404.",
                        extra={"rawg_path": path, "rawg_attempt": attempts},
                    )
                    raise RawgNotFoundError(f"RAWG resource '{path}' returned HTTP 404.")

                if 200 <= response.status_code < 300:
                    logger.info(
                        "RAWG request succeeded.",
                        extra={
                            "rawg_method": method,
                            "rawg_path": path,
                            "rawg_status": response.status_code,
                            "rawg_attempt": attempts,
                            "rawg_duration_ms": duration_ms,
                        },
                    )
                    return response

                last_response = response
                should_retry = response.status_code >= 500 or response.status_code == 429
                log_level = logger.warning if should_retry else logger.error
                log_level(
                    "RAWG request returned error status.",
                    extra={
                        "rawg_method": method,
                        "rawg_path": path,
                        "rawg_status": response.status_code,
                        "rawg_attempt": attempts,
                        "rawg_duration_ms": duration_ms,
                    },
                )
                if not should_retry:
                    raise RawgError(
                        f"RAWG request to '{path}' failed with status {response.status_code}."
                    )

            if attempts < self.max_attempts:
                backoff = self.retry_backoff_base * (2 ** (attempts - 1))
                if backoff > 0:
                    await anyio.sleep(backoff)

        if last_exception is not None:
            raise RawgError(f"Failed to contact RAWG: {last_exception}") from last_exception

        if last_response is not None:
            raise RawgError(
                f"RAWG request to '{path}' failed with status {last_response.status_code}."
            )

        raise RawgError(f"RAWG request to '{path}' failed.")

    def _make_request_sync(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
    ) -> Response:
        return self._scraper.request(
            method,
            url,
            params=params,
            timeout=self.timeout,
        )
