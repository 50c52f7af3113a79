"""Async HTTP client for the Heroku Platform API add-on endpoints.

Provides create, info, update and delete operations for add-ons. Auth uses a
static bearer token. Includes exponential backoff with jitter for transient
errors and Retry-After header respect for 429 responses. Only GET requests are
retried: a create, update or delete whose response was lost may already have
taken effect, so it fails on first occurrence instead of being resent.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Mapping

import httpx

from ..observability import get_logger

logger = get_logger(__name__)

# Methods safe to resend after a timeout or transient error.
_IDEMPOTENT_METHODS = frozenset({"GET"})

# Status codes eligible for automatic retry.
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# Default retry configuration.
_DEFAULT_MAX_RETRIES = 3
_DEFAULT_BASE_DELAY = 1.0  # seconds
_DEFAULT_MAX_DELAY = 30.0  # seconds

_ACCEPT_HEADER = "application/vnd.heroku+json; version=3"

NOT_FOUND_ERROR_ID = "not_found"


# ── Exception hierarchy ─────────────────────────────────────────


class HerokuAPIError(Exception):
    """Non-success response from the Platform API.

    ``error_id`` is the ``id`` field of the structured JSON error payload
    (for example ``"not_found"`` or ``"invalid_params"``).
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        *,
        error_id: str | None = None,
        url: str | None = None,
        response_body: str = "",
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.error_id = error_id
        self.url = url
        self.response_body = response_body
        detail = f"{message} ({error_id})" if error_id else message
        super().__init__(f"Heroku API error {status_code}: {detail}")


class HerokuTimeoutError(HerokuAPIError):
    """Request to the Platform API timed out."""

    def __init__(self, message: str = "Request timed out", *, url: str | None = None) -> None:
        super().__init__(0, message, url=url)


def is_not_found_error(exc: BaseException | None) -> bool:
    """Return True if ``exc`` carries a structured ``not_found`` API error.

    The cause/context chain is walked so callers may wrap the client error
    without breaking detection. The HTTP status code is not consulted.
    """
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, HerokuAPIError) and exc.error_id == NOT_FOUND_ERROR_ID:
            return True
        exc = exc.__cause__ or exc.__context__
    return False


# ── Client ───────────────────────────────────────────────────────


class HerokuClient:
    """Async HTTP client for Platform API add-on operations."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.heroku.com",
        headers: Mapping[str, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        base_delay: float = _DEFAULT_BASE_DELAY,
        max_delay: float = _DEFAULT_MAX_DELAY,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")

        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._extra_headers = dict(headers or {})
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()
        self._timeout = float(timeout_seconds)
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HerokuClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            **self._extra_headers,
            "Accept": _ACCEPT_HEADER,
            "Authorization": f"Bearer {self._api_key}",
        }

    def _raise_for_status(self, resp: httpx.Response, url: str) -> None:
        if resp.status_code < 400:
            return

        body = resp.text
        message = body[:200] if body else f"HTTP {resp.status_code}"
        error_id: str | None = None

        try:
            payload = resp.json()
            if isinstance(payload, dict):
                message = payload.get("message", message)
                error_id = payload.get("id")
        except ValueError:
            pass

        raise HerokuAPIError(
            resp.status_code,
            message,
            error_id=error_id,
            url=url,
            response_body=body,
        )

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        idempotent: bool = True,
    ) -> httpx.Response:
        """Execute an HTTP request with exponential backoff retry for transient errors.

        Non-idempotent requests are sent once; a timeout raises
        HerokuTimeoutError and a 429/5xx response is returned as-is.
        """
        url = f"{self._base_url}{path}"
        headers = self._headers()
        max_retries = self._max_retries if idempotent else 0

        for attempt in range(max_retries + 1):
            try:
                resp = await self._client.request(
                    method,
                    url,
                    headers=headers,
                    json=json,
                    timeout=self._timeout,
                )
            except httpx.TimeoutException as e:
                if attempt < max_retries:
                    delay = self._backoff_delay(attempt)
                    logger.warning(
                        "heroku_request_timeout",
                        method=method,
                        path=path,
                        attempt=attempt + 1,
                        max_attempts=max_retries + 1,
                        retry_in=round(delay, 1),
                    )
                    await asyncio.sleep(delay)
                    continue
                raise HerokuTimeoutError(str(e) or "Request timed out", url=url) from e

            if resp.status_code not in _RETRYABLE_STATUS_CODES:
                return resp

            if attempt >= max_retries:
                return resp

            delay = self._retry_after_delay(resp, attempt)
            logger.warning(
                "heroku_request_retry",
                method=method,
                path=path,
                status=resp.status_code,
                attempt=attempt + 1,
                max_attempts=max_retries + 1,
                retry_in=round(delay, 1),
            )
            await asyncio.sleep(delay)

        raise HerokuAPIError(0, "exhausted retries with no response", url=url)

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with full jitter."""
        delay = min(self._base_delay * (2 ** attempt), self._max_delay)
        return random.uniform(0, delay)

    def _retry_after_delay(self, resp: httpx.Response, attempt: int) -> float:
        """Use Retry-After header if present, otherwise exponential backoff."""
        retry_after = resp.headers.get("retry-after")
        if retry_after:
            try:
                return max(float(retry_after), 0.1)
            except ValueError:
                pass
        return self._backoff_delay(attempt)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
    ) -> dict[str, Any]:
        resp = await self._request_with_retry(
            method,
            path,
            json=json,
            idempotent=method in _IDEMPOTENT_METHODS,
        )
        self._raise_for_status(resp, f"{self._base_url}{path}")
        if not resp.content:
            return {}
        result = resp.json()
        if not isinstance(result, dict):
            raise HerokuAPIError(
                status_code=resp.status_code,
                message=f"Expected object from {path}, got {type(result).__name__}",
            )
        return result

    # ── Public API ───────────────────────────────────────────────

    async def create_addon(
        self,
        app: str,
        plan: str,
        *,
        name: str | None = None,
        config: Mapping[str, str] | None = None,
        confirm: str | None = None,
    ) -> dict[str, Any]:
        """Create an add-on attached to ``app``.

        ``confirm`` echoes the app identifier; the API requires it for
        paid plans on apps with certain safety settings.
        """
        payload: dict[str, Any] = {"plan": plan}
        if name:
            payload["name"] = name
        if config:
            payload["config"] = dict(config)
        if confirm:
            payload["confirm"] = confirm

        return await self._call("POST", f"/apps/{app}/addons", json=payload)

    async def get_addon(self, addon_id: str) -> dict[str, Any]:
        """Get add-on info by id or name.

        Raises HerokuAPIError with error_id ``not_found`` if it doesn't exist.
        """
        return await self._call("GET", f"/addons/{addon_id}")

    async def get_addon_by_app(self, app: str, addon_id: str) -> dict[str, Any]:
        """Get add-on info scoped to an app."""
        return await self._call("GET", f"/apps/{app}/addons/{addon_id}")

    async def update_addon(self, app: str, addon_id: str, *, plan: str) -> dict[str, Any]:
        """Change an add-on's plan. The returned id may differ from ``addon_id``."""
        return await self._call(
            "PATCH",
            f"/apps/{app}/addons/{addon_id}",
            json={"plan": plan},
        )

    async def delete_addon(self, app: str, addon_id: str) -> dict[str, Any]:
        """Delete an add-on from an app."""
        return await self._call("DELETE", f"/apps/{app}/addons/{addon_id}")
