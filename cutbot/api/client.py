"""
cutbot/api/client.py

HTTP client for the ladder backend with exponential-backoff retries.

Every named operation builds a Request and goes through `send`, which owns the
retry loop:
  - 4xx          -> ClientError, raised immediately
  - 5xx          -> ServerError, retried
  - no response  -> TransportError, retried
  - bad envelope -> DecodeError, raised immediately

One instance is created at start-up and handed to the command layer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional
from urllib.parse import quote

import httpx

from .errors import ApiError, ClientError, DecodeError, ServerError, TransportError
from .models import ApiResponse, Request

if TYPE_CHECKING:
    from cutbot.config.models import ApiSettings


logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _error_details(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Pull (message, code) out of a `{success:false, message, code?}` body."""
    fallback = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback, None
    if not isinstance(body, dict):
        return fallback, None

    err = body.get("error")
    if isinstance(err, dict):
        message = err.get("message") or body.get("message")
        code = err.get("code") or body.get("code")
    else:
        message = body.get("message") or (err if isinstance(err, str) else None)
        code = body.get("code")
    return str(message or fallback), (str(code) if code is not None else None)


def parse_response(response: httpx.Response, request: Request, attempt: int = 1) -> ApiResponse:
    """
    Normalize one HTTP response into an ApiResponse or raise the matching ApiError.
    """
    status = response.status_code

    if 200 <= status < 300:
        if status == 204 or not response.content:
            return ApiResponse(data=None, status_code=status, attempts=attempt)
        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Response to {request.describe()} is not valid JSON",
                status_code=status, request=request, attempts=attempt,
            ) from e
        if not isinstance(body, dict) or not ("success" in body or "data" in body):
            raise DecodeError(
                f"Response to {request.describe()} is not a {{success, data}} envelope",
                status_code=status, request=request, attempts=attempt,
            )
        if body.get("success") is False:
            message, code = _error_details(response)
            raise DecodeError(
                f"Backend reported failure with HTTP {status}: {message}",
                status_code=status, code=code, request=request, attempts=attempt,
            )
        return ApiResponse(
            data=body.get("data"),
            success=True,
            status_code=status,
            attempts=attempt,
            raw=body,
        )

    message, code = _error_details(response)
    if 400 <= status < 500:
        raise ClientError(message, status_code=status, code=code, request=request, attempts=attempt)
    if status >= 500:
        raise ServerError(message, status_code=status, code=code, request=request, attempts=attempt)
    raise DecodeError(
        f"Unexpected HTTP status {status} for {request.describe()}",
        status_code=status, code=code, request=request, attempts=attempt,
    )


class LadderApiClient:
    def __init__(
        self,
        settings: ApiSettings,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """
        settings   : base URL, API key, timeout and retry policy
        http_client: optional pre-built httpx.AsyncClient (e.g. with a
                     MockTransport); the client only closes one it created
        sleep      : awaited between attempts; defaults to asyncio.sleep
        """
        self.settings = settings
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None
        self._sleep = sleep

    async def __aenter__(self) -> "LadderApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    # ── Core ────────────────────────────────────────────────────────────────

    async def _attempt(self, request: Request, attempt: int) -> ApiResponse:
        url = self.settings.base_url.rstrip("/") + request.path
        logger.debug("API Request: %s %s (attempt %d)", request.method, url, attempt)
        try:
            response = await self._http.request(
                request.method,
                url,
                params=dict(request.params) if request.params else None,
                json=dict(request.body) if request.body is not None else None,
                headers=self._headers(),
                timeout=self.settings.timeout_s,
            )
        except httpx.DecodingError as e:
            raise DecodeError(
                f"Response to {request.describe()} could not be decoded ({str(e) or 'no details'})",
                request=request,
                attempts=attempt,
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"No response from backend ({type(e).__name__}: {str(e) or 'no details'})",
                request=request,
                attempts=attempt,
            ) from e
        logger.debug("API Response: %s %s", response.status_code, url)
        return parse_response(response, request, attempt)

    async def send(self, request: Request) -> ApiResponse:
        """
        Perform `request`, retrying server and transport failures with
        exponential backoff. Raises the last ApiError once attempts run out.
        """
        policy = self.settings.retry
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return await self._attempt(request, attempt)
            except ApiError as e:
                if not e.retryable:
                    logger.warning("API call %s rejected: %s", request.describe(), e)
                    raise
                if attempt == policy.max_attempts:
                    e.attempts = attempt
                    logger.error(
                        "API call %s failed after %d attempts: %s",
                        request.describe(), attempt, e,
                    )
                    raise
                delay = policy.delay_before(attempt + 1)
                logger.warning(
                    "API call %s failed (attempt %d/%d), retrying in %dms: %s",
                    request.describe(), attempt, policy.max_attempts, int(delay * 1000), e,
                )
                await self._sleep(delay)
        raise AssertionError("unreachable: RetryPolicy guarantees max_attempts >= 1")

    # ── Users ───────────────────────────────────────────────────────────────

    async def create_user(self, username: str, twitch_name: str, discord_id: int | str) -> ApiResponse:
        return await self.send(Request(
            "POST", "/users",
            body={"username": username, "twitchName": twitch_name, "discordId": str(discord_id)},
        ))

    async def get_user(self, username: str) -> ApiResponse:
        return await self.send(Request("GET", f"/users/{_segment(username)}"))

    async def delete_user(self, username: str) -> ApiResponse:
        return await self.send(Request("DELETE", f"/users/{_segment(username)}"))

    async def list_users(self) -> ApiResponse:
        return await self.send(Request("GET", "/users"))

    # ── Matches ─────────────────────────────────────────────────────────────

    async def record_match(self, winner: str, loser: str, winner_score: int, loser_score: int) -> ApiResponse:
        # Retried like any other call; the backend has no idempotency key.
        return await self.send(Request(
            "POST", "/matches",
            body={"winner": winner, "loser": loser, "winnerScore": winner_score, "loserScore": loser_score},
        ))

    async def get_match_history(self, username: str, page: int = 1, limit: int = 10) -> ApiResponse:
        return await self.send(Request(
            "GET", f"/matches/{_segment(username)}", params={"page": page, "limit": limit},
        ))

    async def list_matches(self, page: int = 1, limit: int = 25) -> ApiResponse:
        return await self.send(Request("GET", "/matches", params={"page": page, "limit": limit}))

    async def delete_match(self, match_id: int) -> ApiResponse:
        return await self.send(Request("DELETE", f"/matches/{_segment(match_id)}"))

    # ── Ladder / stats ──────────────────────────────────────────────────────

    async def get_ladder(self, page: int = 1, limit: int = 25) -> ApiResponse:
        return await self.send(Request("GET", "/ladder", params={"page": page, "limit": limit}))

    async def get_user_stats(self, username: str) -> ApiResponse:
        return await self.send(Request("GET", f"/stats/{_segment(username)}"))
