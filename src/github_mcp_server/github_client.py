"""GitHub REST client wrapper.

Provides:
- a single base URL derived from the configured host, no redirects
- bounded retries with backoff on 429/5xx and transport errors
- finite timeouts
- translation of non-success statuses into `UpstreamStatus` errors carrying the body
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from . import __version__
from .config import LimitsConfig
from .errors import SafeError, serialization_error, transport_error, upstream_status_error

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

JSON_MEDIA_TYPE = "application/vnd.github+json"
DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


@dataclass(frozen=True, slots=True)
class RequestBudget:
    """Budget for a single tool call."""

    total_timeout_s: float


def static_token_provider(token: str) -> TokenProvider:
    """Return a token provider for a fixed personal access token."""

    async def _provide() -> str:
        return token

    return _provide


class GitHubClient:
    """Minimal GitHub REST client."""

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        limits: LimitsConfig,
        api_base_url: str = "https://api.github.com",
        transport: httpx.AsyncBaseTransport | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Create a GitHub REST client.

        Args:
            token_provider: Async callable that returns the bearer token.
            limits: Timeouts/retry limits.
            api_base_url: REST base URL for the configured host.
            transport: Optional httpx transport for tests.
            user_agent: Overrides the default `github-mcp-server/<version>` agent.
        """
        self._token_provider = token_provider
        self._limits = limits
        self._api_base_url = api_base_url.rstrip("/")
        self._transport = transport
        self._user_agent = user_agent or f"github-mcp-server/{__version__}"

        if not self._api_base_url.startswith(("https://", "http://")):
            raise SafeError(code="Config", message="GitHub API base URL must be http(s)")

    @property
    def api_base_url(self) -> str:
        return self._api_base_url

    def _headers(self, token: str, accept: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self._user_agent,
        }

    def _compute_backoff_s(self, attempt_index: int) -> float:
        # attempt_index: 1 for first retry, 2 for second retry...
        base = min(self._limits.max_backoff_s, 0.5 * (2 ** (attempt_index - 1)))
        jitter = min(0.05, 0.01 * attempt_index)
        return min(self._limits.max_backoff_s, base + jitter)

    def _is_retryable(self, status_code: int) -> bool:
        if status_code == 429:
            return True
        return 500 <= status_code <= 599

    async def _send(
        self,
        *,
        method: str,
        path: str,
        action: str,
        budget: RequestBudget,
        json_body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        accept: str = JSON_MEDIA_TYPE,
    ) -> httpx.Response:
        url = f"{self._api_base_url}{path}"
        token = await self._token_provider()

        timeout = httpx.Timeout(
            timeout=min(budget.total_timeout_s, self._limits.total_timeout_s),
            connect=self._limits.connect_timeout_s,
            read=self._limits.read_timeout_s,
        )

        async with httpx.AsyncClient(
            follow_redirects=False,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self._limits.max_attempts + 1):
                try:
                    resp = await client.request(
                        method,
                        url,
                        headers=self._headers(token, accept),
                        json=json_body,
                        params=params,
                    )
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    if attempt < self._limits.max_attempts:
                        logger.debug("Retrying %s %s after transport error: %s", method, path, type(exc).__name__)
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise transport_error(action) from exc

                if resp.status_code < 400:
                    return resp

                if attempt < self._limits.max_attempts and self._is_retryable(resp.status_code):
                    logger.debug("Retrying %s %s after status %s", method, path, resp.status_code)
                    await asyncio.sleep(self._compute_backoff_s(attempt))
                    continue

                raise upstream_status_error(action=action, status_code=resp.status_code, body=resp.text)

        raise transport_error(action)

    async def request_json(
        self,
        *,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        action: str = "call GitHub API",
        budget: RequestBudget,
    ) -> object:
        """Make a request and return decoded JSON.

        GitHub APIs may return either an object (dict) or an array (list). Empty bodies
        (204 No Content, 202 Accepted without payload) decode to None.
        """
        resp = await self._send(
            method=method,
            path=path,
            action=action,
            budget=budget,
            json_body=json_body,
            params=params,
        )
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except json.JSONDecodeError as exc:
            raise serialization_error("GitHub response") from exc

    async def request_text(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        accept: str = DIFF_MEDIA_TYPE,
        action: str = "call GitHub API",
        budget: RequestBudget,
    ) -> str:
        """Make a request and return the raw response body, e.g. a diff."""
        resp = await self._send(
            method=method,
            path=path,
            action=action,
            budget=budget,
            params=params,
            accept=accept,
        )
        return resp.text
