"""GitHub GraphQL client wrapper.

Provides:
- a single endpoint derived from the configured host, no redirects
- bounded retries with backoff on 429/5xx and transport errors
- finite timeouts
- translation of HTTP failures and GraphQL `errors` into `UpstreamStatus` errors

This client is intended only for fixed query/mutation documents controlled by the server.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from . import __version__
from .config import LimitsConfig
from .errors import SafeError, serialization_error, transport_error, upstream_status_error
from .github_client import RequestBudget, TokenProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphQLResult:
    """Parsed GraphQL response."""

    data: dict[str, Any]


class GitHubGraphQLClient:
    """Minimal GitHub GraphQL client (POST to the GraphQL endpoint only)."""

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        limits: LimitsConfig,
        graphql_url: str = "https://api.github.com/graphql",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._limits = limits
        self._graphql_url = graphql_url
        self._transport = transport

        if not self._graphql_url.startswith(("https://", "http://")):
            raise SafeError(code="Config", message="GitHub GraphQL URL must be http(s)")

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"github-mcp-server/{__version__}",
        }

    def _compute_backoff_s(self, attempt_index: int) -> float:
        base = min(self._limits.max_backoff_s, 0.5 * (2 ** (attempt_index - 1)))
        jitter = min(0.05, 0.01 * attempt_index)
        return min(self._limits.max_backoff_s, base + jitter)

    def _is_retryable(self, status_code: int) -> bool:
        if status_code == 429:
            return True
        return 500 <= status_code <= 599

    async def execute(
        self,
        *,
        query: str,
        variables: dict[str, Any] | None = None,
        action: str = "call GitHub GraphQL API",
        budget: RequestBudget,
    ) -> GraphQLResult:
        """Execute a fixed GraphQL query/mutation and return parsed data."""
        if not isinstance(query, str) or not query.strip():
            raise SafeError(code="Internal", message="GraphQL query is missing")

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
                    resp = await client.post(
                        self._graphql_url,
                        headers=self._headers(token),
                        json={"query": query, "variables": variables or {}},
                    )
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    if attempt < self._limits.max_attempts:
                        logger.debug("Retrying GraphQL %s after transport error: %s", action, type(exc).__name__)
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise transport_error(action) from exc

                if resp.status_code >= 400:
                    if attempt < self._limits.max_attempts and self._is_retryable(resp.status_code):
                        logger.debug("Retrying GraphQL %s after status %s", action, resp.status_code)
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise upstream_status_error(action=action, status_code=resp.status_code, body=resp.text)

                try:
                    payload = resp.json()
                except json.JSONDecodeError as exc:
                    raise serialization_error("GitHub GraphQL response") from exc
                if not isinstance(payload, dict):
                    raise serialization_error("GitHub GraphQL response")

                errors = payload.get("errors")
                if isinstance(errors, list) and errors:
                    first = errors[0]
                    message = first.get("message") if isinstance(first, dict) else None
                    raise upstream_status_error(
                        action=action,
                        status_code=resp.status_code,
                        body=message if isinstance(message, str) else "GraphQL request failed",
                    )

                data = payload.get("data")
                if not isinstance(data, dict):
                    raise serialization_error("GitHub GraphQL response")
                return GraphQLResult(data=data)

        raise transport_error(action)
