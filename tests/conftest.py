"""Shared stubs for tool and resource tests.

The REST client is replaced by an in-memory route table keyed by `(method, path)` and the
GraphQL client by canned data keyed by action, so no test makes a network call.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from github_mcp_server.audit import AuditEvent
from github_mcp_server.config import DOTCOM_API_URL, DOTCOM_GRAPHQL_URL, ApiHost, ServerConfig
from github_mcp_server.github_graphql_client import GraphQLResult
from github_mcp_server.runtime import Runtime
from github_mcp_server.translations import null_translate


@dataclass
class DummyAudit:
    events: list[AuditEvent] = field(default_factory=list)

    def write_event(self, event: AuditEvent) -> None:
        self.events.append(event)

    def measure_start(self) -> float:
        return time.monotonic()

    def measure_duration_ms(self, start: float) -> int:
        return int((time.monotonic() - start) * 1000)


class DummyGitHub:
    def __init__(
        self,
        routes: dict[tuple[str, str], object | Exception],
        text_routes: dict[tuple[str, str], str | Exception] | None = None,
    ) -> None:
        self._routes = routes
        self._text_routes = text_routes or {}
        self.calls: list[dict[str, Any]] = []

    def _lookup(self, table: dict[tuple[str, str], Any], kwargs: dict[str, Any]) -> Any:
        self.calls.append(dict(kwargs))
        key = (str(kwargs.get("method")), str(kwargs.get("path")))
        if key not in table:
            raise AssertionError(f"Unexpected GitHub call: {key}")
        val = table[key]
        if isinstance(val, Exception):
            raise val
        return val

    async def request_json(self, **kwargs: Any) -> object:
        return self._lookup(self._routes, kwargs)

    async def request_text(self, **kwargs: Any) -> str:
        return self._lookup(self._text_routes, kwargs)


class DummyGraphQL:
    """Replays canned GraphQL data per action, one entry per call in order."""

    def __init__(self, responses: dict[str, list[dict[str, Any] | Exception]] | None = None) -> None:
        self._responses = {action: list(items) for action, items in (responses or {}).items()}
        self.calls: list[dict[str, Any]] = []

    async def execute(self, **kwargs: Any) -> GraphQLResult:
        self.calls.append(dict(kwargs))
        action = str(kwargs.get("action"))
        pending = self._responses.get(action)
        if not pending:
            raise AssertionError(f"Unexpected GraphQL call: {action}")
        val = pending.pop(0)
        if isinstance(val, Exception):
            raise val
        return GraphQLResult(data=val)


def make_config(*, read_only: bool = False) -> ServerConfig:
    return ServerConfig(
        token="tok",
        api_host=ApiHost(rest_url=DOTCOM_API_URL, kind="dotcom", graphql_url=DOTCOM_GRAPHQL_URL),
        read_only=read_only,
    )


@pytest.fixture
def make_runtime() -> Callable[..., Runtime]:
    def _make(
        routes: dict[tuple[str, str], object | Exception] | None = None,
        *,
        text_routes: dict[tuple[str, str], str | Exception] | None = None,
        graphql: dict[str, list[dict[str, Any] | Exception]] | None = None,
        read_only: bool = False,
    ) -> Runtime:
        return Runtime(
            config=make_config(read_only=read_only),
            audit=DummyAudit(),  # type: ignore[arg-type]
            github=DummyGitHub(routes or {}, text_routes),  # type: ignore[arg-type]
            graphql=DummyGraphQL(graphql),  # type: ignore[arg-type]
            translate=null_translate,
        )

    return _make
