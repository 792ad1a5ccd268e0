"""GitHub GraphQL client: endpoint, retries and error translation."""

from __future__ import annotations

import json

import httpx
import pytest
from github_mcp_server.config import LimitsConfig
from github_mcp_server.errors import SERIALIZATION, TRANSPORT, UPSTREAM_STATUS, SafeError
from github_mcp_server.github_client import RequestBudget, static_token_provider
from github_mcp_server.github_graphql_client import GitHubGraphQLClient

BUDGET = RequestBudget(total_timeout_s=5.0)


def _client(handler, *, graphql_url: str = "https://api.github.com/graphql") -> GitHubGraphQLClient:
    return GitHubGraphQLClient(
        token_provider=static_token_provider("tok"),
        limits=LimitsConfig(max_attempts=3, max_backoff_s=0.0),
        graphql_url=graphql_url,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_execute_posts_query_and_variables() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"viewer": {"login": "octo"}}})

    result = await _client(handler, graphql_url="https://ghes.example.com/api/graphql").execute(
        query="query { viewer { login } }", variables={"a": 1}, budget=BUDGET
    )

    assert result.data == {"viewer": {"login": "octo"}}
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == "https://ghes.example.com/api/graphql"
    assert req.headers["Authorization"] == "Bearer tok"
    assert json.loads(req.content) == {"query": "query { viewer { login } }", "variables": {"a": 1}}


@pytest.mark.asyncio
async def test_graphql_errors_become_upstream_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"message": "Could not resolve to an Issue"}]})

    with pytest.raises(SafeError) as exc:
        await _client(handler).execute(query="query { x }", action="get issue ID", budget=BUDGET)
    assert exc.value.code == UPSTREAM_STATUS
    assert exc.value.message == "failed to get issue ID: Could not resolve to an Issue"


@pytest.mark.asyncio
async def test_retries_server_errors_then_succeeds() -> None:
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] < 3:
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, json={"data": {}})

    result = await _client(handler).execute(query="query { x }", budget=BUDGET)

    assert result.data == {}
    assert attempts["n"] == 3


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        return httpx.Response(401, text="Bad credentials")

    with pytest.raises(SafeError) as exc:
        await _client(handler).execute(query="query { x }", budget=BUDGET)
    assert exc.value.code == UPSTREAM_STATUS
    assert exc.value.status_code == 401
    assert attempts["n"] == 1


@pytest.mark.asyncio
async def test_transport_failure_after_retries() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(SafeError) as exc:
        await _client(handler).execute(query="query { x }", budget=BUDGET)
    assert exc.value.code == TRANSPORT


@pytest.mark.asyncio
async def test_missing_data_is_serialization_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": None})

    with pytest.raises(SafeError) as exc:
        await _client(handler).execute(query="query { x }", budget=BUDGET)
    assert exc.value.code == SERIALIZATION
