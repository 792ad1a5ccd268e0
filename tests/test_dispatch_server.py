"""Dispatch envelopes, command log events and the MCP result mapping."""

from __future__ import annotations

import json

import pytest
from github_mcp_server.errors import transport_error
from github_mcp_server.server import ServerState, call_tool, create_server, list_tools, read_resource
from github_mcp_server.tools import build_tool_registry, dispatch_tool
from mcp import types
from mcp.shared.exceptions import McpError


def _state(runtime, *, read_only: bool = False) -> ServerState:
    return ServerState(runtime=runtime, registry=build_tool_registry(read_only=read_only))


@pytest.mark.asyncio
async def test_unknown_tool_is_user_input_with_hint(make_runtime) -> None:
    runtime = make_runtime()
    registry = build_tool_registry(read_only=False)

    out = await dispatch_tool(runtime, registry, "delete_repository", {"owner": "octo", "repo": "hello"})

    assert out["ok"] is False
    assert out["code"] == "UserInput"
    assert out["message"] == "Unknown tool: delete_repository"
    assert "get_issue" in out["hint"]
    assert runtime.audit.events[-1].outcome == "denied"


@pytest.mark.asyncio
async def test_read_only_registry_cannot_dispatch_write_tools(make_runtime) -> None:
    runtime = make_runtime({("POST", "/repos/octo/hello/issues"): {"number": 1}}, read_only=True)
    registry = build_tool_registry(read_only=True)

    out = await dispatch_tool(runtime, registry, "create_issue", {"owner": "octo", "repo": "hello", "title": "t"})

    assert out["code"] == "UserInput"
    assert runtime.github.calls == []


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_internal_error(make_runtime) -> None:
    runtime = make_runtime({("GET", "/user"): RuntimeError("boom")})
    registry = build_tool_registry(read_only=False)

    out = await dispatch_tool(runtime, registry, "get_me", {})

    assert out == {"ok": False, "code": "Internal", "message": "Internal error", "correlation_id": out["correlation_id"]}
    assert runtime.audit.events[-1].outcome == "failed"


@pytest.mark.asyncio
async def test_audit_event_records_names_not_values(make_runtime) -> None:
    runtime = make_runtime({("GET", "/repos/octo/hello/issues/1"): {"number": 1}})
    registry = build_tool_registry(read_only=False)

    out = await dispatch_tool(runtime, registry, "get_issue", {"repo": "hello", "owner": "octo", "issue_number": 1})

    event = runtime.audit.events[-1]
    assert event.correlation_id == out["correlation_id"]
    assert event.operation == "get_issue"
    assert event.target_repo == "octo/hello"
    assert event.outcome == "succeeded"
    assert event.argument_names == ("issue_number", "owner", "repo")


def test_list_tools_annotations(make_runtime) -> None:
    tools = list_tools(_state(make_runtime()))
    by_name = {t.name: t for t in tools}

    assert len(tools) == 47
    assert by_name["get_issue"].annotations.readOnlyHint is True
    assert by_name["create_issue"].annotations.readOnlyHint is False
    assert by_name["get_issue"].title == "Get issue details"
    assert by_name["get_issue"].inputSchema["required"] == ["owner", "repo", "issue_number"]


def test_list_tools_read_only(make_runtime) -> None:
    tools = list_tools(_state(make_runtime(), read_only=True))
    assert all(t.annotations.readOnlyHint for t in tools)


@pytest.mark.asyncio
async def test_call_tool_success(make_runtime) -> None:
    state = _state(make_runtime({("GET", "/user"): {"login": "octocat"}}))

    result = await call_tool(state, "get_me", {})

    assert result.isError is False
    payload = json.loads(result.content[0].text)
    assert payload["ok"] is True
    assert payload["user"] == {"login": "octocat"}


@pytest.mark.asyncio
async def test_call_tool_validation_error_is_error_result(make_runtime) -> None:
    state = _state(make_runtime())

    result = await call_tool(state, "get_issue", {"owner": "octo"})

    assert result.isError is True
    payload = json.loads(result.content[0].text)
    assert payload["code"] == "MissingParameter"


@pytest.mark.asyncio
async def test_call_tool_hard_failure_is_protocol_error(make_runtime) -> None:
    state = _state(make_runtime({("GET", "/user"): transport_error("get user")}))

    with pytest.raises(McpError) as exc:
        await call_tool(state, "get_me", None)
    assert exc.value.error.code == types.INTERNAL_ERROR
    assert exc.value.error.message == "failed to get user: GitHub API unreachable"


@pytest.mark.asyncio
async def test_read_resource_no_match_is_invalid_params(make_runtime) -> None:
    runtime = make_runtime()

    with pytest.raises(McpError) as exc:
        await read_resource(_state(runtime), "repo://octo/hello/wiki")
    assert exc.value.error.code == types.INVALID_PARAMS
    assert runtime.audit.events[-1].outcome == "denied"


@pytest.mark.asyncio
async def test_read_resource_success(make_runtime) -> None:
    runtime = make_runtime(
        {
            ("GET", "/repos/octo/hello/contents/"): [
                {"type": "dir", "name": "src", "html_url": "https://github.com/octo/hello/tree/main/src"}
            ]
        }
    )

    result = await read_resource(_state(runtime), "repo://octo/hello/contents")

    assert [c.text for c in result.contents] == ["src"]
    assert runtime.audit.events[-1].target_repo == "octo/hello"


def test_create_server_registers_handlers(make_runtime) -> None:
    server = create_server(_state(make_runtime()))

    assert types.CallToolRequest in server.request_handlers
    assert types.ReadResourceRequest in server.request_handlers
    assert types.ListToolsRequest in server.request_handlers
    assert types.ListResourceTemplatesRequest in server.request_handlers


def _sample_value(prop: dict) -> object:
    kind = prop.get("type")
    if kind == "number":
        return 1
    if kind == "boolean":
        return True
    if kind == "array":
        items = prop.get("items", {})
        if items.get("type") == "object":
            return [{name: _sample_value(items["properties"][name]) for name in items.get("required", [])}]
        return [_sample_value(items)]
    if prop.get("enum"):
        return prop["enum"][0]
    return "1"


_REQUIRED_CASES = [
    (tool.name, name)
    for tool in build_tool_registry(read_only=False)
    for name in tool.input_schema.get("required", [])
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("tool_name", "dropped"), _REQUIRED_CASES)
async def test_every_required_parameter_is_enforced(make_runtime, tool_name: str, dropped: str) -> None:
    runtime = make_runtime()
    registry = build_tool_registry(read_only=False)
    schema = registry.get(tool_name).input_schema
    arguments = {
        name: _sample_value(schema["properties"][name]) for name in schema["required"] if name != dropped
    }

    out = await dispatch_tool(runtime, registry, tool_name, arguments)

    assert out["code"] == "MissingParameter"
    assert out["message"] == f"missing required parameter: {dropped}"
    assert runtime.github.calls == []
    assert runtime.graphql.calls == []
