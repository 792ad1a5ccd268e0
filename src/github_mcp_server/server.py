"""MCP server wiring for github-mcp-server.

The registry and runtime are built once at startup and shared by every request. Tool
calls go through `dispatch_tool`; the envelope it returns is mapped onto MCP as follows:

- success: a text content item holding the JSON envelope
- validation or upstream failure: the same, flagged `isError=True`
- hard failure (transport, serialization, internal): a JSON-RPC error
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    from mcp import types
    from mcp.server import Server
    from mcp.shared.exceptions import McpError
except ImportError as exc:  # pragma: no cover
    raise ImportError("MCP library not installed. Install with: pip install mcp") from exc

from . import __version__
from .audit import build_event, new_correlation_id
from .config import ServerConfig
from .errors import HARD_FAILURE_CODES, NO_TEMPLATE_MATCH, VALIDATION_CODES, SafeError
from .resources import list_resource_templates, match_resource_uri, read_repository_content
from .runtime import Runtime, build_runtime
from .safety import RedactingFilter
from .toolsets import ToolRegistry
from .tools import build_tool_registry, dispatch_tool
from .translations import Translator, null_translate

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServerState:
    """Everything a request handler needs; fixed after startup."""

    runtime: Runtime
    registry: ToolRegistry


def configure_logging(log_file: Path | None = None) -> None:
    """Send logs to stderr, or to `log_file` at DEBUG level; stdout carries the protocol."""
    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        level = logging.DEBUG
    else:
        handler = logging.StreamHandler(sys.stderr)
        level = logging.INFO
    handler.addFilter(RedactingFilter())
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[handler], force=True)


def list_tools(state: ServerState) -> list[types.Tool]:
    """Describe every registered tool."""
    tools: list[types.Tool] = []
    for tool in state.registry:
        tools.append(
            types.Tool(
                name=tool.name,
                title=tool.title,
                description=tool.description,
                inputSchema=tool.input_schema,
                annotations=types.ToolAnnotations(title=tool.title, readOnlyHint=tool.read_only),
            )
        )
    return tools


def _text(payload: dict[str, Any]) -> types.TextContent:
    return types.TextContent(type="text", text=json.dumps(payload, indent=2, default=str))


async def call_tool(state: ServerState, name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
    """Execute a tool and map its envelope onto an MCP result.

    Raises:
        McpError: For hard failures, which have no structured diagnostic.
    """
    if not isinstance(arguments, dict):
        arguments = {}

    logger.info("Tool called: %s", name)
    envelope = await dispatch_tool(state.runtime, state.registry, name, arguments)

    if envelope.get("ok"):
        return types.CallToolResult(content=[_text(envelope)], isError=False)

    code = envelope.get("code")
    if code in HARD_FAILURE_CODES:
        logger.error("Tool %s failed: %s", name, envelope.get("message"))
        raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=str(envelope.get("message"))))

    return types.CallToolResult(content=[_text(envelope)], isError=True)


async def read_resource(state: ServerState, uri: str) -> types.ReadResourceResult:
    """Read repository content for a resource URI.

    Each directory entry keeps its own URI, so the result is built here rather than by
    the SDK's `read_resource` decorator, which stamps the request URI on every item.
    """
    runtime = state.runtime
    correlation_id = new_correlation_id()
    start = runtime.audit.measure_start()

    try:
        resource = match_resource_uri(uri)
        target_repo = f"{resource.owner}/{resource.repo}"
    except SafeError:
        target_repo = "<unknown>"

    def _audit(outcome: str, reason: str | None) -> None:
        runtime.audit.write_event(
            build_event(
                correlation_id=correlation_id,
                operation="read_resource",
                target_repo=target_repo,
                outcome=outcome,
                reason=reason,
                duration_ms=runtime.audit.measure_duration_ms(start),
            )
        )

    try:
        contents = await read_repository_content(runtime, uri)
    except SafeError as err:
        _audit("denied" if err.code in VALIDATION_CODES else "failed", err.message)
        error_code = types.INVALID_PARAMS if err.code == NO_TEMPLATE_MATCH else types.INTERNAL_ERROR
        raise McpError(types.ErrorData(code=error_code, message=err.message)) from err

    _audit("succeeded", None)
    return types.ReadResourceResult(contents=contents)


def create_server(state: ServerState) -> Server:
    """Build the MCP server bound to `state`."""
    server: Server = Server("github-mcp-server", version=__version__)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        tools = list_tools(state)
        logger.info("Listed %s tools", len(tools))
        return tools

    @server.list_resources()
    async def _list_resources() -> list[types.Resource]:
        return []

    @server.list_resource_templates()
    async def _list_resource_templates() -> list[types.ResourceTemplate]:
        return list_resource_templates(state.runtime.translate)

    async def _call_tool(req: types.CallToolRequest) -> types.ServerResult:
        result = await call_tool(state, req.params.name, req.params.arguments)
        return types.ServerResult(result)

    async def _read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        result = await read_resource(state, str(req.params.uri))
        return types.ServerResult(result)

    server.request_handlers[types.CallToolRequest] = _call_tool
    server.request_handlers[types.ReadResourceRequest] = _read_resource
    return server


def build_state(config: ServerConfig, *, translate: Translator | None = None) -> ServerState:
    """Build the runtime and the immutable tool registry for `config`."""
    translator = translate if translate is not None else Translator()
    runtime = build_runtime(config, translate=translator)
    registry = build_tool_registry(read_only=config.read_only, enabled=config.toolsets, translate=translator)
    # Resource names go through the translator too, so they are exported with the tools.
    list_resource_templates(translator)
    return ServerState(runtime=runtime, registry=registry)


async def run_server(config: ServerConfig) -> None:
    """Run the server over stdio."""
    configure_logging(config.log_file)

    translator = Translator()
    state = build_state(config, translate=translator)
    if config.export_translations:
        translator.export()

    from mcp.server.stdio import stdio_server

    server = create_server(state)
    logger.info("GitHub MCP Server running on stdio (api=%s)", config.api_host.rest_url)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


async def test_server() -> None:
    """Lightweight self-test: build every tool and template description without a token."""
    registry = build_tool_registry(read_only=False, translate=null_translate)
    read_only_registry = build_tool_registry(read_only=True, translate=null_translate)
    templates = list_resource_templates(null_translate)

    _ = [
        types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in registry
    ]
    print(
        f"{len(registry)} tools ({len(read_only_registry)} read-only), {len(templates)} resource templates",
        file=sys.stderr,
    )
