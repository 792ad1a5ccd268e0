"""Tool catalogue and dispatch.

Tool handlers are async callables `(runtime, arguments) -> dict`. They extract every
argument before making GitHub requests, raise `SafeError` on failure, and return the
payload keys of a success envelope. `dispatch_tool` wraps them so that every call ends in
exactly one envelope and one command log event.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from ..audit import build_event, new_correlation_id
from ..errors import CONFIG, VALIDATION_CODES, SafeError, internal_error, safe_error_to_result
from ..runtime import Runtime
from ..toolsets import DEFAULT_TOOLSETS, ToolRegistry, Toolset, build_registry
from ..translations import TranslateFunc, null_translate
from .code_scanning import code_security_toolset
from .context import context_toolset
from .issues import issues_toolset
from .notifications import notifications_toolset
from .pull_requests import pull_requests_toolset
from .repositories import repositories_toolset
from .search import users_toolset
from .secret_scanning import secret_protection_toolset

logger = logging.getLogger(__name__)

ALWAYS_ENABLED_TOOLSETS: tuple[str, ...] = ("context",)

_DENIED_CODES = VALIDATION_CODES | {CONFIG}


def default_toolsets(t: TranslateFunc = null_translate) -> list[Toolset]:
    """Return every toolset in declaration order."""
    return [
        context_toolset(t),
        repositories_toolset(t),
        issues_toolset(t),
        users_toolset(t),
        pull_requests_toolset(t),
        code_security_toolset(t),
        secret_protection_toolset(t),
        notifications_toolset(t),
    ]


def build_tool_registry(
    *,
    read_only: bool,
    enabled: Iterable[str] = DEFAULT_TOOLSETS,
    translate: TranslateFunc = null_translate,
) -> ToolRegistry:
    """Build the registry exposed for the lifetime of the process."""
    registry = build_registry(
        default_toolsets(translate),
        read_only=read_only,
        enabled=enabled,
        always_enabled=ALWAYS_ENABLED_TOOLSETS,
    )
    logger.info(
        "Registered %s tools from toolsets %s (read_only=%s)",
        len(registry),
        ", ".join(registry.enabled_toolsets),
        read_only,
    )
    return registry


def _target_repo_from_args(arguments: dict[str, Any]) -> str:
    owner = arguments.get("owner")
    repo = arguments.get("repo")
    if isinstance(owner, str) and isinstance(repo, str) and owner and repo:
        return f"{owner}/{repo}"
    return "<unknown>"


async def dispatch_tool(
    runtime: Runtime,
    registry: ToolRegistry,
    name: str,
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Dispatch a tool call.

    Always returns an envelope that includes correlation_id.
    """
    correlation_id = new_correlation_id()
    target_repo = _target_repo_from_args(arguments)
    argument_names = tuple(sorted(arguments))
    start = runtime.audit.measure_start()

    def _audit(outcome: str, reason: str | None) -> None:
        runtime.audit.write_event(
            build_event(
                correlation_id=correlation_id,
                operation=name,
                target_repo=target_repo,
                outcome=outcome,
                reason=reason,
                duration_ms=runtime.audit.measure_duration_ms(start),
                argument_names=argument_names,
            )
        )

    try:
        tool = registry.get(name)
        if tool is None:
            raise SafeError(
                code="UserInput",
                message=f"Unknown tool: {name}",
                hint=f"Available tools: {', '.join(sorted(registry.names()))}",
            )

        result = await tool.handler(runtime, arguments)

        _audit("succeeded", None)
        out: dict[str, Any] = {"ok": True, "correlation_id": correlation_id}
        out.update(result)
        return out

    except SafeError as err:
        _audit("denied" if err.code in _DENIED_CODES else "failed", err.message)
        result = safe_error_to_result(err)
        result["correlation_id"] = correlation_id
        return result
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Tool %s raised an unexpected error", name)
        _audit("failed", "Internal error")
        result = internal_error("Internal error")
        result["correlation_id"] = correlation_id
        return result
