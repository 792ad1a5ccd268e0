"""Code security toolset: code scanning alerts."""

from __future__ import annotations

from typing import Any

from ..params import optional_param, required_int, required_param
from ..runtime import Runtime
from ..schema import number_prop, owner_repo_props, string_prop
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool, query, repo_path

_STATES = ["open", "closed", "dismissed", "fixed"]
_SEVERITIES = ["critical", "high", "medium", "low", "warning", "note", "error"]


async def _tool_get_code_scanning_alert(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    alert_number = required_int(arguments, "alertNumber")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "code-scanning", "alerts", alert_number),
        action="get alert",
        budget=runtime.budget(),
    )
    return {"alert": data}


async def _tool_list_code_scanning_alerts(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    ref = optional_param(arguments, "ref", str)
    state = optional_param(arguments, "state", str)
    severity = optional_param(arguments, "severity", str)
    tool_name = optional_param(arguments, "tool_name", str)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "code-scanning", "alerts"),
        params=query({"ref": ref, "state": state, "severity": severity, "tool_name": tool_name}),
        action="list alerts",
        budget=runtime.budget(),
    )
    return {"alerts": data}


def code_security_toolset(t: TranslateFunc) -> Toolset:
    repo_props = owner_repo_props()
    return Toolset("code_security", "Code security related tools, such as GitHub Code Scanning").add_read_tools(
        define_tool(
            t,
            name="get_code_scanning_alert",
            title="Get code scanning alert",
            description="Get details of a specific code scanning alert in a GitHub repository.",
            properties={**repo_props, "alertNumber": number_prop("The number of the alert.")},
            required=["owner", "repo", "alertNumber"],
            read_only=True,
            handler=_tool_get_code_scanning_alert,
        ),
        define_tool(
            t,
            name="list_code_scanning_alerts",
            title="List code scanning alerts",
            description="List code scanning alerts in a GitHub repository.",
            properties={
                **repo_props,
                "ref": string_prop("The Git reference for the results you want to list."),
                "state": string_prop("Filter code scanning alerts by state. Defaults to open", enum=_STATES),
                "severity": string_prop("Filter code scanning alerts by severity", enum=_SEVERITIES),
                "tool_name": string_prop("The name of the tool used for code scanning."),
            },
            required=["owner", "repo"],
            read_only=True,
            handler=_tool_list_code_scanning_alerts,
        ),
    )
