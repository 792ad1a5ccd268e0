"""Secret protection toolset: secret scanning alerts."""

from __future__ import annotations

from typing import Any

from ..params import optional_comma_separated_list, optional_param, required_int, required_param
from ..runtime import Runtime
from ..schema import number_prop, owner_repo_props, string_prop
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool, query, repo_path

_RESOLUTIONS = ["false_positive", "wont_fix", "revoked", "pattern_edited", "pattern_deleted", "used_in_tests"]


async def _tool_get_secret_scanning_alert(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    alert_number = required_int(arguments, "alertNumber")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "secret-scanning", "alerts", alert_number),
        action="get alert",
        budget=runtime.budget(),
    )
    return {"alert": data}


async def _tool_list_secret_scanning_alerts(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    state = optional_param(arguments, "state", str)
    secret_types = optional_comma_separated_list(arguments, "secret_type")
    resolution = optional_param(arguments, "resolution", str)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "secret-scanning", "alerts"),
        params=query({"state": state, "secret_type": secret_types, "resolution": resolution}),
        action="list alerts",
        budget=runtime.budget(),
    )
    return {"alerts": data}


def secret_protection_toolset(t: TranslateFunc) -> Toolset:
    repo_props = owner_repo_props()
    return Toolset("secret_protection", "Secret protection related tools, such as GitHub Secret Scanning").add_read_tools(
        define_tool(
            t,
            name="get_secret_scanning_alert",
            title="Get secret scanning alert",
            description="Get details of a specific secret scanning alert in a GitHub repository.",
            properties={**repo_props, "alertNumber": number_prop("The number of the alert.")},
            required=["owner", "repo", "alertNumber"],
            read_only=True,
            handler=_tool_get_secret_scanning_alert,
        ),
        define_tool(
            t,
            name="list_secret_scanning_alerts",
            title="List secret scanning alerts",
            description="List secret scanning alerts in a GitHub repository.",
            properties={
                **repo_props,
                "state": string_prop("Filter by state", enum=["open", "resolved"]),
                "secret_type": string_prop(
                    "A comma-separated list of secret types to return. All default secret patterns are "
                    "returned. To return generic patterns, pass the token name(s) in the parameter."
                ),
                "resolution": string_prop("Filter by resolution", enum=_RESOLUTIONS),
            },
            required=["owner", "repo"],
            read_only=True,
            handler=_tool_list_secret_scanning_alerts,
        ),
    )
