"""Context toolset: who the server is acting as."""

from __future__ import annotations

from typing import Any

from ..runtime import Runtime
from ..schema import string_prop
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool


async def _tool_get_me(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    data = await runtime.github.request_json(
        method="GET",
        path="/user",
        action="get user",
        budget=runtime.budget(),
    )
    return {"user": data}


def context_toolset(t: TranslateFunc) -> Toolset:
    return Toolset(
        "context",
        "Tools that provide context about the current user and GitHub context you are operating in",
    ).add_read_tools(
        define_tool(
            t,
            name="get_me",
            title="Get my user profile",
            description=(
                "Get details of the authenticated GitHub user. Use this when a request includes "
                '"me", "my". The output will not change unless the user changes their profile, '
                "so only call this once."
            ),
            properties={"reason": string_prop("Optional: the reason for requesting the user information")},
            read_only=True,
            handler=_tool_get_me,
        ),
    )
