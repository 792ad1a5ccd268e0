"""Search tools.

`search_repositories` and `search_code` belong to the repos toolset; `search_users` is
the whole of the users toolset.
"""

from __future__ import annotations

from typing import Any

from ..params import optional_pagination_params, optional_param, required_param
from ..runtime import Runtime
from ..schema import string_prop, with_pagination
from ..toolsets import ToolDescriptor, Toolset
from ..translations import TranslateFunc
from .common import define_tool, query


async def _search(runtime: Runtime, path: str, q: str, params: dict[str, str], action: str) -> object:
    return await runtime.github.request_json(
        method="GET",
        path=path,
        params={"q": q, **params},
        action=action,
        budget=runtime.budget(),
    )


async def _tool_search_repositories(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    q = required_param(arguments, "query", str)
    pagination = optional_pagination_params(arguments)

    data = await _search(runtime, "/search/repositories", q, pagination.to_query(), "search repositories")
    return {"result": data}


async def _tool_search_code(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    q = required_param(arguments, "q", str)
    sort = optional_param(arguments, "sort", str)
    order = optional_param(arguments, "order", str)
    pagination = optional_pagination_params(arguments)

    params = {**query({"sort": sort, "order": order}), **pagination.to_query()}
    data = await _search(runtime, "/search/code", q, params, "search code")
    return {"result": data}


async def _tool_search_users(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    q = required_param(arguments, "q", str)
    sort = optional_param(arguments, "sort", str)
    order = optional_param(arguments, "order", str)
    pagination = optional_pagination_params(arguments)

    params = {**query({"sort": sort, "order": order}), **pagination.to_query()}
    data = await _search(runtime, "/search/users", q, params, "search users")
    return {"result": data}


def search_repositories_tool(t: TranslateFunc) -> ToolDescriptor:
    return define_tool(
        t,
        name="search_repositories",
        title="Search repositories",
        description="Search for GitHub repositories.",
        properties=with_pagination({"query": string_prop("Search query")}),
        required=["query"],
        read_only=True,
        handler=_tool_search_repositories,
    )


def search_code_tool(t: TranslateFunc) -> ToolDescriptor:
    return define_tool(
        t,
        name="search_code",
        title="Search code",
        description="Search for code across GitHub repositories.",
        properties=with_pagination(
            {
                "q": string_prop("Search query using GitHub code search syntax"),
                "sort": string_prop("Sort field ('indexed' only)"),
                "order": string_prop("Sort order", enum=["asc", "desc"]),
            }
        ),
        required=["q"],
        read_only=True,
        handler=_tool_search_code,
    )


def users_toolset(t: TranslateFunc) -> Toolset:
    return Toolset("users", "GitHub User related tools").add_read_tools(
        define_tool(
            t,
            name="search_users",
            title="Search users",
            description="Search for GitHub users.",
            properties=with_pagination(
                {
                    "q": string_prop("Search query using GitHub users search syntax"),
                    "sort": string_prop("Sort field by category", enum=["followers", "repositories", "joined"]),
                    "order": string_prop("Sort order", enum=["asc", "desc"]),
                }
            ),
            required=["q"],
            read_only=True,
            handler=_tool_search_users,
        ),
    )
