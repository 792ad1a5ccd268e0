"""Issues toolset."""

from __future__ import annotations

from typing import Any

from ..errors import user_input_error
from ..params import (
    optional_int,
    optional_pagination_params,
    optional_param,
    optional_param_ok,
    optional_string_array,
    required_int,
    required_param,
)
from ..runtime import Runtime
from ..schema import number_prop, owner_repo_props, string_array_prop, string_prop, with_pagination
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool, drop_empty, format_timestamp, nested_str, parse_iso_timestamp, query, repo_path

_ISSUE_SEARCH_SORTS = [
    "comments",
    "reactions",
    "reactions-+1",
    "reactions--1",
    "reactions-smile",
    "reactions-thinking_face",
    "reactions-heart",
    "reactions-tada",
    "interactions",
    "created",
    "updated",
]


async def _tool_get_issue(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    issue_number = required_int(arguments, "issue_number")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "issues", issue_number),
        action="get issue",
        budget=runtime.budget(),
    )
    return {"issue": data}


async def _tool_search_issues(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    q = required_param(arguments, "q", str)
    sort = optional_param(arguments, "sort", str)
    order = optional_param(arguments, "order", str)
    pagination = optional_pagination_params(arguments)

    params = {"q": q, **query({"sort": sort, "order": order}), **pagination.to_query()}
    data = await runtime.github.request_json(
        method="GET",
        path="/search/issues",
        params=params,
        action="search issues",
        budget=runtime.budget(),
    )
    return {"result": data}


async def _tool_list_issues(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    state = optional_param(arguments, "state", str)
    labels = optional_string_array(arguments, "labels")
    sort = optional_param(arguments, "sort", str)
    direction = optional_param(arguments, "direction", str)
    since = optional_param(arguments, "since", str)
    pagination = optional_pagination_params(arguments)

    since_value = format_timestamp(parse_iso_timestamp(since)) if since else None

    params = {
        **query({"state": state, "labels": labels, "sort": sort, "direction": direction, "since": since_value}),
        **pagination.to_query(),
    }
    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "issues"),
        params=params,
        action="list issues",
        budget=runtime.budget(),
    )
    return {"issues": data}


async def _tool_get_issue_comments(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    issue_number = required_int(arguments, "issue_number")
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "issues", issue_number, "comments"),
        params=pagination.to_query(),
        action="get issue comments",
        budget=runtime.budget(),
    )
    return {"comments": data}


async def _tool_create_issue(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    title = required_param(arguments, "title", str)
    body = optional_param(arguments, "body", str)
    assignees = optional_string_array(arguments, "assignees")
    labels = optional_string_array(arguments, "labels")
    milestone = optional_int(arguments, "milestone")

    payload = drop_empty({"title": title, "body": body, "assignees": assignees, "labels": labels})
    if milestone != 0:
        payload["milestone"] = milestone

    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "issues"),
        json_body=payload,
        action="create issue",
        budget=runtime.budget(),
    )
    return {"issue": data}


async def _tool_add_issue_comment(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    issue_number = required_int(arguments, "issue_number")
    body = required_param(arguments, "body", str)

    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "issues", issue_number, "comments"),
        json_body={"body": body},
        action="create comment",
        budget=runtime.budget(),
    )
    return {"comment": data}


async def _tool_update_issue(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    issue_number = required_int(arguments, "issue_number")

    # Only fields the caller actually sent are patched, so an explicit "" clears a body.
    payload: dict[str, Any] = {}
    for field in ("title", "body", "state"):
        value, present = optional_param_ok(arguments, field, str)
        if present:
            payload[field] = value
    if "labels" in arguments:
        payload["labels"] = optional_string_array(arguments, "labels")
    if "assignees" in arguments:
        payload["assignees"] = optional_string_array(arguments, "assignees")
    milestone, present = optional_param_ok(arguments, "milestone", int)
    if present:
        payload["milestone"] = milestone if milestone != 0 else None

    data = await runtime.github.request_json(
        method="PATCH",
        path=repo_path(owner, repo, "issues", issue_number),
        json_body=payload,
        action="update issue",
        budget=runtime.budget(),
    )
    return {"issue": data}

COPILOT_ASSIGNEE_LOGIN = "copilot-swe-agent"
COPILOT_DOCS_URL = (
    "https://docs.github.com/en/copilot/using-github-copilot/using-copilot-coding-agent-to-work-on-tasks/"
    "about-assigning-tasks-to-copilot"
)

_SUGGESTED_ACTORS_QUERY = """
query($owner: String!, $name: String!, $endCursor: String) {
  repository(owner: $owner, name: $name) {
    suggestedActors(first: 100, after: $endCursor, capabilities: CAN_BE_ASSIGNED) {
      nodes { ... on Bot { id login __typename } }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

_ISSUE_ASSIGNEES_QUERY = """
query($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    issue(number: $number) {
      id
      assignees(first: 100) { nodes { id } }
    }
  }
}
"""

_REPLACE_ACTORS_MUTATION = """
mutation($input: ReplaceActorsForAssignableInput!) {
  replaceActorsForAssignable(input: $input) { __typename }
}
"""


async def _find_copilot_actor_id(runtime: Runtime, owner: str, repo: str) -> str | None:
    cursor: str | None = None
    while True:
        result = await runtime.graphql.execute(
            query=_SUGGESTED_ACTORS_QUERY,
            variables={"owner": owner, "name": repo, "endCursor": cursor},
            action="list suggested actors",
            budget=runtime.budget(),
        )
        actors = (result.data.get("repository") or {}).get("suggestedActors") or {}
        for node in actors.get("nodes") or []:
            if isinstance(node, dict) and node.get("login") == COPILOT_ASSIGNEE_LOGIN:
                return nested_str(node, "id", what="suggested actor")

        page_info = actors.get("pageInfo") or {}
        if not page_info.get("hasNextPage"):
            return None
        cursor = nested_str(page_info, "endCursor", what="suggested actors page")


async def _tool_assign_copilot_to_issue(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    issue_number = required_int(arguments, "issueNumber")

    copilot_id = await _find_copilot_actor_id(runtime, owner, repo)
    if copilot_id is None:
        raise user_input_error(
            "copilot isn't available as an assignee for this issue. Please inform the user to visit "
            f"{COPILOT_DOCS_URL} for more information."
        )

    # replaceActorsForAssignable takes the full list, so existing assignees are kept.
    result = await runtime.graphql.execute(
        query=_ISSUE_ASSIGNEES_QUERY,
        variables={"owner": owner, "name": repo, "number": issue_number},
        action="get issue ID",
        budget=runtime.budget(),
    )
    issue = (result.data.get("repository") or {}).get("issue")
    issue_id = nested_str(issue, "id", what="issue")
    assignees = ((issue or {}).get("assignees") or {}).get("nodes") or []
    actor_ids = [node["id"] for node in assignees if isinstance(node, dict) and node.get("id")]
    actor_ids.append(copilot_id)

    await runtime.graphql.execute(
        query=_REPLACE_ACTORS_MUTATION,
        variables={"input": {"assignableId": issue_id, "actorIds": actor_ids}},
        action="replace actors for assignable",
        budget=runtime.budget(),
    )
    return {"message": "successfully assigned copilot to issue"}



def issues_toolset(t: TranslateFunc) -> Toolset:
    repo_props = owner_repo_props()
    return (
        Toolset("issues", "GitHub Issues related tools")
        .add_read_tools(
            define_tool(
                t,
                name="get_issue",
                title="Get issue details",
                description="Get details of a specific issue in a GitHub repository.",
                properties={
                    "owner": string_prop("The owner of the repository"),
                    "repo": string_prop("The name of the repository"),
                    "issue_number": number_prop("The number of the issue"),
                },
                required=["owner", "repo", "issue_number"],
                read_only=True,
                handler=_tool_get_issue,
            ),
            define_tool(
                t,
                name="search_issues",
                title="Search issues",
                description="Search for issues in GitHub repositories.",
                properties=with_pagination(
                    {
                        "q": string_prop("Search query using GitHub issues search syntax"),
                        "sort": string_prop(
                            "Sort field by number of matches of categories, defaults to best match",
                            enum=_ISSUE_SEARCH_SORTS,
                        ),
                        "order": string_prop("Sort order", enum=["asc", "desc"]),
                    }
                ),
                required=["q"],
                read_only=True,
                handler=_tool_search_issues,
            ),
            define_tool(
                t,
                name="list_issues",
                title="List issues",
                description="List issues in a GitHub repository.",
                properties=with_pagination(
                    {
                        **repo_props,
                        "state": string_prop("Filter by state", enum=["open", "closed", "all"]),
                        "labels": string_array_prop("Filter by labels"),
                        "sort": string_prop("Sort order", enum=["created", "updated", "comments"]),
                        "direction": string_prop("Sort direction", enum=["asc", "desc"]),
                        "since": string_prop("Filter by date (ISO 8601 timestamp)"),
                    }
                ),
                required=["owner", "repo"],
                read_only=True,
                handler=_tool_list_issues,
            ),
            define_tool(
                t,
                name="get_issue_comments",
                title="Get issue comments",
                description="Get comments for a specific issue in a GitHub repository.",
                properties=with_pagination({**repo_props, "issue_number": number_prop("Issue number")}),
                required=["owner", "repo", "issue_number"],
                read_only=True,
                handler=_tool_get_issue_comments,
            ),
        )
        .add_write_tools(
            define_tool(
                t,
                name="create_issue",
                title="Open new issue",
                description="Create a new issue in a GitHub repository.",
                properties={
                    **repo_props,
                    "title": string_prop("Issue title"),
                    "body": string_prop("Issue body content"),
                    "assignees": string_array_prop("Usernames to assign to this issue"),
                    "labels": string_array_prop("Labels to apply to this issue"),
                    "milestone": number_prop("Milestone number"),
                },
                required=["owner", "repo", "title"],
                read_only=False,
                handler=_tool_create_issue,
            ),
            define_tool(
                t,
                name="add_issue_comment",
                title="Add comment to issue",
                description="Add a comment to a specific issue in a GitHub repository.",
                properties={
                    **repo_props,
                    "issue_number": number_prop("Issue number to comment on"),
                    "body": string_prop("Comment content"),
                },
                required=["owner", "repo", "issue_number", "body"],
                read_only=False,
                handler=_tool_add_issue_comment,
            ),
            define_tool(
                t,
                name="update_issue",
                title="Edit issue",
                description="Update an existing issue in a GitHub repository.",
                properties={
                    **repo_props,
                    "issue_number": number_prop("Issue number to update"),
                    "title": string_prop("New title"),
                    "body": string_prop("New description"),
                    "state": string_prop("New state", enum=["open", "closed"]),
                    "labels": string_array_prop("New labels"),
                    "assignees": string_array_prop("New assignees"),
                    "milestone": number_prop("New milestone number; 0 removes the milestone"),
                },
                required=["owner", "repo", "issue_number"],
                read_only=False,
                handler=_tool_update_issue,
            ),
            define_tool(
                t,
                name="assign_copilot_to_issue",
                title="Assign Copilot to issue",
                description=(
                    "Assign Copilot to a specific issue in a GitHub repository. The expected outcome is a "
                    f"pull request with source code changes that resolve the issue. See {COPILOT_DOCS_URL}"
                ),
                properties={**repo_props, "issueNumber": number_prop("Issue number")},
                required=["owner", "repo", "issueNumber"],
                read_only=False,
                handler=_tool_assign_copilot_to_issue,
            ),
        )
    )
