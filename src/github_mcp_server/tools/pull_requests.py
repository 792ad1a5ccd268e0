"""Pull requests toolset."""

from __future__ import annotations

from typing import Any

from ..errors import type_mismatch, user_input_error
from ..params import (
    optional_pagination_params,
    optional_param,
    optional_param_ok,
    required_int,
    required_param,
)
from ..runtime import Runtime
from ..schema import boolean_prop, number_prop, object_array_prop, owner_repo_props, string_prop, with_pagination
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import define_tool, drop_empty, nested_str, query, repo_path

_SIDES = ["LEFT", "RIGHT"]

COPILOT_REVIEWER_LOGIN = "copilot-pull-request-reviewer[bot]"


async def _tool_get_pull_request(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number),
        action="get pull request",
        budget=runtime.budget(),
    )
    return {"pull_request": data}


async def _tool_list_pull_requests(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    state = optional_param(arguments, "state", str)
    head = optional_param(arguments, "head", str)
    base = optional_param(arguments, "base", str)
    sort = optional_param(arguments, "sort", str)
    direction = optional_param(arguments, "direction", str)
    pagination = optional_pagination_params(arguments)

    params = {
        **query({"state": state, "head": head, "base": base, "sort": sort, "direction": direction}),
        **pagination.to_query(),
    }
    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls"),
        params=params,
        action="list pull requests",
        budget=runtime.budget(),
    )
    return {"pull_requests": data}


async def _tool_get_pull_request_files(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number, "files"),
        params=pagination.to_query(),
        action="get pull request files",
        budget=runtime.budget(),
    )
    return {"files": data}


async def _tool_get_pull_request_status(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    pr = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number),
        action="get pull request",
        budget=runtime.budget(),
    )
    sha = nested_str(pr, "head", "sha", what="pull request head")

    status = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "commits", sha, "status"),
        action="get combined status",
        budget=runtime.budget(),
    )
    return {"status": status}


async def _tool_get_pull_request_comments(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number, "comments"),
        params={"per_page": "100"},
        action="get pull request comments",
        budget=runtime.budget(),
    )
    return {"comments": data}


async def _tool_get_pull_request_reviews(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number, "reviews"),
        action="get pull request reviews",
        budget=runtime.budget(),
    )
    return {"reviews": data}


async def _tool_get_pull_request_diff(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    diff = await runtime.github.request_text(
        method="GET",
        path=repo_path(owner, repo, "pulls", pull_number),
        action="get pull request diff",
        budget=runtime.budget(),
    )
    return {"diff": diff}


async def _tool_create_pull_request(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    title = required_param(arguments, "title", str)
    head = required_param(arguments, "head", str)
    base = required_param(arguments, "base", str)
    body = optional_param(arguments, "body", str)
    draft = optional_param(arguments, "draft", bool)
    maintainer_can_modify = optional_param(arguments, "maintainer_can_modify", bool)

    payload = {
        **drop_empty({"title": title, "head": head, "base": base, "body": body}),
        "draft": draft,
        "maintainer_can_modify": maintainer_can_modify,
    }
    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "pulls"),
        json_body=payload,
        action="create pull request",
        budget=runtime.budget(),
    )
    return {"pull_request": data}


async def _tool_update_pull_request(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    payload: dict[str, Any] = {}
    for field in ("title", "body", "state", "base"):
        value, present = optional_param_ok(arguments, field, str)
        if present:
            payload[field] = value
    can_modify, present = optional_param_ok(arguments, "maintainer_can_modify", bool)
    if present:
        payload["maintainer_can_modify"] = can_modify

    if not payload:
        raise user_input_error("No update parameters provided.")

    data = await runtime.github.request_json(
        method="PATCH",
        path=repo_path(owner, repo, "pulls", pull_number),
        json_body=payload,
        action="update pull request",
        budget=runtime.budget(),
    )
    return {"pull_request": data}


async def _tool_merge_pull_request(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")
    commit_title = optional_param(arguments, "commit_title", str)
    commit_message = optional_param(arguments, "commit_message", str)
    merge_method = optional_param(arguments, "merge_method", str)

    data = await runtime.github.request_json(
        method="PUT",
        path=repo_path(owner, repo, "pulls", pull_number, "merge"),
        json_body=drop_empty(
            {"commit_title": commit_title, "commit_message": commit_message, "merge_method": merge_method}
        ),
        action="merge pull request",
        budget=runtime.budget(),
    )
    return {"merge": data}


async def _tool_update_pull_request_branch(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")
    expected_head_sha = optional_param(arguments, "expectedHeadSha", str)

    # GitHub answers 202 Accepted; the update continues in the background.
    data = await runtime.github.request_json(
        method="PUT",
        path=repo_path(owner, repo, "pulls", pull_number, "update-branch"),
        json_body=drop_empty({"expected_head_sha": expected_head_sha}),
        action="update pull request branch",
        budget=runtime.budget(),
    )
    if data is None:
        data = {"message": "Pull request branch update is in progress"}
    return {"result": data}


def _draft_review_comment(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise type_mismatch("comments", "array of objects")
    path = required_param(raw, "path", str)
    body = required_param(raw, "body", str)
    position, has_position = optional_param_ok(raw, "position", int)
    line, has_line = optional_param_ok(raw, "line", int)
    side, has_side = optional_param_ok(raw, "side", str)
    start_line, has_start_line = optional_param_ok(raw, "start_line", int)
    start_side, has_start_side = optional_param_ok(raw, "start_side", str)

    if not has_position and not has_line:
        raise user_input_error("each comment must have either position or line")
    if has_position and (has_line or has_side or has_start_line or has_start_side):
        raise user_input_error("position cannot be combined with line, side, start_line, or start_side")
    if has_start_side and not has_side:
        raise user_input_error("if start_side is provided, side must also be provided")

    comment: dict[str, Any] = {"path": path, "body": body}
    if has_position:
        comment["position"] = position
    else:
        comment["line"] = line
    if has_side:
        comment["side"] = side
    if has_start_line:
        comment["start_line"] = start_line
    if has_start_side:
        comment["start_side"] = start_side
    return comment


async def _tool_create_pull_request_review(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")
    event = required_param(arguments, "event", str)
    body = optional_param(arguments, "body", str)
    commit_id = optional_param(arguments, "commitId", str)

    raw_comments = arguments.get("comments")
    if raw_comments is not None and not isinstance(raw_comments, list):
        raise type_mismatch("comments", "array of objects")
    comments = [_draft_review_comment(c) for c in raw_comments or []]

    payload = drop_empty({"event": event, "body": body, "commit_id": commit_id, "comments": comments})
    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "pulls", pull_number, "reviews"),
        json_body=payload,
        action="create pull request review",
        budget=runtime.budget(),
    )
    return {"review": data}


async def _tool_add_pull_request_review_comment(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pull_number")
    body = required_param(arguments, "body", str)

    in_reply_to, is_reply = optional_param_ok(arguments, "in_reply_to", int)
    if is_reply:
        data = await runtime.github.request_json(
            method="POST",
            path=repo_path(owner, repo, "pulls", pull_number, "comments", in_reply_to, "replies"),
            json_body={"body": body},
            action="reply to pull request comment",
            budget=runtime.budget(),
        )
        return {"comment": data}

    commit_id = required_param(arguments, "commit_id", str)
    path = required_param(arguments, "path", str)
    subject_type = optional_param(arguments, "subject_type", str)

    comment: dict[str, Any] = {"body": body, "commit_id": commit_id, "path": path}
    if subject_type == "file":
        comment["subject_type"] = "file"
    else:
        line, has_line = optional_param_ok(arguments, "line", int)
        side, has_side = optional_param_ok(arguments, "side", str)
        start_line, has_start_line = optional_param_ok(arguments, "start_line", int)
        start_side, has_start_side = optional_param_ok(arguments, "start_side", str)
        if not has_line:
            raise user_input_error("line parameter is required unless using subject_type:file")
        if has_start_side and not has_side:
            raise user_input_error("if start_side is provided, side must also be provided")
        comment["line"] = line
        if subject_type:
            comment["subject_type"] = subject_type
        if has_side:
            comment["side"] = side
        if has_start_line:
            comment["start_line"] = start_line
        if has_start_side:
            comment["start_side"] = start_side

    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "pulls", pull_number, "comments"),
        json_body=comment,
        action="create pull request comment",
        budget=runtime.budget(),
    )
    return {"comment": data}


async def _tool_request_copilot_review(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pull_number = required_int(arguments, "pullNumber")

    await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "pulls", pull_number, "requested_reviewers"),
        json_body={"reviewers": [COPILOT_REVIEWER_LOGIN]},
        action="request copilot review",
        budget=runtime.budget(),
    )
    return {"message": "Copilot review requested"}


def pull_requests_toolset(t: TranslateFunc) -> Toolset:
    repo_props = owner_repo_props()
    pr_props = {**repo_props, "pullNumber": number_prop("Pull request number")}
    pr_required = ["owner", "repo", "pullNumber"]

    return (
        Toolset("pull_requests", "GitHub Pull Request related tools")
        .add_read_tools(
            define_tool(
                t,
                name="get_pull_request",
                title="Get pull request details",
                description="Get details of a specific pull request in a GitHub repository.",
                properties=pr_props,
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request,
            ),
            define_tool(
                t,
                name="list_pull_requests",
                title="List pull requests",
                description="List pull requests in a GitHub repository.",
                properties=with_pagination(
                    {
                        **repo_props,
                        "state": string_prop("Filter by state", enum=["open", "closed", "all"]),
                        "head": string_prop("Filter by head user/org and branch"),
                        "base": string_prop("Filter by base branch"),
                        "sort": string_prop("Sort by", enum=["created", "updated", "popularity", "long-running"]),
                        "direction": string_prop("Sort direction", enum=["asc", "desc"]),
                    }
                ),
                required=["owner", "repo"],
                read_only=True,
                handler=_tool_list_pull_requests,
            ),
            define_tool(
                t,
                name="get_pull_request_files",
                title="Get pull request files",
                description="Get the files changed in a specific pull request.",
                properties=with_pagination(pr_props),
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request_files,
            ),
            define_tool(
                t,
                name="get_pull_request_status",
                title="Get pull request status checks",
                description="Get the status of a specific pull request.",
                properties=pr_props,
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request_status,
            ),
            define_tool(
                t,
                name="get_pull_request_comments",
                title="Get pull request comments",
                description="Get comments for a specific pull request.",
                properties=pr_props,
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request_comments,
            ),
            define_tool(
                t,
                name="get_pull_request_reviews",
                title="Get pull request reviews",
                description="Get reviews for a specific pull request.",
                properties=pr_props,
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request_reviews,
            ),
            define_tool(
                t,
                name="get_pull_request_diff",
                title="Get pull request diff",
                description="Get the diff of a pull request.",
                properties=pr_props,
                required=pr_required,
                read_only=True,
                handler=_tool_get_pull_request_diff,
            ),
        )
        .add_write_tools(
            define_tool(
                t,
                name="merge_pull_request",
                title="Merge pull request",
                description="Merge a pull request in a GitHub repository.",
                properties={
                    **pr_props,
                    "commit_title": string_prop("Title for merge commit"),
                    "commit_message": string_prop("Extra detail for merge commit"),
                    "merge_method": string_prop("Merge method", enum=["merge", "squash", "rebase"]),
                },
                required=pr_required,
                read_only=False,
                handler=_tool_merge_pull_request,
            ),
            define_tool(
                t,
                name="update_pull_request_branch",
                title="Update pull request branch",
                description="Update the branch of a pull request with the latest changes from the base branch.",
                properties={
                    **pr_props,
                    "expectedHeadSha": string_prop("The expected SHA of the pull request's HEAD ref"),
                },
                required=pr_required,
                read_only=False,
                handler=_tool_update_pull_request_branch,
            ),
            define_tool(
                t,
                name="create_pull_request",
                title="Open new pull request",
                description="Create a new pull request in a GitHub repository.",
                properties={
                    **repo_props,
                    "title": string_prop("PR title"),
                    "body": string_prop("PR description"),
                    "head": string_prop("Branch containing changes"),
                    "base": string_prop("Branch to merge into"),
                    "draft": boolean_prop("Create as draft PR"),
                    "maintainer_can_modify": boolean_prop("Allow maintainer edits"),
                },
                required=["owner", "repo", "title", "head", "base"],
                read_only=False,
                handler=_tool_create_pull_request,
            ),
            define_tool(
                t,
                name="update_pull_request",
                title="Edit pull request",
                description="Update an existing pull request in a GitHub repository.",
                properties={
                    **pr_props,
                    "title": string_prop("New title"),
                    "body": string_prop("New description"),
                    "state": string_prop("New state", enum=["open", "closed"]),
                    "base": string_prop("New base branch name"),
                    "maintainer_can_modify": boolean_prop("Allow maintainer edits"),
                },
                required=pr_required,
                read_only=False,
                handler=_tool_update_pull_request,
            ),
            define_tool(
                t,
                name="create_pull_request_review",
                title="Submit pull request review",
                description="Create a review on a pull request.",
                properties={
                    **pr_props,
                    "body": string_prop("Review comment text"),
                    "event": string_prop("Review action to perform", enum=["APPROVE", "REQUEST_CHANGES", "COMMENT"]),
                    "commitId": string_prop("SHA of commit to review"),
                    "comments": object_array_prop(
                        "Line-specific comments. Each needs path and body, plus either position or line "
                        "(with optional side, start_line and start_side for multi-line comments).",
                        properties={
                            "path": string_prop("path to the file"),
                            "body": string_prop("comment body"),
                            "position": number_prop("position of the comment in the diff"),
                            "line": number_prop("line number in the file; for multi-line comments, the end of the range"),
                            "side": string_prop("side of the diff for line", enum=_SIDES),
                            "start_line": number_prop("first line of a multi-line comment"),
                            "start_side": string_prop("side of the diff for start_line", enum=_SIDES),
                        },
                        required=["path", "body"],
                    ),
                },
                required=["owner", "repo", "pullNumber", "event"],
                read_only=False,
                handler=_tool_create_pull_request_review,
            ),
            define_tool(
                t,
                name="add_pull_request_review_comment",
                title="Add review comment to pull request",
                description="Add a review comment to a pull request.",
                properties={
                    **repo_props,
                    "pull_number": number_prop("Pull request number"),
                    "body": string_prop("The text of the review comment"),
                    "commit_id": string_prop(
                        "The SHA of the commit to comment on. Required unless in_reply_to is specified."
                    ),
                    "path": string_prop(
                        "The relative path to the file that necessitates a comment. "
                        "Required unless in_reply_to is specified."
                    ),
                    "subject_type": string_prop("The level at which the comment is targeted", enum=["line", "file"]),
                    "line": number_prop(
                        "The line of the blob in the pull request diff that the comment applies to. "
                        "For multi-line comments, the last line of the range"
                    ),
                    "side": string_prop("The side of the diff to comment on", enum=_SIDES),
                    "start_line": number_prop(
                        "For multi-line comments, the first line of the range that the comment applies to"
                    ),
                    "start_side": string_prop(
                        "For multi-line comments, the starting side of the diff that the comment applies to",
                        enum=_SIDES,
                    ),
                    "in_reply_to": number_prop(
                        "The ID of the review comment to reply to. When specified, only body is required "
                        "and all other parameters are ignored"
                    ),
                },
                required=["owner", "repo", "pull_number", "body"],
                read_only=False,
                handler=_tool_add_pull_request_review_comment,
            ),
            define_tool(
                t,
                name="request_copilot_review",
                title="Request Copilot review",
                description=(
                    "Request a GitHub Copilot code review for a pull request. Use this for automated feedback "
                    "on pull requests, usually before requesting a human reviewer. Not available on GitHub "
                    "Enterprise Server."
                ),
                properties=pr_props,
                required=pr_required,
                read_only=False,
                handler=_tool_request_copilot_review,
            ),
        )
    )
