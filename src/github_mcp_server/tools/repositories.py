"""Repositories toolset.

Multi-file pushes and file deletion go through the git data API so that each call
produces exactly one commit on the target branch: read the branch ref, read its commit,
write a tree on top of the commit's tree, write a commit, then move the ref.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

from ..errors import missing_parameter, user_input_error
from ..params import (
    optional_pagination_params,
    optional_param,
    required_param,
)
from ..runtime import Runtime
from ..schema import boolean_prop, object_array_prop, owner_repo_props, string_prop, with_pagination
from ..toolsets import Toolset
from ..translations import TranslateFunc
from .common import content_path, define_tool, drop_empty, nested_str, query, repo_path
from .search import search_code_tool, search_repositories_tool

logger = logging.getLogger(__name__)

_FILE_MODE = "100644"


async def _tool_get_file_contents(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    path = required_param(arguments, "path", str)
    branch = optional_param(arguments, "branch", str)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "contents", content_path(path)),
        params=query({"ref": branch}),
        action="get file contents",
        budget=runtime.budget(),
    )
    return {"contents": data}


async def _tool_list_commits(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    sha = optional_param(arguments, "sha", str)
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "commits"),
        params={**query({"sha": sha}), **pagination.to_query()},
        action="list commits",
        budget=runtime.budget(),
    )
    return {"commits": data}


async def _tool_get_commit(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    sha = required_param(arguments, "sha", str)
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "commits", content_path(sha)),
        params=pagination.to_query(),
        action=f"get commit: {sha}",
        budget=runtime.budget(),
    )
    return {"commit": data}


async def _tool_list_branches(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "branches"),
        params=pagination.to_query(),
        action="list branches",
        budget=runtime.budget(),
    )
    return {"branches": data}


async def _tool_list_tags(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    pagination = optional_pagination_params(arguments)

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "tags"),
        params=pagination.to_query(),
        action="list tags",
        budget=runtime.budget(),
    )
    return {"tags": data}


async def _tool_get_tag(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    tag = required_param(arguments, "tag", str)

    ref = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "git", "ref", "tags", content_path(tag)),
        action="get tag reference",
        budget=runtime.budget(),
    )
    tag_sha = nested_str(ref, "object", "sha", what="tag reference")

    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "git", "tags", tag_sha),
        action="get tag object",
        budget=runtime.budget(),
    )
    return {"tag": data}


async def _tool_create_or_update_file(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    path = required_param(arguments, "path", str)
    content = required_param(arguments, "content", str)
    message = required_param(arguments, "message", str)
    branch = required_param(arguments, "branch", str)
    sha = optional_param(arguments, "sha", str)

    payload = {
        "message": message,
        "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        "branch": branch,
        **drop_empty({"sha": sha}),
    }
    data = await runtime.github.request_json(
        method="PUT",
        path=repo_path(owner, repo, "contents", content_path(path)),
        json_body=payload,
        action="create/update file",
        budget=runtime.budget(),
    )
    return {"result": data}


async def _tool_create_repository(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    name = required_param(arguments, "name", str)
    description = optional_param(arguments, "description", str)
    private = optional_param(arguments, "private", bool)
    auto_init = optional_param(arguments, "autoInit", bool)

    payload = {
        "name": name,
        **drop_empty({"description": description}),
        "private": private,
        "auto_init": auto_init,
    }
    data = await runtime.github.request_json(
        method="POST",
        path="/user/repos",
        json_body=payload,
        action="create repository",
        budget=runtime.budget(),
    )
    return {"repository": data}


async def _tool_fork_repository(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    organization = optional_param(arguments, "organization", str)

    # 202 Accepted: the fork is created asynchronously.
    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "forks"),
        json_body=drop_empty({"organization": organization}),
        action="fork repository",
        budget=runtime.budget(),
    )
    return {"fork": data}


async def _branch_head_sha(runtime: Runtime, owner: str, repo: str, branch: str) -> str:
    ref = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "git", "ref", "heads", content_path(branch)),
        action="get branch reference",
        budget=runtime.budget(),
    )
    return nested_str(ref, "object", "sha", what="branch reference")


async def _tool_create_branch(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    branch = required_param(arguments, "branch", str)
    from_branch = optional_param(arguments, "from_branch", str)

    if not from_branch:
        repository = await runtime.github.request_json(
            method="GET",
            path=repo_path(owner, repo),
            action="get repository",
            budget=runtime.budget(),
        )
        from_branch = nested_str(repository, "default_branch", what="repository")

    sha = await _branch_head_sha(runtime, owner, repo, from_branch)
    data = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "git", "refs"),
        json_body={"ref": f"refs/heads/{branch}", "sha": sha},
        action="create branch",
        budget=runtime.budget(),
    )
    return {"ref": data}


async def _commit_tree_entries(
    runtime: Runtime,
    *,
    owner: str,
    repo: str,
    branch: str,
    message: str,
    entries: list[dict[str, Any]],
) -> tuple[object, object]:
    """Commit `entries` on top of `branch` and move the branch to the new commit.

    Returns the new commit and the updated ref.
    """
    parent_sha = await _branch_head_sha(runtime, owner, repo, branch)
    parent = await runtime.github.request_json(
        method="GET",
        path=repo_path(owner, repo, "git", "commits", parent_sha),
        action="get base commit",
        budget=runtime.budget(),
    )
    base_tree = nested_str(parent, "tree", "sha", what="base commit")

    tree = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "git", "trees"),
        json_body={"base_tree": base_tree, "tree": entries},
        action="create tree",
        budget=runtime.budget(),
    )
    tree_sha = nested_str(tree, "sha", what="tree")

    commit = await runtime.github.request_json(
        method="POST",
        path=repo_path(owner, repo, "git", "commits"),
        json_body={"message": message, "tree": tree_sha, "parents": [parent_sha]},
        action="create commit",
        budget=runtime.budget(),
    )
    commit_sha = nested_str(commit, "sha", what="commit")

    ref = await runtime.github.request_json(
        method="PATCH",
        path=repo_path(owner, repo, "git", "refs", "heads", content_path(branch)),
        json_body={"sha": commit_sha, "force": False},
        action="update reference",
        budget=runtime.budget(),
    )
    logger.debug("Moved %s/%s:%s to %s", owner, repo, branch, commit_sha)
    return commit, ref


def _push_entries(raw: Any) -> list[dict[str, Any]]:
    if raw is None:
        raise missing_parameter("files")
    if not isinstance(raw, list):
        raise user_input_error("files parameter must be an array of objects with path and content")
    entries: list[dict[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict):
            raise user_input_error("each file must be an object with path and content")
        path = item.get("path")
        if not isinstance(path, str) or path == "":
            raise user_input_error("each file must have a path")
        content = item.get("content")
        if not isinstance(content, str):
            raise user_input_error("each file must have content")
        entries.append({"path": path, "mode": _FILE_MODE, "type": "blob", "content": content})
    return entries


async def _tool_push_files(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    branch = required_param(arguments, "branch", str)
    message = required_param(arguments, "message", str)
    entries = _push_entries(arguments.get("files"))

    commit, ref = await _commit_tree_entries(
        runtime, owner=owner, repo=repo, branch=branch, message=message, entries=entries
    )
    return {"ref": ref, "commit": _commit_summary(commit)}


def _commit_summary(commit: object) -> dict[str, Any]:
    if not isinstance(commit, dict):
        return {}
    return {key: commit.get(key) for key in ("sha", "html_url", "message")}


async def _tool_delete_file(runtime: Runtime, arguments: dict[str, Any]) -> dict[str, Any]:
    owner = required_param(arguments, "owner", str)
    repo = required_param(arguments, "repo", str)
    path = required_param(arguments, "path", str)
    message = required_param(arguments, "message", str)
    branch = required_param(arguments, "branch", str)

    # A null sha removes the path from the new tree.
    entries = [{"path": path, "mode": _FILE_MODE, "type": "blob", "sha": None}]
    commit, _ref = await _commit_tree_entries(
        runtime, owner=owner, repo=repo, branch=branch, message=message, entries=entries
    )
    return {"commit": _commit_summary(commit), "content": None}


def repositories_toolset(t: TranslateFunc) -> Toolset:
    repo_props = owner_repo_props()
    return (
        Toolset("repos", "GitHub Repository related tools")
        .add_read_tools(
            search_repositories_tool(t),
            define_tool(
                t,
                name="get_file_contents",
                title="Get file or directory contents",
                description="Get the contents of a file or directory from a GitHub repository.",
                properties={
                    "owner": string_prop("Repository owner (username or organization)"),
                    "repo": string_prop("Repository name"),
                    "path": string_prop("Path to file/directory"),
                    "branch": string_prop("Branch to get contents from"),
                },
                required=["owner", "repo", "path"],
                read_only=True,
                handler=_tool_get_file_contents,
            ),
            define_tool(
                t,
                name="list_commits",
                title="List commits",
                description="Get list of commits of a branch in a GitHub repository.",
                properties=with_pagination({**repo_props, "sha": string_prop("SHA or Branch name")}),
                required=["owner", "repo"],
                read_only=True,
                handler=_tool_list_commits,
            ),
            define_tool(
                t,
                name="get_commit",
                title="Get commit details",
                description="Get details for a commit from a GitHub repository.",
                properties=with_pagination({**repo_props, "sha": string_prop("Commit SHA, branch name, or tag name")}),
                required=["owner", "repo", "sha"],
                read_only=True,
                handler=_tool_get_commit,
            ),
            define_tool(
                t,
                name="list_branches",
                title="List branches",
                description="List branches in a GitHub repository.",
                properties=with_pagination(repo_props),
                required=["owner", "repo"],
                read_only=True,
                handler=_tool_list_branches,
            ),
            define_tool(
                t,
                name="list_tags",
                title="List tags",
                description="List git tags in a GitHub repository.",
                properties=with_pagination(repo_props),
                required=["owner", "repo"],
                read_only=True,
                handler=_tool_list_tags,
            ),
            define_tool(
                t,
                name="get_tag",
                title="Get tag details",
                description="Get details about a specific git tag in a GitHub repository.",
                properties={**repo_props, "tag": string_prop("Tag name")},
                required=["owner", "repo", "tag"],
                read_only=True,
                handler=_tool_get_tag,
            ),
            search_code_tool(t),
        )
        .add_write_tools(
            define_tool(
                t,
                name="create_or_update_file",
                title="Create or update file",
                description="Create or update a single file in a GitHub repository.",
                properties={
                    "owner": string_prop("Repository owner (username or organization)"),
                    "repo": string_prop("Repository name"),
                    "path": string_prop("Path where to create/update the file"),
                    "content": string_prop("Content of the file"),
                    "message": string_prop("Commit message"),
                    "branch": string_prop("Branch to create/update the file in"),
                    "sha": string_prop("SHA of file being replaced (for updates)"),
                },
                required=["owner", "repo", "path", "content", "message", "branch"],
                read_only=False,
                handler=_tool_create_or_update_file,
            ),
            define_tool(
                t,
                name="create_repository",
                title="Create repository",
                description="Create a new GitHub repository in your account.",
                properties={
                    "name": string_prop("Repository name"),
                    "description": string_prop("Repository description"),
                    "private": boolean_prop("Whether repo should be private"),
                    "autoInit": boolean_prop("Initialize with README"),
                },
                required=["name"],
                read_only=False,
                handler=_tool_create_repository,
            ),
            define_tool(
                t,
                name="fork_repository",
                title="Fork repository",
                description="Fork a GitHub repository to your account or specified organization.",
                properties={**repo_props, "organization": string_prop("Organization to fork to")},
                required=["owner", "repo"],
                read_only=False,
                handler=_tool_fork_repository,
            ),
            define_tool(
                t,
                name="create_branch",
                title="Create branch",
                description="Create a new branch in a GitHub repository.",
                properties={
                    **repo_props,
                    "branch": string_prop("Name for new branch"),
                    "from_branch": string_prop("Source branch (defaults to repo default)"),
                },
                required=["owner", "repo", "branch"],
                read_only=False,
                handler=_tool_create_branch,
            ),
            define_tool(
                t,
                name="push_files",
                title="Push files to repository",
                description="Push multiple files to a GitHub repository in a single commit.",
                properties={
                    **repo_props,
                    "branch": string_prop("Branch to push to"),
                    "files": object_array_prop(
                        "Array of file objects to push, each object with path (string) and content (string)",
                        properties={
                            "path": string_prop("path to the file"),
                            "content": string_prop("file content"),
                        },
                        required=["path", "content"],
                    ),
                    "message": string_prop("Commit message"),
                },
                required=["owner", "repo", "branch", "files", "message"],
                read_only=False,
                handler=_tool_push_files,
            ),
            define_tool(
                t,
                name="delete_file",
                title="Delete file",
                description="Delete a file from a GitHub repository.",
                properties={
                    "owner": string_prop("Repository owner (username or organization)"),
                    "repo": string_prop("Repository name"),
                    "path": string_prop("Path to the file to delete"),
                    "message": string_prop("Commit message"),
                    "branch": string_prop("Branch to delete the file from"),
                },
                required=["owner", "repo", "path", "message", "branch"],
                read_only=False,
                handler=_tool_delete_file,
            ),
        )
    )
