"""Repository and search tools, including the git data API composites."""

from __future__ import annotations

from typing import Any

import pytest
from github_mcp_server.errors import MISSING_PARAMETER, USER_INPUT
from github_mcp_server.tools import build_tool_registry, dispatch_tool

_REGISTRY = build_tool_registry(read_only=False)

_GIT_FLOW = {
    ("GET", "/repos/octo/hello/git/ref/heads/main"): {"ref": "refs/heads/main", "object": {"sha": "c0"}},
    ("GET", "/repos/octo/hello/git/commits/c0"): {"sha": "c0", "tree": {"sha": "t0"}},
    ("POST", "/repos/octo/hello/git/trees"): {"sha": "t1"},
    ("POST", "/repos/octo/hello/git/commits"): {
        "sha": "c1",
        "html_url": "https://github.com/octo/hello/commit/c1",
        "message": "update",
        "tree": {"sha": "t1"},
    },
    ("PATCH", "/repos/octo/hello/git/refs/heads/main"): {"ref": "refs/heads/main", "object": {"sha": "c1"}},
}


async def _call(runtime, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return await dispatch_tool(runtime, _REGISTRY, name, arguments)


def _methods_and_paths(runtime) -> list[tuple[str, str]]:
    return [(c["method"], c["path"]) for c in runtime.github.calls]


@pytest.mark.asyncio
async def test_get_file_contents_encodes_path_and_sends_branch(make_runtime) -> None:
    runtime = make_runtime({("GET", "/repos/octo/hello/contents/docs/read%20me.md"): {"type": "file"}})

    out = await _call(
        runtime, "get_file_contents", {"owner": "octo", "repo": "hello", "path": "docs/read me.md", "branch": "dev"}
    )

    assert out["contents"] == {"type": "file"}
    assert runtime.github.calls[0]["params"] == {"ref": "dev"}


@pytest.mark.asyncio
async def test_list_commits_with_sha_and_pagination(make_runtime) -> None:
    runtime = make_runtime({("GET", "/repos/octo/hello/commits"): []})

    await _call(runtime, "list_commits", {"owner": "octo", "repo": "hello", "sha": "main", "page": 2, "perPage": 5})

    assert runtime.github.calls[0]["params"] == {"sha": "main", "page": "2", "per_page": "5"}


@pytest.mark.asyncio
async def test_get_tag_follows_reference(make_runtime) -> None:
    runtime = make_runtime(
        {
            ("GET", "/repos/octo/hello/git/ref/tags/v1.0"): {"object": {"sha": "tagsha", "type": "tag"}},
            ("GET", "/repos/octo/hello/git/tags/tagsha"): {"tag": "v1.0", "sha": "tagsha"},
        }
    )

    out = await _call(runtime, "get_tag", {"owner": "octo", "repo": "hello", "tag": "v1.0"})

    assert out["tag"] == {"tag": "v1.0", "sha": "tagsha"}
    assert len(runtime.github.calls) == 2


@pytest.mark.asyncio
async def test_search_repositories_uses_query_param(make_runtime) -> None:
    runtime = make_runtime({("GET", "/search/repositories"): {"total_count": 1}})

    out = await _call(runtime, "search_repositories", {"query": "mcp language:python"})

    assert out["result"] == {"total_count": 1}
    assert runtime.github.calls[0]["params"] == {"q": "mcp language:python", "page": "1", "per_page": "30"}


@pytest.mark.asyncio
async def test_search_users_sort(make_runtime) -> None:
    runtime = make_runtime({("GET", "/search/users"): {"total_count": 0}})

    await _call(runtime, "search_users", {"q": "octo", "sort": "followers"})

    assert runtime.github.calls[0]["params"]["sort"] == "followers"


@pytest.mark.asyncio
async def test_create_or_update_file_base64_encodes_content(make_runtime) -> None:
    runtime = make_runtime({("PUT", "/repos/octo/hello/contents/hello.txt"): {"commit": {"sha": "c9"}}})

    out = await _call(
        runtime,
        "create_or_update_file",
        {
            "owner": "octo",
            "repo": "hello",
            "path": "hello.txt",
            "content": "hello",
            "message": "add hello",
            "branch": "main",
        },
    )

    assert out["result"] == {"commit": {"sha": "c9"}}
    assert runtime.github.calls[0]["json_body"] == {"message": "add hello", "content": "aGVsbG8=", "branch": "main"}


@pytest.mark.asyncio
async def test_create_repository(make_runtime) -> None:
    runtime = make_runtime({("POST", "/user/repos"): {"full_name": "me/new"}})

    await _call(runtime, "create_repository", {"name": "new", "private": True, "autoInit": True})

    assert runtime.github.calls[0]["json_body"] == {"name": "new", "private": True, "auto_init": True}


@pytest.mark.asyncio
async def test_fork_repository_into_organization(make_runtime) -> None:
    runtime = make_runtime({("POST", "/repos/octo/hello/forks"): {"full_name": "acme/hello"}})

    out = await _call(runtime, "fork_repository", {"owner": "octo", "repo": "hello", "organization": "acme"})

    assert out["fork"] == {"full_name": "acme/hello"}
    assert runtime.github.calls[0]["json_body"] == {"organization": "acme"}


@pytest.mark.asyncio
async def test_create_branch_from_default_branch(make_runtime) -> None:
    runtime = make_runtime(
        {
            ("GET", "/repos/octo/hello"): {"default_branch": "main"},
            ("GET", "/repos/octo/hello/git/ref/heads/main"): {"object": {"sha": "c0"}},
            ("POST", "/repos/octo/hello/git/refs"): {"ref": "refs/heads/feature"},
        }
    )

    out = await _call(runtime, "create_branch", {"owner": "octo", "repo": "hello", "branch": "feature"})

    assert out["ref"] == {"ref": "refs/heads/feature"}
    assert runtime.github.calls[-1]["json_body"] == {"ref": "refs/heads/feature", "sha": "c0"}


@pytest.mark.asyncio
async def test_create_branch_from_named_branch_skips_repo_lookup(make_runtime) -> None:
    runtime = make_runtime(
        {
            ("GET", "/repos/octo/hello/git/ref/heads/release/1.x"): {"object": {"sha": "r1"}},
            ("POST", "/repos/octo/hello/git/refs"): {"ref": "refs/heads/hotfix"},
        }
    )

    await _call(
        runtime, "create_branch", {"owner": "octo", "repo": "hello", "branch": "hotfix", "from_branch": "release/1.x"}
    )

    assert len(runtime.github.calls) == 2


@pytest.mark.asyncio
async def test_push_files_makes_one_commit(make_runtime) -> None:
    runtime = make_runtime(dict(_GIT_FLOW))

    out = await _call(
        runtime,
        "push_files",
        {
            "owner": "octo",
            "repo": "hello",
            "branch": "main",
            "message": "update",
            "files": [{"path": "a.txt", "content": "A"}, {"path": "dir/b.txt", "content": ""}],
        },
    )

    assert out["ok"] is True
    assert out["commit"] == {"sha": "c1", "html_url": "https://github.com/octo/hello/commit/c1", "message": "update"}
    assert _methods_and_paths(runtime) == [
        ("GET", "/repos/octo/hello/git/ref/heads/main"),
        ("GET", "/repos/octo/hello/git/commits/c0"),
        ("POST", "/repos/octo/hello/git/trees"),
        ("POST", "/repos/octo/hello/git/commits"),
        ("PATCH", "/repos/octo/hello/git/refs/heads/main"),
    ]
    tree_body = runtime.github.calls[2]["json_body"]
    assert tree_body["base_tree"] == "t0"
    assert tree_body["tree"] == [
        {"path": "a.txt", "mode": "100644", "type": "blob", "content": "A"},
        {"path": "dir/b.txt", "mode": "100644", "type": "blob", "content": ""},
    ]
    assert runtime.github.calls[3]["json_body"] == {"message": "update", "tree": "t1", "parents": ["c0"]}
    assert runtime.github.calls[4]["json_body"] == {"sha": "c1", "force": False}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("files", "message"),
    [
        ("a.txt", "files parameter must be an array of objects with path and content"),
        (["a.txt"], "each file must be an object with path and content"),
        ([{"content": "x"}], "each file must have a path"),
        ([{"path": "a.txt"}], "each file must have content"),
    ],
)
async def test_push_files_validates_before_any_call(make_runtime, files: object, message: str) -> None:
    runtime = make_runtime(dict(_GIT_FLOW))

    out = await _call(
        runtime, "push_files", {"owner": "octo", "repo": "hello", "branch": "main", "message": "m", "files": files}
    )

    assert out["code"] == USER_INPUT
    assert out["message"] == message
    assert runtime.github.calls == []


@pytest.mark.asyncio
async def test_push_files_without_files_is_missing_parameter(make_runtime) -> None:
    runtime = make_runtime(dict(_GIT_FLOW))

    out = await _call(runtime, "push_files", {"owner": "octo", "repo": "hello", "branch": "main", "message": "m"})

    assert out["code"] == MISSING_PARAMETER
    assert out["message"] == "missing required parameter: files"
    assert runtime.github.calls == []


@pytest.mark.asyncio
async def test_delete_file_commits_a_null_sha_entry(make_runtime) -> None:
    runtime = make_runtime(dict(_GIT_FLOW))

    out = await _call(
        runtime,
        "delete_file",
        {"owner": "octo", "repo": "hello", "path": "old.txt", "message": "update", "branch": "main"},
    )

    assert out["content"] is None
    assert out["commit"]["sha"] == "c1"
    assert runtime.github.calls[2]["json_body"]["tree"] == [
        {"path": "old.txt", "mode": "100644", "type": "blob", "sha": None}
    ]
