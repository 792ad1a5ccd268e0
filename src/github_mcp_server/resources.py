"""Repository content resource templates.

Five URI shapes address repository content:

    repo://{owner}/{repo}/refs/heads/{branch}/contents{/path*}
    repo://{owner}/{repo}/refs/tags/{tag}/contents{/path*}
    repo://{owner}/{repo}/sha/{sha}/contents{/path*}
    repo://{owner}/{repo}/refs/pull/{prNumber}/head/contents{/path*}
    repo://{owner}/{repo}/contents{/path*}

`match_resource_uri` tries them in that order and turns the first match into a
`ResolvedResource` carrying a `RefSelector`. `read_repository_content` is the single
handler behind all five: it resolves the selector to a git ref (looking up the pull
request head first when needed) and fetches the contents API once.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
import posixpath
import re
from dataclasses import dataclass
from typing import Any, Callable, Union
from urllib.parse import unquote

from mcp.types import BlobResourceContents, ResourceTemplate, TextResourceContents

from .errors import no_template_match, serialization_error, user_input_error
from .runtime import Runtime
from .tools.common import content_path, nested_str, repo_path
from .translations import TranslateFunc

logger = logging.getLogger(__name__)

DIRECTORY_MIME_TYPE = "text/directory"
MARKDOWN_MIME_TYPE = "text/markdown"
DEFAULT_BINARY_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class DefaultRef:
    """The repository's default branch; no ref is sent."""


@dataclass(frozen=True, slots=True)
class BranchRef:
    name: str


@dataclass(frozen=True, slots=True)
class TagRef:
    name: str


@dataclass(frozen=True, slots=True)
class ShaRef:
    sha: str


@dataclass(frozen=True, slots=True)
class PullRequestHeadRef:
    """The head commit of a pull request; needs a lookup before the content fetch."""

    number: int


RefSelector = Union[DefaultRef, BranchRef, TagRef, ShaRef, PullRequestHeadRef]


@dataclass(frozen=True, slots=True)
class ResolvedResource:
    """A matched resource URI: where to read and at which ref."""

    owner: str
    repo: str
    path: str
    ref: RefSelector


@dataclass(frozen=True, slots=True)
class ResourceTemplateSpec:
    """One URI shape and how its bound variables become a `RefSelector`."""

    uri_template: str
    name_key: str
    default_name: str
    pattern: re.Pattern[str]
    build_ref: Callable[[dict[str, str]], RefSelector]


_PREFIX = r"^repo://(?P<owner>[^/]+)/(?P<repo>[^/]+)/"
_SUFFIX = r"contents(?:/(?P<path>.*))?$"


def _segment(groups: dict[str, str], name: str) -> str:
    return unquote(groups[name])


RESOURCE_TEMPLATES: tuple[ResourceTemplateSpec, ...] = (
    ResourceTemplateSpec(
        uri_template="repo://{owner}/{repo}/refs/heads/{branch}/contents{/path*}",
        name_key="RESOURCE_REPOSITORY_CONTENT_BRANCH_DESCRIPTION",
        default_name="Repository Content for specific branch",
        pattern=re.compile(_PREFIX + r"refs/heads/(?P<branch>[^/]+)/" + _SUFFIX),
        build_ref=lambda g: BranchRef(_segment(g, "branch")),
    ),
    ResourceTemplateSpec(
        uri_template="repo://{owner}/{repo}/refs/tags/{tag}/contents{/path*}",
        name_key="RESOURCE_REPOSITORY_CONTENT_TAG_DESCRIPTION",
        default_name="Repository Content for specific tag",
        pattern=re.compile(_PREFIX + r"refs/tags/(?P<tag>[^/]+)/" + _SUFFIX),
        build_ref=lambda g: TagRef(_segment(g, "tag")),
    ),
    ResourceTemplateSpec(
        uri_template="repo://{owner}/{repo}/sha/{sha}/contents{/path*}",
        name_key="RESOURCE_REPOSITORY_CONTENT_COMMIT_DESCRIPTION",
        default_name="Repository Content for specific commit",
        pattern=re.compile(_PREFIX + r"sha/(?P<sha>[^/]+)/" + _SUFFIX),
        build_ref=lambda g: ShaRef(_segment(g, "sha")),
    ),
    ResourceTemplateSpec(
        uri_template="repo://{owner}/{repo}/refs/pull/{prNumber}/head/contents{/path*}",
        name_key="RESOURCE_REPOSITORY_CONTENT_PR_DESCRIPTION",
        default_name="Repository Content for specific pull request",
        pattern=re.compile(_PREFIX + r"refs/pull/(?P<prNumber>[0-9]+)/head/" + _SUFFIX),
        build_ref=lambda g: PullRequestHeadRef(int(g["prNumber"])),
    ),
    ResourceTemplateSpec(
        uri_template="repo://{owner}/{repo}/contents{/path*}",
        name_key="RESOURCE_REPOSITORY_CONTENT_DESCRIPTION",
        default_name="Repository Content",
        pattern=re.compile(_PREFIX + _SUFFIX),
        build_ref=lambda g: DefaultRef(),
    ),
)


def match_resource_uri(uri: str) -> ResolvedResource:
    """Resolve a resource URI against the templates; the first match wins.

    Raises:
        SafeError: `NoTemplateMatch` when no template matches.
    """
    for spec in RESOURCE_TEMPLATES:
        m = spec.pattern.match(uri)
        if m is None:
            continue
        groups = {k: v for k, v in m.groupdict().items() if v is not None}
        return ResolvedResource(
            owner=_segment(groups, "owner"),
            repo=_segment(groups, "repo"),
            path=groups.get("path", ""),
            ref=spec.build_ref(groups),
        )
    raise no_template_match(uri)


def list_resource_templates(translate: TranslateFunc) -> list[ResourceTemplate]:
    """Return the MCP descriptions of every content template."""
    return [
        ResourceTemplate(
            uriTemplate=spec.uri_template,
            name=translate(spec.name_key, spec.default_name),
        )
        for spec in RESOURCE_TEMPLATES
    ]


async def resolve_ref(runtime: Runtime, resource: ResolvedResource) -> str | None:
    """Turn a `RefSelector` into the `ref` query value, or None for the default branch."""
    ref = resource.ref
    if isinstance(ref, DefaultRef):
        return None
    if isinstance(ref, BranchRef):
        return f"refs/heads/{ref.name}"
    if isinstance(ref, TagRef):
        return f"refs/tags/{ref.name}"
    if isinstance(ref, ShaRef):
        return ref.sha
    if isinstance(ref, PullRequestHeadRef):
        pr = await runtime.github.request_json(
            method="GET",
            path=repo_path(resource.owner, resource.repo, "pulls", ref.number),
            action="get pull request",
            budget=runtime.budget(),
        )
        return nested_str(pr, "head", "sha", what="pull request head")
    raise TypeError(f"unknown ref selector: {ref!r}")


def _guess_mime_type(name: str) -> str | None:
    if posixpath.splitext(name)[1] == ".md":
        return MARKDOWN_MIME_TYPE
    guessed, _ = mimetypes.guess_type(name)
    return guessed


def _directory_entries(uri: str, entries: list[Any]) -> list[TextResourceContents]:
    out: list[TextResourceContents] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "")
        if entry.get("type") == "file":
            mime_type = _guess_mime_type(name) or ""
        else:
            mime_type = DIRECTORY_MIME_TYPE
        out.append(
            TextResourceContents(
                uri=entry.get("html_url") or uri,
                mimeType=mime_type or None,
                text=name,
            )
        )
    return out


def _file_contents(uri: str, data: dict[str, Any]) -> TextResourceContents | BlobResourceContents:
    if data.get("encoding") != "base64" or not isinstance(data.get("content"), str):
        raise user_input_error(
            "file content is not available through the contents API",
            hint="Files larger than 1 MB must be read through get_file_contents or a git client",
        )
    try:
        raw = base64.b64decode(data["content"])
    except (binascii.Error, ValueError) as exc:
        raise serialization_error("file content") from exc

    name = str(data.get("name") or posixpath.basename(str(data.get("path") or "")))
    mime_type = _guess_mime_type(name)

    if mime_type is None or mime_type.startswith("text"):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            text = None
        if text is not None and "\x00" not in text:
            return TextResourceContents(uri=uri, mimeType=mime_type or "text/plain", text=text)

    return BlobResourceContents(
        uri=uri,
        mimeType=mime_type or DEFAULT_BINARY_MIME_TYPE,
        blob=base64.b64encode(raw).decode("ascii"),
    )


async def read_repository_content(
    runtime: Runtime, uri: str
) -> list[TextResourceContents | BlobResourceContents]:
    """Read the repository content addressed by `uri`.

    A directory yields one entry per child (its URI is the child's `html_url`, its text
    the child's name); a file yields a single text or blob entry for `uri`.
    """
    resource = match_resource_uri(uri)
    ref = await resolve_ref(runtime, resource)
    logger.debug("Reading %s/%s:%s at %s", resource.owner, resource.repo, resource.path or "/", ref or "default branch")

    params = {"ref": ref} if ref else None
    data = await runtime.github.request_json(
        method="GET",
        path=repo_path(resource.owner, resource.repo, "contents", content_path(resource.path)),
        params=params,
        action="get repository content",
        budget=runtime.budget(),
    )

    if isinstance(data, list):
        return _directory_entries(uri, data)
    if isinstance(data, dict) and data.get("type") == "file":
        return [_file_contents(uri, data)]
    if isinstance(data, dict):
        raise user_input_error(f"unsupported content type: {data.get('type')}")
    raise serialization_error("repository content")
