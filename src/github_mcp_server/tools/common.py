"""Helpers shared by the tool handler modules."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from urllib.parse import quote

from ..errors import serialization_error, user_input_error
from ..schema import object_schema
from ..toolsets import ToolDescriptor, ToolHandler
from ..translations import TranslateFunc


def define_tool(
    t: TranslateFunc,
    *,
    name: str,
    title: str,
    description: str,
    properties: dict[str, Any],
    required: list[str] | None = None,
    read_only: bool,
    handler: ToolHandler,
) -> ToolDescriptor:
    """Build a descriptor whose title and description go through the translator.

    Keys are `TOOL_<NAME>_USER_TITLE` and `TOOL_<NAME>_DESCRIPTION`.
    """
    key = name.upper()
    return ToolDescriptor(
        name=name,
        title=t(f"TOOL_{key}_USER_TITLE", title),
        description=t(f"TOOL_{key}_DESCRIPTION", description),
        input_schema=object_schema(properties, required),
        read_only=read_only,
        handler=handler,
    )


def repo_path(owner: str, repo: str, *rest: str | int) -> str:
    """Return `/repos/{owner}/{repo}/...` with each extra segment appended."""
    parts = [f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"]
    parts.extend(str(p) for p in rest)
    return "/".join(parts)


def content_path(path: str) -> str:
    """Percent-encode a repository file path, keeping its slashes."""
    return quote(path.lstrip("/"), safe="/")


def parse_iso_timestamp(value: str) -> datetime:
    """Parse `YYYY-MM-DDThh:mm:ssZ` (RFC 3339) or `YYYY-MM-DD` into an aware datetime."""
    if value == "":
        raise user_input_error("empty timestamp")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None and "T" in value:
        if parsed.tzinfo is None:
            raise user_input_error(
                f"invalid ISO 8601 timestamp: {value} (supported formats: YYYY-MM-DDThh:mm:ssZ or YYYY-MM-DD)"
            )
        return parsed
    try:
        day = date.fromisoformat(value)
    except ValueError as exc:
        raise user_input_error(
            f"invalid ISO 8601 timestamp: {value} (supported formats: YYYY-MM-DDThh:mm:ssZ or YYYY-MM-DD)"
        ) from exc
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format an aware datetime the way the GitHub API expects."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(name: str, value: str) -> datetime:
    """Parse a strict RFC 3339 timestamp for parameter `name`."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise user_input_error(f"invalid {name} time format, should be RFC3339/ISO8601: {value}") from exc
    if "T" not in value or parsed.tzinfo is None:
        raise user_input_error(f"invalid {name} time format, should be RFC3339/ISO8601: {value}")
    return parsed


def drop_empty(values: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None, "" or an empty list."""
    return {k: v for k, v in values.items() if v is not None and v != "" and v != []}


def query(values: dict[str, Any]) -> dict[str, str]:
    """Turn non-empty values into GitHub query parameters; booleans become true/false."""
    out: dict[str, str] = {}
    for k, v in drop_empty(values).items():
        if isinstance(v, bool):
            out[k] = "true" if v else "false"
        elif isinstance(v, list):
            out[k] = ",".join(str(i) for i in v)
        else:
            out[k] = str(v)
    return out


def nested_str(data: object, *keys: str, what: str) -> str:
    """Walk `keys` through nested GitHub objects and return the string found there.

    A missing or non-string value means GitHub answered with an unexpected shape.
    """
    current = data
    for key in keys:
        if not isinstance(current, dict):
            raise serialization_error(what)
        current = current.get(key)
    if not isinstance(current, str) or not current:
        raise serialization_error(what)
    return current
