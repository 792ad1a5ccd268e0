"""JSON Schema builders for tool input schemas."""

from __future__ import annotations

from typing import Any


def string_prop(description: str, *, enum: list[str] | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "string", "description": description}
    if enum:
        prop["enum"] = list(enum)
    return prop


def number_prop(description: str, *, minimum: int | None = None, maximum: int | None = None) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "number", "description": description}
    if minimum is not None:
        prop["minimum"] = minimum
    if maximum is not None:
        prop["maximum"] = maximum
    return prop


def boolean_prop(description: str) -> dict[str, Any]:
    return {"type": "boolean", "description": description}


def string_array_prop(description: str) -> dict[str, Any]:
    return {"type": "array", "description": description, "items": {"type": "string"}}


def object_array_prop(description: str, *, properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "array",
        "description": description,
        "items": {
            "type": "object",
            "properties": properties,
            "required": list(required),
            "additionalProperties": False,
        },
    }


def object_schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    """Build a tool input schema from property definitions."""
    schema: dict[str, Any] = {"type": "object", "properties": dict(properties)}
    if required:
        schema["required"] = list(required)
    return schema


def with_pagination(properties: dict[str, Any]) -> dict[str, Any]:
    """Add the `page` and `perPage` properties shared by list and search tools."""
    out = dict(properties)
    out["page"] = number_prop("Page number for pagination (min 1)", minimum=1)
    out["perPage"] = number_prop("Results per page for pagination (min 1, max 100)", minimum=1, maximum=100)
    return out


def owner_repo_props() -> dict[str, Any]:
    """Return the `owner` and `repo` properties most repository tools start with."""
    return {
        "owner": string_prop("Repository owner"),
        "repo": string_prop("Repository name"),
    }
