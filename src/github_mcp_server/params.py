"""Typed argument extraction for tool calls.

Tool arguments arrive as the JSON-decoded mapping of the MCP request, so every value is
one of str, bool, int/float (JSON has a single number type), list, dict, None or absent.
The helpers here turn that loose mapping into typed handler inputs and raise `SafeError`
with code `MissingParameter` or `TypeMismatch` before any GitHub call is made.

Numbers are truncated toward zero when an integer is requested: 3.9 becomes 3.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, TypeVar

from .errors import TYPE_MISMATCH, SafeError, missing_parameter, type_mismatch

T = TypeVar("T", str, int, bool)

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 30

_KIND_NAMES: dict[type, str] = {str: "string", int: "number", bool: "boolean"}
_ZERO_VALUES: dict[type, Any] = {str: "", int: 0, bool: False}


def _coerce(name: str, value: Any, kind: type[T]) -> T:
    if kind is bool:
        if isinstance(value, bool):
            return value  # type: ignore[return-value]
    elif kind is str:
        if isinstance(value, str):
            return value  # type: ignore[return-value]
    elif kind is int:
        # bool is an int subclass; a JSON true is never a number.
        if isinstance(value, int) and not isinstance(value, bool):
            return value  # type: ignore[return-value]
        if isinstance(value, float) and math.isfinite(value):
            return int(value)  # type: ignore[return-value]
    else:
        raise TypeError(f"unsupported parameter kind: {kind!r}")
    raise type_mismatch(name, _KIND_NAMES[kind])


def required_param(arguments: dict[str, Any], name: str, kind: type[T]) -> T:
    """Return a required parameter of the given kind.

    Raises:
        SafeError: `MissingParameter` when the key is absent or null, `TypeMismatch`
            when the value has the wrong type. An empty string counts as missing.
    """
    if arguments.get(name) is None:
        raise missing_parameter(name)
    value = _coerce(name, arguments[name], kind)
    if kind is str and value == "":
        raise missing_parameter(name)
    return value


def required_int(arguments: dict[str, Any], name: str) -> int:
    """Return a required integer parameter, truncating fractional numbers."""
    return required_param(arguments, name, int)


def optional_param(arguments: dict[str, Any], name: str, kind: type[T]) -> T:
    """Return an optional parameter, or the kind's zero value when absent."""
    value = arguments.get(name)
    if value is None:
        return _ZERO_VALUES[kind]
    return _coerce(name, value, kind)


def optional_param_ok(arguments: dict[str, Any], name: str, kind: type[T]) -> tuple[T, bool]:
    """Return `(value, present)` so callers can tell an explicit zero value from omission."""
    value = arguments.get(name)
    if value is None:
        return _ZERO_VALUES[kind], False
    return _coerce(name, value, kind), True


def optional_int(arguments: dict[str, Any], name: str) -> int:
    """Return an optional integer parameter, 0 when absent."""
    return optional_param(arguments, name, int)


def optional_param_with_default(arguments: dict[str, Any], name: str, kind: type[T], default: T) -> T:
    """Return an optional parameter, substituting `default` for the zero value.

    An explicit zero value ("", 0, False) from the caller is replaced too, since it cannot
    be told apart from omission here. Handlers that need the distinction check
    `name in arguments` themselves.
    """
    value = optional_param(arguments, name, kind)
    if value == _ZERO_VALUES[kind]:
        return default
    return value


def optional_int_with_default(arguments: dict[str, Any], name: str, default: int) -> int:
    """Return an optional integer parameter, `default` when absent or zero."""
    return optional_param_with_default(arguments, name, int, default)


def parse_comma_separated_list(text: str) -> list[str] | None:
    """Split a comma-separated string into trimmed, non-empty pieces.

    Returns None for the empty string, so callers that need to tell "not given" apart from
    "given but blank" (`" , "` yields `[]`) can. Order and duplicates are preserved.
    """
    if text == "":
        return None
    pieces = [p.strip() for p in text.split(",")]
    return [p for p in pieces if p]


def optional_comma_separated_list(arguments: dict[str, Any], name: str) -> list[str]:
    """Return a comma-separated string parameter as a list; always a list, never None."""
    raw = optional_param(arguments, name, str)
    pieces = parse_comma_separated_list(raw)
    return [] if pieces is None else pieces


def optional_string_array(arguments: dict[str, Any], name: str) -> list[str]:
    """Return an optional JSON array of strings, [] when absent."""
    value = arguments.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise type_mismatch(name, "array of strings")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise SafeError(
                code=TYPE_MISMATCH,
                message=f"parameter {name} contains a non-string item",
            )
        out.append(item)
    return out


@dataclass(frozen=True, slots=True)
class PaginationParams:
    """Canonical page selection for list and search calls."""

    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    def to_query(self) -> dict[str, str]:
        """Return the GitHub query parameters for this page."""
        return {"page": str(self.page), "per_page": str(self.per_page)}


def optional_pagination_params(arguments: dict[str, Any]) -> PaginationParams:
    """Extract `page` and `perPage`, falling back to 1 and 30.

    Non-positive values also fall back to the defaults. No upper bound is applied;
    GitHub caps `per_page` itself.
    """
    page = optional_int_with_default(arguments, "page", DEFAULT_PAGE)
    per_page = optional_int_with_default(arguments, "perPage", DEFAULT_PER_PAGE)
    if page < 1:
        page = DEFAULT_PAGE
    if per_page < 1:
        per_page = DEFAULT_PER_PAGE
    return PaginationParams(page=page, per_page=per_page)
