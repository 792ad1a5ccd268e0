"""Safe error types and serialization helpers.

Every failure a caller can observe is a `SafeError` whose `code` names its category.
Validation codes are raised before any GitHub request is made; upstream codes carry the
status GitHub returned; hard-failure codes mean no structured diagnostic is available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

MISSING_PARAMETER = "MissingParameter"
TYPE_MISMATCH = "TypeMismatch"
NO_TEMPLATE_MATCH = "NoTemplateMatch"
USER_INPUT = "UserInput"
UPSTREAM_STATUS = "UpstreamStatus"
TRANSPORT = "Transport"
SERIALIZATION = "Serialization"
CONFIG = "Config"
INTERNAL = "Internal"

VALIDATION_CODES: frozenset[str] = frozenset({MISSING_PARAMETER, TYPE_MISMATCH, NO_TEMPLATE_MATCH, USER_INPUT})
HARD_FAILURE_CODES: frozenset[str] = frozenset({TRANSPORT, SERIALIZATION, INTERNAL})


@dataclass(frozen=True, slots=True)
class SafeError(Exception):
    """An error safe to expose to callers.

    This must never include secrets (tokens, authorization headers).
    """

    code: str
    message: str
    hint: str | None = None
    status_code: int | None = None

    @property
    def is_hard_failure(self) -> bool:
        """Return True when the call could not be completed at all."""
        return self.code in HARD_FAILURE_CODES


def missing_parameter(name: str) -> SafeError:
    """Return the error for an absent (or empty required string) parameter."""
    return SafeError(code=MISSING_PARAMETER, message=f"missing required parameter: {name}")


def type_mismatch(name: str, expected: str) -> SafeError:
    """Return the error for a parameter present with the wrong JSON type."""
    return SafeError(code=TYPE_MISMATCH, message=f"parameter {name} is not of type {expected}")


def no_template_match(uri: str) -> SafeError:
    """Return the error for a resource URI that matches none of the content templates."""
    return SafeError(
        code=NO_TEMPLATE_MATCH,
        message=f"no resource template matches: {uri}",
        hint="Use repo://{owner}/{repo}/contents/{path} or a refs/heads, refs/tags, sha or refs/pull variant",
    )


def upstream_status_error(*, action: str, status_code: int, body: str) -> SafeError:
    """Return the error for a non-success GitHub status; the body is surfaced verbatim."""
    return SafeError(
        code=UPSTREAM_STATUS,
        message=f"failed to {action}: {body}",
        status_code=status_code,
    )


def transport_error(action: str) -> SafeError:
    """Return the hard failure for an unreachable or timed-out GitHub API."""
    return SafeError(code=TRANSPORT, message=f"failed to {action}: GitHub API unreachable")


def serialization_error(what: str) -> SafeError:
    """Return the hard failure for a payload that could not be decoded or encoded."""
    return SafeError(code=SERIALIZATION, message=f"failed to serialize {what}")


def safe_error_to_result(err: SafeError) -> dict[str, Any]:
    """Convert a SafeError into the standard tool envelope."""
    return to_error_result(code=err.code, message=err.message, hint=err.hint)


def to_error_result(*, code: str, message: str, hint: str | None = None) -> dict[str, Any]:
    """Build a standard tool error envelope."""
    out: dict[str, Any] = {"ok": False, "code": code, "message": message}
    if hint:
        out["hint"] = hint
    return out


def user_input_error(message: str, hint: str | None = None) -> SafeError:
    """Error for invalid tool arguments or unsupported operations."""
    return SafeError(code=USER_INPUT, message=message, hint=hint)


def internal_error(message: str = "Internal error") -> dict[str, Any]:
    """Error envelope for unexpected failures."""
    return to_error_result(code=INTERNAL, message=message)
