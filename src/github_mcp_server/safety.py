"""Redaction of credential-like values.

The server holds a personal access token and forwards caller text to GitHub. Anything that
ends up in logs or command log events passes through `redact_text` so a token pasted into
an argument or echoed back in an error body is never written out.
"""

from __future__ import annotations

import logging
import re

_TOKEN_PREFIXES = (
    "ghp_",
    "gho_",
    "ghu_",
    "ghs_",
    "ghr_",
    "github_pat_",
)

_JWT_LIKE_RE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")
_EMBEDDED_TOKEN_RE = re.compile(r"\b(?:gh[pousr]_[A-Za-z0-9]{16,}|github_pat_[A-Za-z0-9_]{16,})\b")
_BEARER_RE = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._~+/=-]+")

REDACTED = "<redacted>"


def looks_like_secret_value(value: str) -> bool:
    """Return True if the value looks like a credential.

    Matching rules:
    - known GitHub token prefix at start after trimming leading whitespace
    - bearer prefix treated case-insensitively
    - JWT-looking value treated as secret-like (conservative)
    """
    if not isinstance(value, str):
        return False
    trimmed = value.lstrip()
    lowered = trimmed.lower()
    if lowered.startswith("bearer "):
        return True
    if lowered.startswith(_TOKEN_PREFIXES):
        return True
    if len(trimmed) >= 40 and _JWT_LIKE_RE.match(trimmed):
        return True
    return False


def redact_text(text: str) -> str:
    """Return a representation of `text` safe for logs."""
    if not isinstance(text, str):
        return "<non-string>"
    if looks_like_secret_value(text):
        return REDACTED
    text = _BEARER_RE.sub(REDACTED, text)
    return _EMBEDDED_TOKEN_RE.sub(REDACTED, text)


class RedactingFilter(logging.Filter):
    """Logging filter that redacts credential-like substrings from records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = record.getMessage()
            record.args = None
        if isinstance(record.msg, str):
            record.msg = redact_text(record.msg)
        return True
