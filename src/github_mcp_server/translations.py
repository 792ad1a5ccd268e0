"""Overrides for user-facing tool and resource text.

Every description and title goes through a `Translator` keyed by an upper-case name such as
`TOOL_GET_ISSUE_DESCRIPTION`. A value is looked up in this order:

1. the environment variable `GITHUB_MCP_<KEY>`
2. `github-mcp-server.json` in the working directory
3. the built-in default

`--export-translations` writes every key seen during startup back to that JSON file so
it can be edited.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable

from .errors import SafeError

logger = logging.getLogger(__name__)

TRANSLATIONS_FILE_NAME = "github-mcp-server.json"
ENV_PREFIX = "GITHUB_MCP_"

TranslateFunc = Callable[[str, str], str]


def null_translate(key: str, default: str) -> str:
    """Return the default unchanged; used by tests and the self-test."""
    return default


class Translator:
    """Resolve and remember translated strings."""

    def __init__(self, *, file_path: Path | None = None, environ: dict[str, str] | None = None) -> None:
        self._file_path = file_path if file_path is not None else Path.cwd() / TRANSLATIONS_FILE_NAME
        self._environ = environ if environ is not None else dict(os.environ)
        self._overrides = self._load_file(self._file_path)
        self._seen: dict[str, str] = {}

    @staticmethod
    def _load_file(path: Path) -> dict[str, str]:
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read translations file %s: %s", path.name, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring translations file %s: top level is not an object", path.name)
            return {}
        return {str(k).upper(): v for k, v in data.items() if isinstance(v, str)}

    def __call__(self, key: str, default: str) -> str:
        key = key.upper()
        if key in self._seen:
            return self._seen[key]
        value = self._environ.get(ENV_PREFIX + key)
        if value is None:
            value = self._overrides.get(key, default)
        self._seen[key] = value
        return value

    @property
    def keys(self) -> dict[str, str]:
        """Return a copy of every key resolved so far."""
        return dict(self._seen)

    def export(self) -> Path:
        """Write the resolved keys to the translations file and return its path."""
        try:
            self._file_path.write_text(json.dumps(self._seen, indent=2, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise SafeError(code="Config", message="Could not write translations file") from exc
        logger.info("Exported %s translation keys to %s", len(self._seen), self._file_path.name)
        return self._file_path
