"""Translation overrides and export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from github_mcp_server.errors import SafeError
from github_mcp_server.translations import Translator, null_translate


def test_null_translate_returns_default() -> None:
    assert null_translate("ANY_KEY", "fallback") == "fallback"


def test_lookup_order_env_then_file_then_default(tmp_path: Path) -> None:
    path = tmp_path / "github-mcp-server.json"
    path.write_text(json.dumps({"TOOL_A_DESCRIPTION": "from file", "tool_b_description": "lower"}), encoding="utf-8")

    t = Translator(file_path=path, environ={"GITHUB_MCP_TOOL_A_DESCRIPTION": "from env"})

    assert t("TOOL_A_DESCRIPTION", "default") == "from env"
    assert t("tool_b_description", "default") == "lower"
    assert t("TOOL_C_DESCRIPTION", "default") == "default"


def test_first_resolution_is_remembered(tmp_path: Path) -> None:
    t = Translator(file_path=tmp_path / "missing.json", environ={})
    assert t("KEY", "one") == "one"
    assert t("KEY", "two") == "one"


def test_bad_file_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "github-mcp-server.json"
    path.write_text("{not json", encoding="utf-8")

    t = Translator(file_path=path, environ={})
    assert t("KEY", "default") == "default"


def test_export_writes_every_seen_key(tmp_path: Path) -> None:
    path = tmp_path / "github-mcp-server.json"
    t = Translator(file_path=path, environ={})
    t("TOOL_X_DESCRIPTION", "x")
    t("tool_y_user_title", "y")

    assert t.export() == path
    assert json.loads(path.read_text(encoding="utf-8")) == {"TOOL_X_DESCRIPTION": "x", "TOOL_Y_USER_TITLE": "y"}


def test_export_failure_is_config_error(tmp_path: Path) -> None:
    t = Translator(file_path=tmp_path / "no-such-dir" / "out.json", environ={})
    t("KEY", "v")

    with pytest.raises(SafeError) as exc:
        t.export()
    assert exc.value.code == "Config"
