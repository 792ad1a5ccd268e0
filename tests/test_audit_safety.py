"""Command log events and credential redaction."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from github_mcp_server.audit import AuditLogger, build_event
from github_mcp_server.safety import REDACTED, RedactingFilter, looks_like_secret_value, redact_text

_TOKEN = "ghp_" + "a1B2c3D4e5F6g7H8i9J0k1L2"


def _event(**overrides: object):
    values: dict = {
        "correlation_id": "c1",
        "operation": "get_issue",
        "target_repo": "octo/hello",
        "outcome": "succeeded",
        "reason": None,
        "duration_ms": 3,
    }
    values.update(overrides)
    return build_event(**values)


@pytest.mark.parametrize("value", [_TOKEN, "github_pat_abc", "Bearer abc", "  ghs_xyz"])
def test_secret_like_values(value: str) -> None:
    assert looks_like_secret_value(value)


def test_plain_values_are_not_secret_like() -> None:
    assert not looks_like_secret_value("octo/hello")
    assert not looks_like_secret_value("fix the bug")


def test_redact_text_removes_embedded_tokens() -> None:
    out = redact_text(f"request failed with token {_TOKEN} attached")
    assert _TOKEN not in out
    assert REDACTED in out
    assert redact_text("Authorization: Bearer abc.def.ghi") == f"Authorization: {REDACTED}"
    assert redact_text("nothing to hide") == "nothing to hide"


def test_redacting_filter_rewrites_records() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "token=%s", (_TOKEN,), None)
    assert RedactingFilter().filter(record)
    assert _TOKEN not in record.getMessage()


def test_format_event_has_names_not_values() -> None:
    line = AuditLogger(sink_path=None).format_event(
        _event(outcome="failed", reason=f"failed with {_TOKEN}", argument_names=("issue_number", "owner", "repo"))
    )
    payload = json.loads(line)

    assert payload["operation"] == "get_issue"
    assert payload["outcome"] == "failed"
    assert payload["argument_names"] == ["issue_number", "owner", "repo"]
    assert _TOKEN not in payload["reason"]


def test_disabled_logger_writes_nothing(capsys: pytest.CaptureFixture[str]) -> None:
    AuditLogger(sink_path=None, enabled=False).write_event(_event())
    assert capsys.readouterr().err == ""


def test_enabled_logger_writes_one_line_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    AuditLogger(sink_path=None, enabled=True).write_event(_event())
    lines = capsys.readouterr().err.strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["correlation_id"] == "c1"


def test_file_sink_rotates_when_exceeding_max_bytes(tmp_path: Path) -> None:
    sink = tmp_path / "audit.jsonl"
    logger = AuditLogger(sink_path=sink, enabled=False, max_bytes=1, max_backups=2)

    logger.write_event(_event(correlation_id="c1"))
    logger.write_event(_event(correlation_id="c2"))

    assert sink.exists()
    assert (tmp_path / "audit.jsonl.1").exists()
    assert json.loads(sink.read_text(encoding="utf-8").strip())["correlation_id"] == "c2"
