"""Command logging.

With command logging enabled, every tool call and resource read produces exactly one JSON
line on stderr. When `GITHUB_MCP_AUDIT_LOG_PATH` is set the same line is appended to that
file, which is rotated by size. Events never contain argument values, only argument names,
and reasons are passed through redaction first.
"""

from __future__ import annotations

import json
import sys
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .safety import redact_text


def new_correlation_id() -> str:
    """Generate a random correlation id for traceability."""
    return uuid.uuid4().hex


def _now_rfc3339() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """A single command log event."""

    timestamp: str
    correlation_id: str
    operation: str
    target_repo: str
    outcome: str
    reason: str | None
    duration_ms: int | None
    argument_names: tuple[str, ...] = field(default_factory=tuple)


class AuditLogger:
    """Writes events as JSONL to stderr (when enabled) and optionally to a file."""

    def __init__(
        self,
        *,
        sink_path: Path | None,
        enabled: bool = True,
        max_bytes: int = 5 * 1024 * 1024,
        max_backups: int = 2,
    ) -> None:
        """Create an audit logger.

        Rotation is best-effort; failures writing the optional file sink must not
        break tool execution.
        """
        self._sink_path = sink_path
        self._enabled = enabled
        self._max_bytes = max_bytes
        self._max_backups = max_backups

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _rotate_if_needed(self) -> None:
        if self._sink_path is None:
            return
        try:
            if not self._sink_path.exists():
                return
            if self._sink_path.stat().st_size < self._max_bytes:
                return

            # log -> log.1 -> log.2 ...
            if self._max_backups > 0:
                Path(f"{self._sink_path}.{self._max_backups}").unlink(missing_ok=True)
                for i in range(self._max_backups, 1, -1):
                    src = Path(f"{self._sink_path}.{i - 1}")
                    if src.exists():
                        src.replace(Path(f"{self._sink_path}.{i}"))
                self._sink_path.replace(Path(f"{self._sink_path}.1"))
            else:
                self._sink_path.write_text("", encoding="utf-8")
        except OSError:  # pragma: no cover
            return

    def format_event(self, event: AuditEvent) -> str:
        """Serialize an event to a single compact JSON line."""
        payload: dict[str, object] = {
            "timestamp": event.timestamp,
            "correlation_id": event.correlation_id,
            "operation": event.operation,
            "target_repo": event.target_repo,
            "outcome": event.outcome,
        }
        if event.reason is not None:
            payload["reason"] = redact_text(event.reason)
        if event.duration_ms is not None:
            payload["duration_ms"] = event.duration_ms
        if event.argument_names:
            payload["argument_names"] = list(event.argument_names)
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def write_event(self, event: AuditEvent) -> None:
        """Write an event to stderr and optionally to a JSONL file."""
        if not self._enabled and self._sink_path is None:
            return
        line = self.format_event(event)
        if self._enabled:
            print(line, file=sys.stderr)
        if self._sink_path is not None:
            try:
                self._sink_path.parent.mkdir(parents=True, exist_ok=True)
                self._rotate_if_needed()
                with self._sink_path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
            except OSError:  # pragma: no cover
                return

    def measure_start(self) -> float:
        """Return a monotonic start timestamp for duration measurement."""
        return time.monotonic()

    def measure_duration_ms(self, start: float) -> int:
        """Convert a monotonic start timestamp into elapsed milliseconds."""
        return int((time.monotonic() - start) * 1000)


def build_event(
    *,
    correlation_id: str,
    operation: str,
    target_repo: str,
    outcome: str,
    reason: str | None = None,
    duration_ms: int | None = None,
    argument_names: tuple[str, ...] = (),
) -> AuditEvent:
    """Construct an audit event."""
    return AuditEvent(
        timestamp=_now_rfc3339(),
        correlation_id=correlation_id,
        operation=operation,
        target_repo=target_repo,
        outcome=outcome,
        reason=reason,
        duration_ms=duration_ms,
        argument_names=argument_names,
    )
