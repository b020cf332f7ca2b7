"""Per-call audit trail.

Each tool call produces one JSONL event with one of three outcomes:

- ``succeeded``: the operation returned a result.
- ``denied``: the call was rejected before reaching GitHub (bad arguments,
  unknown tool, missing configuration).
- ``failed``: GitHub or the server itself reported an error.

Events carry the tool name and a coarse target, never the credential.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from .errors import CALLER_ERROR_CODES, SafeError

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
DENIED = "denied"
FAILED = "failed"

OUTCOMES = frozenset({SUCCEEDED, DENIED, FAILED})


def outcome_for_error(err: SafeError) -> str:
    """Classify a failed call: caller mistakes are denials, everything else a failure."""
    return DENIED if err.code in CALLER_ERROR_CODES else FAILED


def new_correlation_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class AuditEvent:
    timestamp: str
    correlation_id: str
    tool: str
    target: str
    outcome: str
    reason: str | None = None
    duration_ms: int | None = None

    def to_json(self) -> str:
        # Optional fields are omitted rather than emitted as null.
        fields = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(fields, sort_keys=True, separators=(",", ":"))


def build_event(
    *,
    correlation_id: str,
    tool: str,
    target: str,
    outcome: str,
    reason: str | None = None,
    duration_ms: int | None = None,
) -> AuditEvent:
    """Stamp a new event with the current UTC time.

    Raises ValueError for an outcome outside ``OUTCOMES``.
    """
    if outcome not in OUTCOMES:
        raise ValueError(f"Unknown audit outcome: {outcome!r}")
    stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return AuditEvent(stamp, correlation_id, tool, target, outcome, reason, duration_ms)


class AuditLogger:
    """Emits events to stderr, plus an append-only file when ``sink_path`` is set."""

    def __init__(self, *, sink_path: Path | None) -> None:
        self._sink_path = sink_path

    def write_event(self, event: AuditEvent) -> None:
        line = event.to_json()
        sys.stderr.write(line + "\n")
        if self._sink_path is not None:
            self._append(line)

    def _append(self, line: str) -> None:
        try:
            self._sink_path.parent.mkdir(parents=True, exist_ok=True)
            with self._sink_path.open("a", encoding="utf-8") as sink:
                sink.write(f"{line}\n")
        except OSError as exc:
            # The tool call still completes; only the file copy is lost.
            logger.warning("Audit file sink write failed: %s", exc.strerror)

    def measure_start(self) -> float:
        return time.monotonic()

    def measure_duration_ms(self, start: float) -> int:
        return int((time.monotonic() - start) * 1000)
