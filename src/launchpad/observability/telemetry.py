"""Run telemetry: the start, outcome and end entries of one launcher run.

Each run emits exactly three lifecycle entries, whatever happens in
between::

    run.start    identity=Get printers  run_id=...
    run.outcome  identity=Get printers  success=false  message=...
    run.end      identity=Get printers  duration_seconds=1.84

A second emission of the same entry is refused with a warning, so a
failure handler that runs after a partial success cannot double-report.

Also owns the on-disk location of per-run log files.
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Any

from launchpad.diagnostics.artifacts import run_stamp, safe_label
from launchpad.framework.logging import get_logger

logger = get_logger("launchpad.telemetry")

START = "start"
OUTCOME = "outcome"
END = "end"


def new_run_id() -> str:
    return f"{run_stamp()}-{uuid.uuid4().hex[:6]}"


def log_file_path(log_dir: Path, label: str, stamp: str | None = None) -> Path:
    """``{log_dir}/{stamp}_{label}.log`` for one run."""
    return Path(log_dir).expanduser() / f"{stamp or run_stamp()}_{safe_label(label)}.log"


class RunTelemetry:
    """Emits the lifecycle entries of one run."""

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id or new_run_id()
        self._emitted: set[str] = set()
        self._started: float | None = None
        self.success: bool | None = None

    @property
    def emitted(self) -> frozenset[str]:
        return frozenset(self._emitted)

    def _claim(self, entry: str, identity: str) -> bool:
        if entry in self._emitted:
            logger.warning("run.duplicate_entry", entry=entry, identity=identity, run_id=self.run_id)
            return False
        self._emitted.add(entry)
        return True

    def emit_start(self, identity: str, **fields: Any) -> None:
        if not self._claim(START, identity):
            return
        self._started = time.perf_counter()
        logger.info("run.start", identity=identity, run_id=self.run_id, **fields)

    def emit_outcome(self, identity: str, message: str, *, success: bool = False, **fields: Any) -> None:
        if not self._claim(OUTCOME, identity):
            return
        self.success = success
        log = logger.info if success else logger.error
        log("run.outcome", identity=identity, run_id=self.run_id, success=success, message=message, **fields)

    def emit_end(self, identity: str) -> None:
        if not self._claim(END, identity):
            return
        duration = None
        if self._started is not None:
            duration = round(time.perf_counter() - self._started, 3)
        logger.info(
            "run.end",
            identity=identity,
            run_id=self.run_id,
            success=self.success,
            duration_seconds=duration,
        )
