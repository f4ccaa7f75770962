"""
Phase timing for a launcher run.

A run is a short chain of phases (preflight, prepare, supervise). Each is
wrapped in ``log_step`` so the log carries one span per phase::

    run.prepare.start   DEBUG   span_id=3fa1c2d0
    run.prepare.end     INFO    span_id=3fa1c2d0 duration_ms=4.12
    run.supervise.error ERROR   span_id=9b7e0a11 duration_ms=812.4
                                error_type=TargetExecutionFailed

Spans nest: a step opened inside another records the outer span as its
parent, and the run context carries the current span and step name for
every entry logged inside it.
"""

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from launchpad.framework.logging.context import get_context, get_logger, push_context

_timing_log = get_logger("launchpad.timing")


@dataclass
class TimingResult:
    """Span of one run phase, yielded by :func:`log_step`."""

    step: str
    parent_span_id: str | None = None
    metrics: dict[str, Any] = field(default_factory=dict)
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    status: str = "ok"
    error_info: dict[str, Any] | None = None

    @property
    def duration_ms(self) -> float:
        finished = time.perf_counter() if self.ended_at is None else self.ended_at
        return 1000.0 * (finished - self.started_at)

    def stop(self) -> "TimingResult":
        self.ended_at = self.ended_at or time.perf_counter()
        return self

    def add_metric(self, key: str, value: Any) -> "TimingResult":
        self.metrics[key] = value
        return self

    def set_error(self, error: BaseException) -> "TimingResult":
        self.status = "error"
        self.error_info = {"error_type": type(error).__name__, "error_message": str(error)}
        return self

    def to_log_dict(self) -> dict[str, Any]:
        """Fields for the phase's closing log entry."""
        entry: dict[str, Any] = {"span_id": self.span_id, "duration_ms": round(self.duration_ms, 2)}
        if self.parent_span_id:
            entry["parent_span_id"] = self.parent_span_id
        entry.update(self.metrics)
        if self.error_info is not None:
            entry.update(status=self.status, **self.error_info)
        return entry


@contextmanager
def log_step(event: str, log_start: bool = True, level: str = "info", **extra_metrics: Any) -> Iterator[TimingResult]:
    """
    Time one phase and log its end (or its error) with the span fields.

    Usage:
        with log_step("run.prepare", target=str(script)) as timer:
            vector = bind(...)
            timer.add_metric("slots", len(vector))

    Exceptions are logged at ERROR and re-raised unchanged. The run
    context is restored on exit, so values bound inside the block do not
    outlive it.
    """
    timer = TimingResult(step=event, parent_span_id=get_context().span_id, metrics=dict(extra_metrics))
    token = push_context(span_id=timer.span_id, parent_span_id=timer.parent_span_id, step=event)
    if log_start:
        _timing_log.debug(f"{event}.start", span_id=timer.span_id, **extra_metrics)

    try:
        yield timer
    except Exception as exc:
        _timing_log.error(f"{event}.error", **timer.stop().set_error(exc).to_log_dict())
        raise
    finally:
        timer.stop()
        token.restore()

    getattr(_timing_log, level)(f"{event}.end", **timer.to_log_dict())
