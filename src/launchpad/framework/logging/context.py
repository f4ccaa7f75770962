"""
Run context for log entries.

One launcher run logs from the runner, the binder, the supervisor's
reader tasks and the failure path. The run's identifiers live in a
``ContextVar`` and a structlog processor copies them into every entry,
so none of those call sites pass them around::

    run.start   run_id=20261018T091500Z-4f2a1c target=get_printers.py
    job.running run_id=... script_name="Get printers" job_ref=job-8c1d...

The context var holds an immutable :class:`LogContext`; every update
sets a new value, which keeps reader tasks created by the supervisor on
the snapshot they were started with.
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, fields, replace
from typing import Any

import structlog


@dataclass(frozen=True)
class LogContext:
    """
    Identifiers attached to every entry of a run.

        run_id:         launcher run, shared by its log file and artifacts
        script_name:    identity from the parameter file's ``ScriptName``
        target:         path of the target script
        job_ref:        supervised job, once launched
        step:           run phase opened by ``log_step``
        span_id:        current ``log_step`` span
        parent_span_id: enclosing span, for nested steps
    """

    run_id: str | None = None
    script_name: str | None = None
    target: str | None = None
    job_ref: str | None = None
    step: str | None = None
    span_id: str | None = None
    parent_span_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def merge(self, **values: Any) -> "LogContext":
        """Copy with the known, non-None *values* applied."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in values.items() if k in known and v is not None})


_EMPTY = LogContext()
_current: ContextVar[LogContext] = ContextVar("launchpad_log_context", default=_EMPTY)


def get_context() -> LogContext:
    return _current.get()


def set_context(**values: Any) -> LogContext:
    """Replace the run context with *values*."""
    ctx = _EMPTY.merge(**values)
    _current.set(ctx)
    return ctx


def bind_context(**values: Any) -> LogContext:
    """Add *values* to the run context for the rest of the current scope."""
    ctx = get_context().merge(**values)
    _current.set(ctx)
    return ctx


def clear_context() -> None:
    _current.set(_EMPTY)


class ContextToken:
    """Undo handle returned by :func:`push_context`."""

    def __init__(self, token: Token[LogContext]) -> None:
        self._token = token

    def restore(self) -> None:
        _current.reset(self._token)


def push_context(**values: Any) -> ContextToken:
    """
    Like ``bind_context`` but returns a token to undo the change.

        token = push_context(run_id=run_id, target=str(script))
        try:
            ...
        finally:
            token.restore()
    """
    return ContextToken(_current.set(get_context().merge(**values)))


def add_context_processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor: fill in run context fields the entry did not set."""
    for key, value in get_context().to_dict().items():
        event_dict.setdefault(key, value)
    return event_dict


def get_logger(name: str | None = None) -> Any:
    """structlog logger whose entries carry the run context once logging is configured."""
    return structlog.get_logger(name)
