"""Job supervision models.

Defines the job record the supervisor mutates while it observes a
launched target, and the transitions it may take.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


class InvalidTransitionError(ValueError):
    """Raised when an illegal job state transition is attempted.

    Architecture Decision:
        Transition validation is strict. If you discover a
        legitimate transition that is blocked, add it to
        JOB_VALID_TRANSITIONS explicitly; never remove the guard.
    """

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid JobState transition: {current} → {target}")


class JobState(str, Enum):
    """State of a launched target.

    Valid transition graph::

        NOT_STARTED → RUNNING | BLOCKED | FAILED
        BLOCKED     → RUNNING | FAILED
        RUNNING     → SUCCEEDED | FAILED
        SUCCEEDED   → (terminal)
        FAILED      → (terminal)

    ``NOT_STARTED → FAILED`` covers a child that cannot be spawned or a
    target that faults while it is being loaded.
    """

    NOT_STARTED = "not_started"
    BLOCKED = "blocked"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


JOB_VALID_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.NOT_STARTED: frozenset({
        JobState.RUNNING,
        JobState.BLOCKED,
        JobState.FAILED,
    }),
    JobState.BLOCKED: frozenset({
        JobState.RUNNING,
        JobState.FAILED,
    }),
    JobState.RUNNING: frozenset({
        JobState.SUCCEEDED,
        JobState.FAILED,
    }),
    JobState.SUCCEEDED: frozenset(),  # terminal
    JobState.FAILED: frozenset(),  # terminal
}


def validate_job_transition(current: JobState, target: JobState) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal.

    Example:
        >>> validate_job_transition(JobState.RUNNING, JobState.SUCCEEDED)
        >>> validate_job_transition(JobState.SUCCEEDED, JobState.RUNNING)
        Traceback (most recent call last):
        ...
        InvalidTransitionError: Invalid JobState transition: succeeded → running
    """
    allowed = JOB_VALID_TRANSITIONS.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(current.value, target.value)


class LaunchAcknowledgement(str, Enum):
    """Outcome of the post-launch grace period."""

    BLOCKED = "blocked"
    PROCEEDING = "proceeding"


@dataclass
class JobRecord:
    """Supervisor's view of one launched target.

    Mutated only by the supervisor, through :meth:`transition_to`.
    """

    identity: str
    ref: str = ""
    state: JobState = JobState.NOT_STARTED
    result: Any = None
    failure_reason: str | None = None
    failure_type: str | None = None
    failure_traceback: str | None = None
    missing_parameters: list[str] = field(default_factory=list)
    exit_code: int | None = None
    log_lines: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def transition_to(self, target: JobState) -> None:
        """Move to *target*, enforcing ``JOB_VALID_TRANSITIONS``."""
        if target == self.state:
            return
        validate_job_transition(self.state, target)
        self.state = target
        if target == JobState.RUNNING and self.started_at is None:
            self.started_at = utcnow()
        if target.is_terminal:
            self.finished_at = utcnow()

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "identity": self.identity,
            "ref": self.ref,
            "state": self.state.value,
        }
        if self.failure_reason:
            d["failure_reason"] = self.failure_reason
        if self.missing_parameters:
            d["missing_parameters"] = list(self.missing_parameters)
        if self.exit_code is not None:
            d["exit_code"] = self.exit_code
        if self.started_at:
            d["started_at"] = self.started_at.isoformat()
        if self.finished_at:
            d["finished_at"] = self.finished_at.isoformat()
        return d


# Worker protocol: one JSON object per stdout line, keyed by "event".
EVENT_BLOCKED = "blocked"
EVENT_RUNNING = "running"
EVENT_SUCCEEDED = "succeeded"
EVENT_FAILED = "failed"
