"""Launching and supervising a target in an isolated worker process."""

from launchpad.execution.models import (
    JOB_VALID_TRANSITIONS,
    InvalidTransitionError,
    JobRecord,
    JobState,
    LaunchAcknowledgement,
    validate_job_transition,
)
from launchpad.execution.supervisor import JobHandle, JobSupervisor

__all__ = [
    "JOB_VALID_TRANSITIONS",
    "InvalidTransitionError",
    "JobHandle",
    "JobRecord",
    "JobState",
    "JobSupervisor",
    "LaunchAcknowledgement",
    "validate_job_transition",
]
