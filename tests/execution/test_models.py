"""Tests for job states and transitions."""

import pytest

from launchpad.execution import (
    JOB_VALID_TRANSITIONS,
    InvalidTransitionError,
    JobRecord,
    JobState,
    validate_job_transition,
)


class TestTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            (JobState.NOT_STARTED, JobState.RUNNING),
            (JobState.NOT_STARTED, JobState.BLOCKED),
            (JobState.NOT_STARTED, JobState.FAILED),
            (JobState.BLOCKED, JobState.RUNNING),
            (JobState.BLOCKED, JobState.FAILED),
            (JobState.RUNNING, JobState.SUCCEEDED),
            (JobState.RUNNING, JobState.FAILED),
        ],
    )
    def test_allowed(self, current, target):
        validate_job_transition(current, target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (JobState.SUCCEEDED, JobState.RUNNING),
            (JobState.FAILED, JobState.SUCCEEDED),
            (JobState.RUNNING, JobState.BLOCKED),
            (JobState.NOT_STARTED, JobState.SUCCEEDED),
            (JobState.BLOCKED, JobState.SUCCEEDED),
        ],
    )
    def test_rejected(self, current, target):
        with pytest.raises(InvalidTransitionError):
            validate_job_transition(current, target)

    def test_terminal_states_have_no_exits(self):
        for state in JobState:
            assert (not JOB_VALID_TRANSITIONS[state]) == state.is_terminal


class TestJobRecord:
    def test_lifecycle_timestamps(self):
        record = JobRecord(identity="Get printers", ref="job-1")
        assert record.duration_seconds is None
        record.transition_to(JobState.RUNNING)
        assert record.started_at is not None
        record.transition_to(JobState.SUCCEEDED)
        assert record.finished_at is not None
        assert record.duration_seconds >= 0

    def test_same_state_is_noop(self):
        record = JobRecord(identity="x")
        record.transition_to(JobState.RUNNING)
        record.transition_to(JobState.RUNNING)
        assert record.state == JobState.RUNNING

    def test_illegal_transition_leaves_state(self):
        record = JobRecord(identity="x", state=JobState.SUCCEEDED)
        with pytest.raises(InvalidTransitionError):
            record.transition_to(JobState.FAILED)
        assert record.state == JobState.SUCCEEDED

    def test_to_dict(self):
        record = JobRecord(identity="x", ref="job-1")
        record.missing_parameters = ["PrinterName"]
        record.transition_to(JobState.BLOCKED)
        d = record.to_dict()
        assert d["state"] == "blocked"
        assert d["missing_parameters"] == ["PrinterName"]
        assert "finished_at" not in d
