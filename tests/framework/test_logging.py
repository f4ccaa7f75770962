"""Tests for run-context logging helpers."""

import pytest

from launchpad.framework.logging import (
    bind_context,
    clear_context,
    get_context,
    log_step,
    push_context,
    set_context,
)
from launchpad.framework.logging.context import add_context_processor


@pytest.fixture(autouse=True)
def fresh_context():
    clear_context()
    yield
    clear_context()


class TestContext:
    def test_set_replaces(self):
        set_context(run_id="r1", script_name="a")
        set_context(run_id="r2")
        assert get_context().to_dict() == {"run_id": "r2"}

    def test_bind_merges_and_ignores_unknown(self):
        set_context(run_id="r1")
        bind_context(script_name="Get printers", colour="red")
        assert get_context().to_dict() == {"run_id": "r1", "script_name": "Get printers"}

    def test_push_restores(self):
        set_context(run_id="r1")
        token = push_context(step="bind")
        assert get_context().step == "bind"
        token.restore()
        assert get_context().step is None

    def test_processor_does_not_override_event_fields(self):
        set_context(run_id="r1", script_name="ctx")
        event = add_context_processor(None, "info", {"event": "x", "script_name": "explicit"})
        assert event == {"event": "x", "script_name": "explicit", "run_id": "r1"}


class TestLogStep:
    def test_records_metrics_and_restores_context(self):
        set_context(run_id="r1")
        with log_step("run.prepare", target="t.py") as timer:
            assert get_context().step == "run.prepare"
            assert get_context().span_id == timer.span_id
            timer.add_metric("parameters", 5)
        assert get_context().step is None
        assert timer.to_log_dict()["parameters"] == 5
        assert timer.ended_at is not None

    def test_error_propagates(self):
        with pytest.raises(ValueError):
            with log_step("run.prepare") as timer:
                raise ValueError("bad")
        assert timer.status == "error"
        assert timer.error_info == {"error_type": "ValueError", "error_message": "bad"}
        assert get_context().step is None

    def test_nested_spans(self):
        with log_step("outer") as outer:
            with log_step("inner") as inner:
                pass
        assert inner.parent_span_id == outer.span_id
