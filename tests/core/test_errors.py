"""Tests for the launchpad error hierarchy."""

import pytest

from launchpad.core.errors import (
    BlockedLaunch,
    ConfigError,
    ContractError,
    DeliveryError,
    ErrorCategory,
    InputNotFoundError,
    InvalidInputExtensionError,
    InvalidParameterFile,
    LaunchError,
    LaunchpadError,
    MissingScriptName,
    PreflightError,
    TargetExecutionFailed,
    TargetNotExecutableShape,
    TargetNotFound,
    UnknownParameter,
    categorize_error,
    is_retryable,
)


class TestLaunchpadError:
    def test_defaults(self):
        err = LaunchpadError("boom")
        assert err.message == "boom"
        assert err.category == ErrorCategory.INTERNAL
        assert err.retryable is False
        assert str(err) == "boom"

    def test_with_context_known_and_metadata(self):
        err = LaunchpadError("x").with_context(script_path="a.py", host="build-01")
        assert err.context.script_path == "a.py"
        assert err.context.metadata["host"] == "build-01"

    def test_cause_is_chained(self):
        cause = OSError("disk")
        err = LaunchpadError("wrapped", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "disk"

    def test_to_dict(self):
        err = InvalidParameterFile("bad json", parameter_file="p.json")
        d = err.to_dict()
        assert d["error_type"] == "InvalidParameterFile"
        assert d["category"] == "PARSE"
        assert d["context"]["parameter_file"] == "p.json"

    def test_repr(self):
        assert "category=CONTRACT" in repr(MissingScriptName())


class TestHierarchy:
    @pytest.mark.parametrize(
        "error, base, category",
        [
            (InputNotFoundError("x.py", role="target script"), PreflightError, ErrorCategory.PREFLIGHT),
            (InvalidInputExtensionError("x.txt", expected=[".py"]), PreflightError, ErrorCategory.PREFLIGHT),
            (TargetNotFound("x.py"), PreflightError, ErrorCategory.PREFLIGHT),
            (TargetNotExecutableShape("x.py", "no main"), LaunchpadError, ErrorCategory.SIGNATURE),
            (UnknownParameter("kiwi"), ContractError, ErrorCategory.CONTRACT),
            (MissingScriptName(), ContractError, ErrorCategory.CONTRACT),
            (BlockedLaunch(["A"]), LaunchError, ErrorCategory.LAUNCH),
            (TargetExecutionFailed("boom"), LaunchpadError, ErrorCategory.RUNTIME),
            (ConfigError("bad"), LaunchpadError, ErrorCategory.CONFIG),
            (DeliveryError("smtp down"), LaunchpadError, ErrorCategory.DELIVERY),
        ],
    )
    def test_category(self, error, base, category):
        assert isinstance(error, base)
        assert error.category == category


class TestSpecificErrors:
    def test_unknown_parameter_names_parameter_and_target(self):
        err = UnknownParameter("UnknownParameter", target_path="get_printers.py")
        assert err.parameter_name == "UnknownParameter"
        assert "UnknownParameter" in err.message
        assert "get_printers.py" in err.message
        assert err.context.parameter == "UnknownParameter"

    def test_missing_script_name_message(self):
        assert "ScriptName" in MissingScriptName().message

    def test_blocked_launch_lists_missing(self):
        err = BlockedLaunch(["QueueName", "Host"], identity="Drain")
        assert err.missing == ["QueueName", "Host"]
        assert "missing mandatory parameter" in err.message
        assert "QueueName, Host" in err.message
        assert err.context.script_name == "Drain"

    def test_target_execution_failed(self):
        err = TargetExecutionFailed("jammed", error_type="ValueError", exit_code=1)
        assert err.reason == "jammed"
        assert err.message == "Target execution failed: jammed"
        d = err.to_dict()
        assert d["reason"] == "jammed"
        assert d["target_error_type"] == "ValueError"
        assert d["exit_code"] == 1

    def test_extension_error_lists_expected(self):
        err = InvalidInputExtensionError("p.txt", expected=[".json", ".yaml"], role="parameter file")
        assert ".json, .yaml" in err.message
        assert "parameter file" in err.message


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(TargetExecutionFailed("x")) is True
        assert is_retryable(DeliveryError("x")) is True
        assert is_retryable(UnknownParameter("x")) is False
        assert is_retryable(RuntimeError("x")) is False

    def test_categorize_error(self):
        assert categorize_error(MissingScriptName()) == ErrorCategory.CONTRACT
        assert categorize_error(FileNotFoundError()) == ErrorCategory.PREFLIGHT
        assert categorize_error(TypeError()) == ErrorCategory.CONTRACT
        assert categorize_error(ConnectionError()) == ErrorCategory.DELIVERY
        assert categorize_error(RuntimeError()) == ErrorCategory.UNKNOWN
