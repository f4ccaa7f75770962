"""End-to-end tests for the run orchestration."""

import json
from unittest.mock import MagicMock

import pytest

from launchpad.core.errors import (
    BlockedLaunch,
    InputNotFoundError,
    InvalidInputExtensionError,
    InvalidParameterFile,
    MissingScriptName,
    TargetExecutionFailed,
    TargetNotExecutableShape,
    UnknownParameter,
)
from launchpad.diagnostics import ArtifactStore, DiagnosticArtifact
from launchpad.execution import JobState, JobSupervisor
from launchpad.framework.alerts import AlertPriority, DeliveryResult, Notifier
from launchpad.observability import RunTelemetry
from launchpad.runner import (
    EXIT_FAILURE,
    EXIT_SUCCESS,
    LaunchRunner,
    RunRequest,
    check_inputs,
    inspect_run,
)

PRINTER_PARAMS = {
    "PrinterColor": "red",
    "PrinterName": "MyCustomPrinter",
    "ScriptName": "Get printers",
}


@pytest.fixture
def notifier() -> MagicMock:
    mock = MagicMock(spec=Notifier)
    mock.notify.return_value = [DeliveryResult.ok("mock")]
    return mock


@pytest.fixture
def telemetry() -> RunTelemetry:
    return RunTelemetry(run_id="test-run")


@pytest.fixture
def runner(settings, notifier, telemetry) -> LaunchRunner:
    return LaunchRunner(settings, notifier=notifier, telemetry=telemetry)


def _artifacts(settings, suffix: str) -> list:
    return sorted(p for p in settings.artifact_dir.glob("*") if p.name.endswith(suffix))


# ── Pre-flight ───────────────────────────────────────────────────────────


class TestCheckInputs:
    def test_valid(self, targets, write_params):
        params = write_params({"ScriptName": "x"})
        assert check_inputs(targets / "get_printers.py", params) == (targets / "get_printers.py", params)

    def test_missing_script(self, tmp_path, write_params):
        with pytest.raises(InputNotFoundError, match="target script"):
            check_inputs(tmp_path / "nope.py", write_params({}))

    def test_wrong_parameter_extension(self, targets, write_params):
        with pytest.raises(InvalidInputExtensionError, match="parameter file"):
            check_inputs(targets / "get_printers.py", write_params("{}", "params.txt"))

    def test_wrong_script_extension(self, tmp_path, write_params):
        script = tmp_path / "job.ps1"
        script.write_text("param()")
        with pytest.raises(InvalidInputExtensionError, match="target script"):
            check_inputs(script, write_params({}))


# ── Scenarios ────────────────────────────────────────────────────────────


@pytest.mark.integration
class TestSuccessfulRun:
    @pytest.mark.asyncio
    async def test_printer_scenario(self, runner, settings, targets, write_params, notifier, telemetry):
        params = write_params(PRINTER_PARAMS, "get_printers.json")

        outcome = await runner.run(RunRequest(targets / "get_printers.py", params))

        assert outcome.exit_code == EXIT_SUCCESS
        assert outcome.success
        assert outcome.identity == "Get printers"
        assert outcome.run_label == "get_printers"
        assert outcome.vector.values == ["MyCustomPrinter", "red", "Get printers", "", "A4"]
        assert outcome.output == ["MyCustomPrinter", "red", "Get printers", "", "A4"]
        assert outcome.job.state == JobState.SUCCEEDED
        assert outcome.diagnostic is None
        notifier.notify.assert_not_called()
        assert telemetry.emitted == {"start", "outcome", "end"}
        assert telemetry.success is True

        copies = _artifacts(settings, "_get_printers.json")
        assert copies == [outcome.parameter_copy]
        assert copies[0].read_bytes() == params.read_bytes()
        assert _artifacts(settings, ".diagnostic.json") == []

    @pytest.mark.asyncio
    async def test_run_name_and_control_flags(self, runner, settings, targets, write_params):
        params = write_params({"ScriptName": "Flags", "Name": "n"})
        request = RunRequest(targets / "control_target.py", params, run_name="nightly", verbose=True)

        outcome = await runner.run(request)

        assert outcome.output == {"name": "n", "verbose": True, "debug": False}
        assert outcome.parameter_copy.name.endswith("_nightly_params.json")

    @pytest.mark.asyncio
    async def test_to_dict_is_json_safe(self, runner, targets, write_params):
        outcome = await runner.run(RunRequest(targets / "get_printers.py", write_params(PRINTER_PARAMS)))
        payload = json.loads(json.dumps(outcome.to_dict()))
        assert payload["success"] is True
        assert payload["output"][4] == "A4"
        assert payload["job"]["state"] == "succeeded"


class TestContractFailures:
    @pytest.mark.asyncio
    async def test_missing_script_name(self, settings, notifier, targets, write_params):
        supervisor = MagicMock(spec=JobSupervisor)
        runner = LaunchRunner(settings, supervisor=supervisor, notifier=notifier)
        params = write_params({"PrinterColor": "red", "PrinterName": "MyCustomPrinter"})

        outcome = await runner.run(RunRequest(targets / "get_printers.py", params))

        assert outcome.exit_code == EXIT_FAILURE
        assert isinstance(outcome.error, MissingScriptName)
        supervisor.supervise.assert_not_called()
        assert outcome.job is None

        diagnostic = DiagnosticArtifact.model_validate_json(outcome.diagnostic_path.read_text())
        assert diagnostic.error_type == "MissingScriptName"
        assert diagnostic.script_identity == ""
        assert "PrinterName" in diagnostic.parameter_metadata

        notifier.notify.assert_called_once()
        recipients, subject, body, priority, attachments = notifier.notify.call_args.args
        assert subject == "[launchpad] params failed: MissingScriptName"
        assert priority is AlertPriority.HIGH
        assert attachments[0].filename == outcome.diagnostic_path.name
        assert json.loads(attachments[0].content)["error_type"] == "MissingScriptName"

    @pytest.mark.asyncio
    async def test_unknown_parameter(self, settings, notifier, targets, write_params):
        supervisor = MagicMock(spec=JobSupervisor)
        runner = LaunchRunner(settings, supervisor=supervisor, notifier=notifier)
        params = write_params({**PRINTER_PARAMS, "UnknownParameter": "kiwi"})

        outcome = await runner.run(RunRequest(targets / "get_printers.py", params))

        assert outcome.exit_code == EXIT_FAILURE
        assert isinstance(outcome.error, UnknownParameter)
        assert outcome.error.parameter_name == "UnknownParameter"
        supervisor.supervise.assert_not_called()
        assert outcome.identity == "Get printers"
        subject = notifier.notify.call_args.args[1]
        assert subject == "[launchpad] Get printers failed: UnknownParameter"

    @pytest.mark.asyncio
    async def test_invalid_parameter_file_still_copied(self, runner, settings, targets, write_params):
        params = write_params('{"ScriptName": ', "broken.json")

        outcome = await runner.run(RunRequest(targets / "get_printers.py", params))

        assert isinstance(outcome.error, InvalidParameterFile)
        assert outcome.parameter_copy.read_bytes() == params.read_bytes()
        assert outcome.diagnostic_path.name.endswith("_broken_broken.diagnostic.json")

    @pytest.mark.asyncio
    async def test_unusable_target(self, runner, targets, write_params):
        outcome = await runner.run(RunRequest(targets / "no_main.py", write_params({"ScriptName": "x"})))
        assert isinstance(outcome.error, TargetNotExecutableShape)
        assert outcome.signature is None

    @pytest.mark.asyncio
    async def test_missing_inputs(self, runner, tmp_path, notifier, telemetry):
        outcome = await runner.run(RunRequest(tmp_path / "missing.py", tmp_path / "missing.json"))
        assert isinstance(outcome.error, InputNotFoundError)
        assert outcome.parameter_copy is None
        notifier.notify.assert_called_once()
        assert telemetry.emitted == {"start", "outcome", "end"}
        assert telemetry.success is False


@pytest.mark.integration
class TestLaunchFailures:
    @pytest.mark.asyncio
    async def test_blocked_target(self, runner, settings, targets, write_params, notifier):
        params = write_params({"ScriptName": "Drain queue"})

        outcome = await runner.run(RunRequest(targets / "needs_queue.py", params))

        assert outcome.exit_code == EXIT_FAILURE
        assert isinstance(outcome.error, BlockedLaunch)
        assert outcome.job.state == JobState.BLOCKED
        diagnostic = DiagnosticArtifact.model_validate_json(outcome.diagnostic_path.read_text())
        assert "missing mandatory parameter" in diagnostic.error_message
        assert "QueueName" in diagnostic.error_message
        assert diagnostic.effective_argument_vector[0]["value"] is None
        notifier.notify.assert_called_once()

    @pytest.mark.asyncio
    async def test_target_fault(self, runner, targets, write_params):
        outcome = await runner.run(RunRequest(targets / "failing.py", write_params({"ScriptName": "Queues"})))

        assert isinstance(outcome.error, TargetExecutionFailed)
        assert outcome.diagnostic.target_traceback
        assert "checking 3 queues" in outcome.diagnostic.target_log
        assert outcome.diagnostic.error_details["target_error_type"] == "ValueError"


# ── Best-effort collaborators ────────────────────────────────────────────


class TestCollaboratorFailures:
    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_mask(self, settings, targets, write_params):
        notifier = MagicMock(spec=Notifier)
        notifier.notify.side_effect = RuntimeError("relay down")
        runner = LaunchRunner(settings, notifier=notifier)

        outcome = await runner.run(RunRequest(targets / "get_printers.py", write_params({"PrinterName": "p"})))

        assert isinstance(outcome.error, MissingScriptName)
        assert outcome.exit_code == EXIT_FAILURE
        assert outcome.notifications == []

    @pytest.mark.asyncio
    async def test_artifact_failure_still_notifies(self, settings, notifier, targets, write_params):
        store = MagicMock(spec=ArtifactStore)
        store.copy_parameter_file.side_effect = PermissionError("read-only")
        store.write_diagnostic.side_effect = PermissionError("read-only")
        runner = LaunchRunner(settings, notifier=notifier, store=store)

        outcome = await runner.run(RunRequest(targets / "get_printers.py", write_params({"PrinterName": "p"})))

        assert isinstance(outcome.error, MissingScriptName)
        assert outcome.parameter_copy is None
        assert outcome.diagnostic_path is None
        attachment = notifier.notify.call_args.args[4][0]
        assert attachment.filename == "params.diagnostic.json"


# ── Inspection ───────────────────────────────────────────────────────────


class TestInspectRun:
    def test_signature_only(self, targets):
        inspection = inspect_run(targets / "get_printers.py")
        assert inspection.vector is None
        assert inspection.defaults == {"ScriptName": "", "Tasks": "", "PaperSize": "A4"}

    def test_with_parameters(self, targets, write_params):
        inspection = inspect_run(targets / "get_printers.py", write_params(PRINTER_PARAMS), environ={})
        assert inspection.identity == "Get printers"
        assert inspection.vector.values == ["MyCustomPrinter", "red", "Get printers", "", "A4"]
        assert inspection.to_dict()["arguments"][0]["source"] == "user"

    def test_missing_script(self, tmp_path):
        with pytest.raises(InputNotFoundError):
            inspect_run(tmp_path / "missing.py")
