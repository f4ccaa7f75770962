"""Run orchestration: one target, one parameter file, one outcome.

Manifesto:
    A run either returns the target's output with exit status 0, or it
    ends with exit status 1 after the same three actions on every
    failure path: diagnostic artifact, operator notification, terminal
    log entry. A failure inside one of those actions is logged and
    swallowed, never allowed to mask the failure being reported.

Architecture:

    .. code-block:: text

        LaunchRunner.run(request)
        ┌──────────────────────────────────────────────────────────────┐
        │  telemetry.emit_start                                        │
        │  check_inputs            PreflightError                      │
        │  copy parameter file     (best effort)                       │
        │  load_parameter_file     InvalidParameterFile                │
        │  provider_for().inspect  TargetNotFound / NotExecutableShape │
        │  validate                UnknownParameter / MissingScriptName│
        │  bind                    (total)                             │
        │  supervise ── ack ──────  BlockedLaunch                      │
        │            └─ await ───── TargetExecutionFailed              │
        │                                                              │
        │  success → emit_outcome → exit 0                             │
        │  failure → build_diagnostic → write → notify → emit_outcome  │
        │            → exit 1                                          │
        │  telemetry.emit_end (always)                                 │
        └──────────────────────────────────────────────────────────────┘

Example:
    >>> runner = LaunchRunner(LaunchpadSettings())
    >>> outcome = await runner.run(RunRequest(Path("get_printers.py"), Path("get_printers.json")))
    >>> outcome.exit_code
    0

Guardrails:
    ❌ DON'T: let an artifact or mail failure escape ``run()``
    ✅ DO: log it and keep going to the terminal log entry

    ❌ DON'T: launch before validation has passed
    ✅ DO: raise contract errors before any job resources exist

Tags:
    launchpad, runner, orchestration, failure-handling

Doc-Types:
    api-reference
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from launchpad.binding import (
    PARAMETER_FILE_SUFFIXES,
    ArgumentVector,
    UserParameterSet,
    bind,
    load_parameter_file,
    script_identity,
    validate,
)
from launchpad.core.errors import InputNotFoundError, InvalidInputExtensionError, LaunchpadError
from launchpad.core.settings import LaunchpadSettings
from launchpad.core.values import encode_value
from launchpad.diagnostics import ArtifactStore, DiagnosticArtifact, build_diagnostic
from launchpad.execution import JobRecord, JobSupervisor, LaunchAcknowledgement
from launchpad.framework.alerts import AlertPriority, Attachment, DeliveryResult, Notifier
from launchpad.framework.logging import bind_context, get_logger, log_step, push_context
from launchpad.observability import RunTelemetry
from launchpad.signature import ParameterSignature, default_values, provider_for

logger = get_logger(__name__)

SCRIPT_SUFFIXES = (".py",)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def check_inputs(script_path: Path | str, parameter_file: Path | str) -> tuple[Path, Path]:
    """Pre-flight: both inputs exist as files with a supported extension.

    Raises:
        InputNotFoundError: A path does not resolve to a file.
        InvalidInputExtensionError: A path has an unsupported extension.
    """
    script = Path(script_path)
    params = Path(parameter_file)
    checks = (
        (script, "target script", SCRIPT_SUFFIXES),
        (params, "parameter file", PARAMETER_FILE_SUFFIXES),
    )
    for path, role, suffixes in checks:
        if not path.is_file():
            raise InputNotFoundError(str(path), role=role)
        if path.suffix.lower() not in suffixes:
            raise InvalidInputExtensionError(str(path), expected=list(suffixes), role=role)
    return script, params


@dataclass
class RunRequest:
    """Inputs of one run, as given on the command line."""

    script_path: Path
    parameter_file: Path
    run_name: str | None = None
    recipients: list[str] = field(default_factory=list)
    entrypoint: str | None = None
    verbose: bool = False
    debug: bool = False

    @property
    def run_label(self) -> str:
        return self.run_name or Path(self.parameter_file).stem


@dataclass
class RunOutcome:
    """What a run produced, on either path."""

    run_id: str
    run_label: str
    exit_code: int = EXIT_FAILURE
    identity: str | None = None
    output: Any = None
    error: BaseException | None = None
    signature: ParameterSignature | None = None
    vector: ArgumentVector | None = None
    job: JobRecord | None = None
    parameter_copy: Path | None = None
    diagnostic: DiagnosticArtifact | None = None
    diagnostic_path: Path | None = None
    notifications: list[DeliveryResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.exit_code == EXIT_SUCCESS

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "exit_code": self.exit_code,
            "run_id": self.run_id,
            "run_label": self.run_label,
            "identity": self.identity,
        }
        if self.success:
            result["output"] = encode_value(self.output)
        if self.error is not None:
            if isinstance(self.error, LaunchpadError):
                result["error"] = self.error.to_dict()
            else:
                result["error"] = {"error_type": type(self.error).__name__, "message": str(self.error)}
        if self.vector is not None:
            result["arguments"] = self.vector.to_dict()
        if self.job is not None:
            result["job"] = self.job.to_dict()
        if self.parameter_copy is not None:
            result["parameter_copy"] = str(self.parameter_copy)
        if self.diagnostic_path is not None:
            result["diagnostic_path"] = str(self.diagnostic_path)
        if self.notifications:
            result["notifications"] = [
                {"channel": r.channel_name, "success": r.success, "message": r.message}
                for r in self.notifications
            ]
        return result


@dataclass
class Inspection:
    """Dry-run view: signature, and the bound vector when parameters are given."""

    signature: ParameterSignature
    defaults: dict[str, Any]
    parameters: UserParameterSet | None = None
    identity: str | None = None
    vector: ArgumentVector | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "signature": self.signature.to_dict(),
            "defaults": {k: encode_value(v) for k, v in self.defaults.items()},
        }
        if self.identity is not None:
            result["identity"] = self.identity
        if self.vector is not None:
            result["arguments"] = self.vector.to_dict()
        return result


def inspect_run(
    script_path: Path | str,
    parameter_file: Path | str | None = None,
    *,
    entrypoint: str = "main",
    environ: dict[str, str] | None = None,
) -> Inspection:
    """Discover the signature and, given a parameter file, validate and bind it.

    Nothing is launched. Errors propagate to the caller.
    """
    script = Path(script_path)
    if not script.is_file():
        raise InputNotFoundError(str(script), role="target script")

    signature = provider_for(script, entrypoint).inspect(script)
    defaults = default_values(signature)
    if parameter_file is None:
        return Inspection(signature=signature, defaults=defaults)

    _, params = check_inputs(script, parameter_file)
    user = load_parameter_file(params)
    validate(signature, user, target_path=str(script))
    vector = bind(signature, defaults, user, environ=dict(os.environ) if environ is None else environ)
    return Inspection(
        signature=signature,
        defaults=defaults,
        parameters=user,
        identity=script_identity(user),
        vector=vector,
    )


class LaunchRunner:
    """Runs one request end to end.

    Collaborators default from *settings* and can be injected for tests.
    """

    def __init__(
        self,
        settings: LaunchpadSettings | None = None,
        *,
        supervisor: JobSupervisor | None = None,
        notifier: Notifier | None = None,
        store: ArtifactStore | None = None,
        telemetry: RunTelemetry | None = None,
    ) -> None:
        self.settings = settings or LaunchpadSettings()
        self._supervisor = supervisor
        self._notifier = notifier
        self._store = store
        self._telemetry = telemetry

    async def run(self, request: RunRequest) -> RunOutcome:
        """Run *request*. Never raises for run failures; see ``exit_code``."""
        telemetry = self._telemetry or RunTelemetry()
        store = self._store or ArtifactStore(self.settings.artifact_dir)
        label = request.run_label
        outcome = RunOutcome(run_id=telemetry.run_id, run_label=label)

        token = push_context(run_id=telemetry.run_id, target=str(request.script_path))
        telemetry.emit_start(label, script=str(request.script_path), parameter_file=str(request.parameter_file))
        try:
            try:
                outcome.output = await self._execute(request, outcome, store)
            except LaunchpadError as exc:
                outcome.error = exc
            except Exception as exc:
                logger.exception("run.unexpected_error", error=str(exc))
                outcome.error = exc

            if outcome.error is None:
                outcome.exit_code = EXIT_SUCCESS
                telemetry.emit_outcome(
                    label,
                    f"{outcome.identity or label} succeeded",
                    success=True,
                    script_name=outcome.identity,
                )
            else:
                outcome.exit_code = EXIT_FAILURE
                self._handle_failure(request, outcome, store)
                telemetry.emit_outcome(
                    label,
                    f"{outcome.identity or label} failed: {outcome.error}",
                    success=False,
                    script_name=outcome.identity,
                    error_type=type(outcome.error).__name__,
                )
        finally:
            telemetry.emit_end(label)
            token.restore()
        return outcome

    # ------------------------------------------------------------------
    # Happy path
    # ------------------------------------------------------------------

    async def _execute(self, request: RunRequest, outcome: RunOutcome, store: ArtifactStore) -> Any:
        entrypoint = request.entrypoint or self.settings.entrypoint

        with log_step("run.preflight", log_start=False):
            script, params = check_inputs(request.script_path, request.parameter_file)

        outcome.parameter_copy = self._copy_parameter_file(store, outcome.run_label, params)

        with log_step("run.prepare", log_start=False):
            user = load_parameter_file(params)
            outcome.identity = script_identity(user)
            outcome.signature = provider_for(script, entrypoint).inspect(script)
            validate(outcome.signature, user, target_path=str(script))
            outcome.vector = bind(
                outcome.signature,
                default_values(outcome.signature),
                user,
                environ=dict(os.environ),
            )

        if outcome.identity:
            bind_context(script_name=outcome.identity)

        supervisor = self._supervisor or JobSupervisor(
            self.settings.python_executable,
            launch_grace_seconds=self.settings.launch_grace_seconds,
        )
        control = {"verbose": request.verbose, "debug": request.debug}

        with log_step("run.supervise"):
            async with supervisor.supervise(
                script,
                outcome.vector,
                outcome.identity or outcome.run_label,
                entrypoint=entrypoint,
                control=control,
            ) as handle:
                outcome.job = handle.record
                bind_context(job_ref=handle.ref)
                if await handle.await_launch_acknowledgement() is LaunchAcknowledgement.BLOCKED:
                    handle.collect_result()
                await handle.await_completion()
                return handle.collect_result()

    def _copy_parameter_file(self, store: ArtifactStore, label: str, params: Path) -> Path | None:
        try:
            return store.copy_parameter_file(label, params)
        except OSError as exc:
            logger.error("artifact.copy_failed", parameter_file=str(params), error=str(exc))
            return None

    # ------------------------------------------------------------------
    # Failure path
    # ------------------------------------------------------------------

    def _handle_failure(self, request: RunRequest, outcome: RunOutcome, store: ArtifactStore) -> None:
        failure = outcome.error
        logger.error(
            "run.failed",
            error_type=type(failure).__name__,
            error=str(failure),
            script_name=outcome.identity,
        )

        outcome.diagnostic = build_diagnostic(
            failure,
            outcome.identity,
            outcome.signature,
            outcome.vector,
            request.script_path,
            request.parameter_file,
            run_label=outcome.run_label,
            log_lines=outcome.job.log_lines if outcome.job is not None else None,
        )

        try:
            outcome.diagnostic_path = store.write_diagnostic(
                outcome.run_label, outcome.diagnostic, Path(request.parameter_file)
            )
        except Exception as exc:
            logger.error("artifact.diagnostic_failed", error=str(exc))

        outcome.notifications = self._notify(request, outcome)

    def _notify(self, request: RunRequest, outcome: RunOutcome) -> list[DeliveryResult]:
        artifact = outcome.diagnostic
        name = outcome.diagnostic_path.name if outcome.diagnostic_path else f"{outcome.run_label}.diagnostic.json"
        subject = f"[launchpad] {outcome.identity or outcome.run_label} failed: {type(outcome.error).__name__}"
        recipients = request.recipients or self.settings.notify_recipients
        try:
            notifier = self._notifier or Notifier.from_settings(self.settings, recipients)
            return notifier.notify(
                recipients,
                subject,
                artifact.summary(),
                AlertPriority.HIGH,
                [Attachment(filename=name, content=artifact.to_json().encode("utf-8"))],
                source=outcome.identity or outcome.run_label,
                run_id=outcome.run_id,
            )
        except Exception as exc:
            logger.error("notify.error", error=str(exc))
            return []
