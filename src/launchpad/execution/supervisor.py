"""Job supervisor. Launches one target in a child process and observes it.

The target runs inside ``python -m launchpad.execution.worker``, so a
crash, ``sys.exit`` or interpreter abort inside it cannot take the
supervisor down. The supervisor reads the worker's lifecycle events and
moves the :class:`~launchpad.execution.models.JobRecord` through its
state machine.

Architecture:

    .. code-block:: text

        JobSupervisor.launch()
        ┌──────────────────────────────────────────────────────────────┐
        │  asyncio.create_subprocess_exec(python -m ...worker)         │
        │        │ stdin  ← launch payload (JSON)                      │
        │        │ stdout → _read_events task → JobRecord transitions  │
        │        │ stderr → _read_log task    → JobRecord.log_lines    │
        │        │ exit   → _watch_exit task  → exit code, reader drain│
        │        ▼                                                     │
        │  JobHandle                                                   │
        │    await_launch_acknowledgement(grace)  → BLOCKED|PROCEEDING │
        │    await_completion()                   → JobRecord          │
        │    collect_result()                     → output | raises    │
        │    release()                            → kill if alive,     │
        │                                           join readers       │
        └──────────────────────────────────────────────────────────────┘

    .. mermaid::

        flowchart LR
            SUP[JobSupervisor] --> PROC[worker process]
            PROC -->|events| REC[JobRecord]
            PROC -->|stderr| LOG[log_lines]
            REC --> RES[collect_result]

Example:
    >>> supervisor = JobSupervisor(launch_grace_seconds=5.0)
    >>> async with supervisor.supervise(target, vector, "Get printers") as handle:
    ...     if await handle.await_launch_acknowledgement() is LaunchAcknowledgement.BLOCKED:
    ...         handle.collect_result()          # raises BlockedLaunch
    ...     await handle.await_completion()
    ...     output = handle.collect_result()

Manifesto:
    The supervisor never terminates a target that is making progress.
    The only kill happens in ``release()``, for a child that is still
    alive when supervision ends: a blocked target or an aborted run.

Tags:
    launchpad, execution, supervisor, subprocess, asyncio

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
import uuid
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import launchpad
from launchpad.binding.binder import ArgumentVector
from launchpad.core.errors import BlockedLaunch, LaunchError, TargetExecutionFailed
from launchpad.core.values import decode_value, encode_value
from launchpad.execution.models import (
    EVENT_BLOCKED,
    EVENT_FAILED,
    EVENT_RUNNING,
    EVENT_SUCCEEDED,
    InvalidTransitionError,
    JobRecord,
    JobState,
    LaunchAcknowledgement,
)
from launchpad.framework.logging import get_logger

logger = get_logger(__name__)

WORKER_MODULE = "launchpad.execution.worker"

# Outputs above the worker's inline limit arrive as a file, so event lines stay well below this.
STREAM_LIMIT = 16 * 1024 * 1024

READER_JOIN_SECONDS = 2.0

EXIT_POLL_SECONDS = 0.05


def _source_root() -> str:
    return str(Path(launchpad.__file__).resolve().parent.parent)


async def _lines(stream: asyncio.StreamReader) -> AsyncIterator[str | None]:
    """Decoded lines of *stream*; ``None`` stands for a line dropped as over ``STREAM_LIMIT``."""
    while True:
        try:
            raw = await stream.readline()
        except ValueError:
            yield None
            continue
        if not raw:
            return
        yield raw.decode("utf-8", errors="replace").rstrip("\r\n")


def _load_output(event: Mapping[str, Any]) -> Any:
    path = event.get("output_file")
    if path is None:
        return decode_value(event.get("output"))
    spill = Path(path)
    try:
        return decode_value(json.loads(spill.read_text(encoding="utf-8")))
    finally:
        spill.unlink(missing_ok=True)


class JobHandle:
    """Handle on one launched target.

    Owns the child process, the two reader tasks and the task that waits
    for the worker to exit. Every method is meant to be called from the
    single supervising flow.
    """

    def __init__(
        self,
        record: JobRecord,
        process: asyncio.subprocess.Process,
        *,
        launch_grace_seconds: float,
    ) -> None:
        self.record = record
        self._process = process
        self._grace = launch_grace_seconds
        self._acknowledged = asyncio.Event()
        self._released = False
        self._events_task = asyncio.create_task(self._read_events())
        self._log_task = asyncio.create_task(self._read_log())
        self._exit_task = asyncio.create_task(self._watch_exit())

    @property
    def state(self) -> JobState:
        return self.record.state

    @property
    def ref(self) -> str:
        return self.record.ref

    @property
    def log_lines(self) -> list[str]:
        return self.record.log_lines

    @property
    def released(self) -> bool:
        return self._released

    # ------------------------------------------------------------------
    # Supervision
    # ------------------------------------------------------------------

    async def await_launch_acknowledgement(self, timeout: float | None = None) -> LaunchAcknowledgement:
        """Wait up to the grace period for the target to settle.

        A ``blocked`` event returns :attr:`LaunchAcknowledgement.BLOCKED`
        as soon as it arrives. Any other first event, a worker exit, or
        expiry of the grace period returns ``PROCEEDING``.
        """
        grace = self._grace if timeout is None else timeout
        try:
            await asyncio.wait_for(self._acknowledged.wait(), timeout=grace)
        except TimeoutError:
            logger.debug("job.acknowledgement_timeout", job_ref=self.ref, grace_seconds=grace)

        if self.record.state == JobState.BLOCKED:
            logger.warning(
                "job.blocked",
                job_ref=self.ref,
                missing=self.record.missing_parameters,
            )
            return LaunchAcknowledgement.BLOCKED
        return LaunchAcknowledgement.PROCEEDING

    async def await_completion(self) -> JobRecord:
        """Wait, without a timeout, until the worker has exited and reported.

        Completion follows the worker's exit, not the end of its pipes: a
        descendant that keeps stderr open only delays it by
        ``READER_JOIN_SECONDS``.
        """
        await asyncio.shield(self._exit_task)
        logger.info(
            "job.completed",
            job_ref=self.ref,
            state=self.record.state.value,
            exit_code=self.record.exit_code,
            duration_seconds=self.record.duration_seconds,
        )
        return self.record

    def collect_result(self) -> Any:
        """Return the target's output, or raise the failure it ended with.

        Raises:
            TargetExecutionFailed: The target raised a fault.
            BlockedLaunch: The target never ran for lack of a mandatory value.
            LaunchError: The job has not reached a final state.
        """
        record = self.record
        match record.state:
            case JobState.SUCCEEDED:
                return record.result
            case JobState.FAILED:
                raise TargetExecutionFailed(
                    record.failure_reason or "unknown failure",
                    error_type=record.failure_type,
                    exit_code=record.exit_code,
                    target_traceback=record.failure_traceback,
                ).with_context(script_name=record.identity)
            case JobState.BLOCKED:
                raise BlockedLaunch(record.missing_parameters, identity=record.identity)
            case JobState.NOT_STARTED | JobState.RUNNING:
                raise LaunchError(
                    f"Job {record.ref} has no result yet (state={record.state.value})"
                ).with_context(script_name=record.identity)

    async def release(self) -> None:
        """Release the child and its readers. Safe to call more than once."""
        if self._released:
            return
        self._released = True

        if self._process.returncode is None:
            logger.info("job.killing", job_ref=self.ref, state=self.record.state.value)
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
            await self._exited()

        if self._process.stdin is not None and not self._process.stdin.is_closing():
            self._process.stdin.close()

        await asyncio.gather(self._exit_task, return_exceptions=True)
        logger.debug("job.released", job_ref=self.ref)

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    async def _exited(self) -> int:
        # Process.wait() also waits for every pipe to close.
        while self._process.returncode is None:
            await asyncio.sleep(EXIT_POLL_SECONDS)
        return self._process.returncode

    async def _watch_exit(self) -> None:
        try:
            self.record.exit_code = await self._exited()
            readers = [self._events_task, self._log_task]
            _, pending = await asyncio.wait(readers, timeout=READER_JOIN_SECONDS)
            for task in pending:
                logger.warning("job.pipe_held_open", job_ref=self.ref, exit_code=self.record.exit_code)
                task.cancel()
            await asyncio.gather(*readers, return_exceptions=True)
            for task in readers:
                if not task.cancelled() and task.exception() is not None:
                    logger.error("job.reader_failed", job_ref=self.ref, error=repr(task.exception()))
            self._finish()
        finally:
            self._acknowledged.set()

    async def _read_events(self) -> None:
        stream = self._process.stdout
        if stream is None:
            return
        async for line in _lines(stream):
            if line is None:
                logger.warning("job.event_line_dropped", job_ref=self.ref, limit=STREAM_LIMIT)
                continue
            if not line:
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                event = None
            if isinstance(event, dict) and "event" in event:
                self._apply_event(event)
            else:
                self.record.log_lines.append(line)

    async def _read_log(self) -> None:
        stream = self._process.stderr
        if stream is None:
            return
        async for line in _lines(stream):
            if line is None:
                line = f"[launchpad] log line longer than {STREAM_LIMIT} bytes dropped"
            self.record.log_lines.append(line)

    def _apply_event(self, event: Mapping[str, Any]) -> None:
        record = self.record
        kind = event.get("event")
        try:
            if kind == EVENT_BLOCKED:
                record.missing_parameters = list(event.get("missing", []))
                record.transition_to(JobState.BLOCKED)
            elif kind == EVENT_RUNNING:
                record.transition_to(JobState.RUNNING)
                logger.info("job.running", job_ref=record.ref)
            elif kind == EVENT_SUCCEEDED:
                try:
                    record.result = _load_output(event)
                except (OSError, ValueError) as exc:
                    record.failure_reason = f"Target output could not be read back: {exc}"
                    record.failure_type = type(exc).__name__
                    record.transition_to(JobState.FAILED)
                    self._acknowledged.set()
                    return
                if record.state == JobState.NOT_STARTED:
                    record.transition_to(JobState.RUNNING)
                record.transition_to(JobState.SUCCEEDED)
            elif kind == EVENT_FAILED:
                record.failure_reason = event.get("reason")
                record.failure_type = event.get("error_type")
                record.failure_traceback = event.get("traceback")
                record.transition_to(JobState.FAILED)
            else:
                logger.warning("job.unknown_event", job_ref=record.ref, event=kind)
                return
        except InvalidTransitionError as exc:
            logger.warning("job.protocol_violation", job_ref=record.ref, event=kind, error=str(exc))
        self._acknowledged.set()

    def _finish(self) -> None:
        record = self.record
        if record.state.is_terminal or record.state == JobState.BLOCKED:
            return
        if self._released:
            reason = "Target was released before it finished"
        else:
            reason = f"Worker exited with status {record.exit_code} without reporting an outcome"
        record.failure_reason = reason
        record.transition_to(JobState.FAILED)


class JobSupervisor:
    """Starts targets in worker processes and hands back a :class:`JobHandle`.

    Args:
        python_executable: Interpreter used for the worker. Defaults to
            the running interpreter.
        launch_grace_seconds: Default wait for launch acknowledgement.
        inherit_env: If True, the worker inherits the current environment.
    """

    def __init__(
        self,
        python_executable: str | None = None,
        *,
        launch_grace_seconds: float = 5.0,
        inherit_env: bool = True,
    ) -> None:
        self._python = python_executable or sys.executable
        self._grace = launch_grace_seconds
        self._inherit_env = inherit_env

    @property
    def launch_grace_seconds(self) -> float:
        return self._grace

    async def launch(
        self,
        target: Path | str,
        vector: ArgumentVector,
        identity: str,
        *,
        entrypoint: str = "main",
        control: Mapping[str, Any] | None = None,
    ) -> JobHandle:
        """Start *target* with *vector*; returns without waiting for it."""
        target = Path(target)
        ref = f"job-{uuid.uuid4().hex[:12]}"
        record = JobRecord(identity=identity, ref=ref)

        payload = {
            "target": str(target.resolve()),
            "entrypoint": entrypoint,
            "identity": identity,
            "names": vector.names,
            "values": [encode_value(value) for value in vector.values],
            "control": dict(control or {}),
        }

        try:
            process = await asyncio.create_subprocess_exec(
                self._python,
                "-m",
                WORKER_MODULE,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._build_env(identity, ref),
                limit=STREAM_LIMIT,
            )
        except OSError as exc:
            record.failure_reason = f"Failed to start worker: {exc}"
            record.transition_to(JobState.FAILED)
            raise LaunchError(record.failure_reason, cause=exc).with_context(
                script_path=str(target),
                script_name=identity,
            ) from exc

        logger.info("job.launched", job_ref=ref, target=str(target), pid=process.pid)

        if process.stdin is not None:
            process.stdin.write(json.dumps(payload).encode("utf-8"))
            try:
                await process.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as exc:
                logger.warning("job.payload_not_delivered", job_ref=ref, error=str(exc))
            process.stdin.close()

        return JobHandle(record, process, launch_grace_seconds=self._grace)

    @asynccontextmanager
    async def supervise(
        self,
        target: Path | str,
        vector: ArgumentVector,
        identity: str,
        *,
        entrypoint: str = "main",
        control: Mapping[str, Any] | None = None,
    ) -> AsyncIterator[JobHandle]:
        """Launch *target* and release the handle on every exit path."""
        handle = await self.launch(target, vector, identity, entrypoint=entrypoint, control=control)
        try:
            yield handle
        finally:
            await handle.release()

    def _build_env(self, identity: str, ref: str) -> dict[str, str]:
        env = dict(os.environ) if self._inherit_env else {}
        root = _source_root()
        existing = env.get("PYTHONPATH")
        env["PYTHONPATH"] = os.pathsep.join([root, existing]) if existing else root
        env["PYTHONUNBUFFERED"] = "1"
        env["PYTHONIOENCODING"] = "utf-8"
        env["LAUNCHPAD_JOB_REF"] = ref
        env["LAUNCHPAD_SCRIPT_NAME"] = identity
        return env
