"""Launch worker: the child side of a supervised job.

Runs inside the isolated child process started by
:class:`~launchpad.execution.supervisor.JobSupervisor`::

    python -m launchpad.execution.worker   < payload.json

Protocol
────────
stdin  : one JSON payload ``{target, entrypoint, identity, names, values, control}``
stdout : JSON lines, one lifecycle event each::

    {"event": "blocked", "missing": ["PrinterName"]}
    {"event": "running"}
    {"event": "succeeded", "output": ...}
    {"event": "succeeded", "output_file": "/tmp/launchpad-output-....json"}
    {"event": "failed", "error_type": "...", "reason": "...", "traceback": "..."}

stderr : everything the target writes, including writes to file
         descriptor 1 from the target or its child processes

The event pipe moves to a private, non-inheritable descriptor and
descriptor 1 is pointed at stderr before the target loads. An output
whose JSON form exceeds ``INLINE_OUTPUT_LIMIT`` is written to a
temporary file that the supervisor reads back and removes.

Exit codes: 0 succeeded, 1 failed, 3 blocked.

The worker checks the bound vector against the entrypoint's live
signature before calling it: a parameter without default whose value is
absent or empty blocks the launch. Absent values for parameters that do
have a default fall back to that default.
"""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import json
import os
import sys
import tempfile
import traceback
from pathlib import Path
from typing import IO, Any

from launchpad.core.values import decode_value, encode_value, is_empty
from launchpad.execution.models import EVENT_BLOCKED, EVENT_FAILED, EVENT_RUNNING, EVENT_SUCCEEDED
from launchpad.signature.python_script import CONTROL_PARAMETERS

EXIT_SUCCEEDED = 0
EXIT_FAILED = 1
EXIT_BLOCKED = 3

TARGET_MODULE_NAME = "__launchpad_target__"

INLINE_OUTPUT_LIMIT = 1024 * 1024

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def emit(channel: IO[str], event: str, **fields: Any) -> None:
    """Write one lifecycle event line to the supervisor."""
    channel.write(json.dumps({"event": event, **fields}, default=repr) + "\n")
    channel.flush()


def _failure(channel: IO[str], exc: BaseException, *, prefix: str = "") -> int:
    text = traceback.format_exc()
    sys.stderr.write(text)
    reason = str(exc) or type(exc).__name__
    emit(
        channel,
        EVENT_FAILED,
        error_type=type(exc).__name__,
        reason=f"{prefix}{reason}",
        traceback=text,
    )
    return EXIT_FAILED


def load_target(path: Path) -> Any:
    """Execute the target script as a module without running its ``__main__`` block."""
    spec = importlib.util.spec_from_file_location(TARGET_MODULE_NAME, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load target script: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[TARGET_MODULE_NAME] = module
    sys.path.insert(0, str(path.parent))
    spec.loader.exec_module(module)
    return module


def build_call(
    entry: Any,
    names: list[str],
    values: list[Any],
    control: dict[str, Any],
) -> tuple[list[Any], dict[str, Any], list[str]]:
    """Map the vector onto the entrypoint's live signature.

    Returns ``(args, kwargs, missing)``; *missing* lists mandatory
    parameters without a usable value.
    """
    live = inspect.signature(entry)
    positional = [p for p in live.parameters.values() if p.kind in _POSITIONAL]

    live_names = [p.name for p in positional]
    if live_names != list(names):
        raise TypeError(
            f"entrypoint parameters {live_names} differ from the inspected signature {list(names)}"
        )

    args: list[Any] = []
    missing: list[str] = []
    for param, value in zip(positional, values):
        if is_empty(value) and param.default is inspect.Parameter.empty:
            missing.append(param.name)
        elif value is None and param.default is not inspect.Parameter.empty:
            value = param.default
        args.append(value)

    kwargs = {
        name: control[name]
        for name, param in live.parameters.items()
        if param.kind == inspect.Parameter.KEYWORD_ONLY and name in CONTROL_PARAMETERS and name in control
    }
    return args, kwargs, missing


def run(payload: dict[str, Any], channel: IO[str]) -> int:
    """Load, check and call the target described by *payload*."""
    target = Path(payload["target"])
    entrypoint = payload.get("entrypoint", "main")
    names = list(payload.get("names", []))
    values = [decode_value(v) for v in payload.get("values", [])]
    control = dict(payload.get("control", {}))

    try:
        module = load_target(target)
        entry = getattr(module, entrypoint, None)
        if not callable(entry):
            raise AttributeError(f"target has no callable '{entrypoint}'")
        args, kwargs, missing = build_call(entry, names, values, control)
    except Exception as exc:
        return _failure(channel, exc)
    except SystemExit as exc:
        return _failure(channel, exc, prefix="target exited while loading: ")

    if missing:
        sys.stderr.write(f"Cannot run {target.name}: missing mandatory parameter(s) {', '.join(missing)}\n")
        emit(channel, EVENT_BLOCKED, missing=missing)
        return EXIT_BLOCKED

    emit(channel, EVENT_RUNNING)

    try:
        if inspect.iscoroutinefunction(entry):
            output = asyncio.run(entry(*args, **kwargs))
        else:
            output = entry(*args, **kwargs)
    except SystemExit as exc:
        if exc.code in (None, 0):
            output = None
        else:
            return _failure(channel, exc, prefix="target exited with status ")
    except Exception as exc:
        return _failure(channel, exc)

    try:
        emit_output(channel, output)
    except OSError as exc:
        return _failure(channel, exc, prefix="could not hand back the output: ")
    return EXIT_SUCCEEDED


def emit_output(channel: IO[str], output: Any) -> None:
    """Send the ``succeeded`` event, spilling a large output to a temporary file."""
    encoded = encode_value(output)
    body = json.dumps(encoded, default=repr)
    if len(body) <= INLINE_OUTPUT_LIMIT:
        emit(channel, EVENT_SUCCEEDED, output=encoded)
        return
    fd, path = tempfile.mkstemp(prefix="launchpad-output-", suffix=".json")
    with os.fdopen(fd, "w", encoding="utf-8") as spill:
        spill.write(body)
    emit(channel, EVENT_SUCCEEDED, output_file=path)


def open_event_channel() -> IO[str]:
    """Move the event pipe off descriptor 1 and point descriptor 1 at stderr."""
    sys.stdout.flush()
    event_fd = os.dup(1)
    os.dup2(2, 1)
    sys.stdout = sys.stderr
    return os.fdopen(event_fd, "w", encoding="utf-8")


def main() -> int:
    channel = open_event_channel()
    try:
        payload = json.loads(sys.stdin.read())
    except json.JSONDecodeError as exc:
        return _failure(channel, exc, prefix="invalid launch payload: ")
    return run(payload, channel)


if __name__ == "__main__":
    sys.exit(main())
