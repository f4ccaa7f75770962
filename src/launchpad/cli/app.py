"""
Root Typer application for the launchpad CLI.

    launchpad run SCRIPT PARAMS      launch and supervise a target
    launchpad inspect SCRIPT [PARAMS] show signature and bound arguments

Exit status of ``run`` is 0 on success and 1 on any failure, so an
external scheduler can mark the run failed and retry it.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from typer import Typer

from launchpad.cli.utils import console, err_console, fail, print_json, print_rows
from launchpad.core.errors import ConfigError, LaunchpadError
from launchpad.core.settings import LaunchpadSettings
from launchpad.core.values import encode_value
from launchpad.framework.logging import configure_logging
from launchpad.observability import log_file_path
from launchpad.runner import LaunchRunner, RunRequest, inspect_run

app = Typer(
    name="launchpad",
    help="launchpad: launch and supervise parameterised Python scripts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from launchpad import __version__

        try:
            v = pkg_version("launchpad")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"launchpad {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """launchpad CLI. Run a target script with a parameter file."""


def _load_settings(**overrides) -> LaunchpadSettings:
    try:
        settings = LaunchpadSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid LAUNCHPAD_* configuration: {exc}", cause=exc) from exc
    updates = {k: v for k, v in overrides.items() if v is not None}
    return settings.model_copy(update=updates) if updates else settings


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def run(
    script: Path = typer.Argument(..., help="Target script (.py)"),
    params: Path = typer.Argument(..., help="Parameter file (.json, .yaml, .yml)"),
    run_name: str | None = typer.Option(None, "--run-name", "-r", help="Run label (default: parameter file stem)"),
    log_dir: Path | None = typer.Option(None, "--log-dir", help="Also write JSON logs to a per-run file here"),
    artifact_dir: Path | None = typer.Option(None, "--artifact-dir", help="Where parameter copies and diagnostics go"),
    notify: list[str] | None = typer.Option(None, "--notify", "-n", help="Operator address (repeatable)"),
    entrypoint: str | None = typer.Option(None, "--entrypoint", "-e", help="Entrypoint function name"),
    grace: float | None = typer.Option(None, "--grace", min=0.01, help="Launch acknowledgement wait, seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Pass verbose=True to the target"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging; pass debug=True to the target"),
    json_out: bool = typer.Option(False, "--json", help="Print the run outcome as JSON"),
) -> None:
    """Launch SCRIPT with the values in PARAMS and supervise it to completion."""
    request = RunRequest(
        script_path=script,
        parameter_file=params,
        run_name=run_name,
        recipients=list(notify or []),
        entrypoint=entrypoint,
        verbose=verbose,
        debug=debug,
    )

    try:
        settings = _load_settings(
            log_dir=log_dir,
            artifact_dir=artifact_dir,
            entrypoint=entrypoint,
            launch_grace_seconds=grace,
            log_level="DEBUG" if debug else None,
        )
    except ConfigError as exc:
        raise fail(exc) from exc

    configure_logging(
        level=settings.log_level,
        format=settings.log_format,
        log_file=log_file_path(settings.log_dir, request.run_label) if settings.log_dir else None,
        force=True,
    )

    outcome = asyncio.run(LaunchRunner(settings).run(request))

    if json_out:
        print_json(outcome.to_dict())
    elif outcome.success:
        if outcome.output is not None:
            output = outcome.output
            typer.echo(output if isinstance(output, str) else json.dumps(encode_value(output), default=str))
        err_console.print(f"[green]✓[/green] {outcome.identity or outcome.run_label} succeeded", highlight=False)
    else:
        fail(outcome.error)
        if outcome.diagnostic_path is not None:
            err_console.print(f"  Diagnostic: {outcome.diagnostic_path}", highlight=False)

    raise typer.Exit(code=outcome.exit_code)


@app.command()
def inspect(
    script: Path = typer.Argument(..., help="Target script (.py)"),
    params: Path | None = typer.Argument(None, help="Optional parameter file to validate and bind"),
    entrypoint: str = typer.Option("main", "--entrypoint", "-e", help="Entrypoint function name"),
    json_out: bool = typer.Option(False, "--json", help="Print as JSON"),
) -> None:
    """Show the target's parameters and, with PARAMS, the bound argument vector. Launches nothing."""
    try:
        inspection = inspect_run(script, params, entrypoint=entrypoint)
    except LaunchpadError as exc:
        raise fail(exc) from exc

    if json_out:
        print_json(inspection.to_dict())
        return

    console.print(inspection.signature.describe(), markup=False, highlight=False)
    if inspection.vector is not None:
        console.print()
        if inspection.identity:
            console.print(f"Identity: {inspection.identity}", markup=False, highlight=False)
        print_rows(inspection.vector.to_dict(), title="Bound arguments")
