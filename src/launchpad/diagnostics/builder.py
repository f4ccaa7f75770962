"""Diagnostic artifact built when a run fails.

The builder runs strictly inside failure handling, so it must never
replace the original failure with one of its own: every field is
derived independently and recorded empty when it cannot be derived
(identity unknown because the parameter file never parsed, no vector
because the run stopped before binding, and so on).

Key Concepts:
    DiagnosticArtifact: Pydantic model serialised with
        ``model_dump_json(indent=2)`` and attached to the notification.
    build_diagnostic(): Pure, total composition of the artifact.

Architecture Decisions:
    - Pydantic v2 BaseModel: one model gives the file format, the
      attachment body and ``model_validate_json()`` for operators'
      tooling.
    - ``target_log`` keeps only the tail of the target's stderr, enough
      to show the fault without bloating the mail attachment.

Tags:
    diagnostics, failure, artifact, pydantic
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from launchpad.binding.binder import ArgumentVector
from launchpad.core.errors import LaunchpadError, TargetExecutionFailed, categorize_error
from launchpad.signature.models import ParameterSignature

logger = logging.getLogger(__name__)

TARGET_LOG_TAIL = 200

T = TypeVar("T")


class DiagnosticArtifact(BaseModel):
    """Structured record of one failed run."""

    error_message: str = ""
    error_type: str = ""
    error_category: str = ""
    error_details: dict[str, Any] = Field(default_factory=dict)
    script_identity: str = ""
    run_label: str = ""
    parameter_metadata: str = ""
    effective_argument_vector: list[dict[str, Any]] = Field(default_factory=list)
    script_path: str = ""
    parameter_file_path: str = ""
    target_traceback: str = ""
    target_log: list[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    def summary(self) -> str:
        """Short plain-text rendering for notification bodies."""
        lines = [
            f"Script:         {self.script_identity or '(unknown)'}",
            f"Run:            {self.run_label or '(unknown)'}",
            f"Error:          {self.error_type or 'Error'}: {self.error_message}",
            f"Category:       {self.error_category or 'UNKNOWN'}",
            f"Script path:    {self.script_path or '(none)'}",
            f"Parameter file: {self.parameter_file_path or '(none)'}",
        ]
        if self.parameter_metadata:
            lines += ["", "Parameters:", self.parameter_metadata]
        if self.effective_argument_vector:
            lines += ["", "Arguments:"]
            lines += [
                f"  [{slot.get('position')}] {slot.get('name')} = {slot.get('value')!r} ({slot.get('source')})"
                for slot in self.effective_argument_vector
            ]
        return "\n".join(lines)


def _field(label: str, derive: Callable[[], T], fallback: T) -> T:
    try:
        return derive()
    except Exception:
        logger.debug("Diagnostic field '%s' unavailable", label, exc_info=True)
        return fallback


def _error_message(failure: BaseException) -> str:
    if isinstance(failure, LaunchpadError):
        return failure.message
    return str(failure) or type(failure).__name__


def _traceback_text(failure: BaseException) -> str:
    if isinstance(failure, TargetExecutionFailed) and failure.target_traceback:
        return failure.target_traceback
    if failure.__traceback__ is None:
        return ""
    return "".join(traceback.format_exception(type(failure), failure, failure.__traceback__))


def build_diagnostic(
    failure: BaseException,
    identity: str | None,
    signature: ParameterSignature | None,
    vector: ArgumentVector | None,
    script_path: Path | str | None,
    parameter_file_path: Path | str | None,
    *,
    run_label: str = "",
    log_lines: Sequence[str] | None = None,
) -> DiagnosticArtifact:
    """Compose the diagnostic for *failure*. Never raises."""
    return DiagnosticArtifact(
        error_message=_field("error_message", lambda: _error_message(failure), ""),
        error_type=_field("error_type", lambda: type(failure).__name__, ""),
        error_category=_field("error_category", lambda: categorize_error(failure).value, ""),
        error_details=_field(
            "error_details",
            lambda: failure.to_dict() if isinstance(failure, LaunchpadError) else {},
            {},
        ),
        script_identity=identity or "",
        run_label=run_label or "",
        parameter_metadata=_field(
            "parameter_metadata",
            lambda: signature.describe() if signature is not None else "",
            "",
        ),
        effective_argument_vector=_field(
            "effective_argument_vector",
            lambda: vector.to_dict() if vector is not None else [],
            [],
        ),
        script_path=str(script_path) if script_path else "",
        parameter_file_path=str(parameter_file_path) if parameter_file_path else "",
        target_traceback=_field("target_traceback", lambda: _traceback_text(failure), ""),
        target_log=_field(
            "target_log",
            lambda: list(log_lines or [])[-TARGET_LOG_TAIL:],
            [],
        ),
    )
