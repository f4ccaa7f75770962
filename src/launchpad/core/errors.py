"""
Typed failures of a launcher run.

Each way a run can fail has its own exception class. The failure path
reads everything it needs from the exception itself (phase, retry hint,
script and parameter-file context, underlying cause) to write the
diagnostic artifact, pick the alert subject and set exit status 1. No
code inspects message text.

The launcher never retries. ``retryable`` is only a hint recorded for
whatever scheduler re-runs the job.

Hierarchy::

    LaunchpadError
        PreflightError (PREFLIGHT)
            InputNotFoundError, InvalidInputExtensionError, TargetNotFound
        SignatureError (SIGNATURE)
            TargetNotExecutableShape
        InvalidParameterFile (PARSE)
        ContractError (CONTRACT)
            UnknownParameter, MissingScriptName
        LaunchError (LAUNCH)
            BlockedLaunch
        TargetExecutionFailed (RUNTIME)
        ConfigError (CONFIG)
        DeliveryError (DELIVERY)

Examples:
    >>> error = UnknownParameter("Colour", target_path="get_printers.py")
    >>> error.parameter_name
    'Colour'
    >>> error.context.script_path
    'get_printers.py'

    A parse failure keeps the decoder's exception as its cause:

    >>> try:
    ...     raise ValueError("Expecting value: line 1 column 1")
    ... except ValueError as e:
    ...     raise InvalidParameterFile("params.json is not valid JSON", cause=e)
    Traceback (most recent call last):
    ...
    InvalidParameterFile: params.json is not valid JSON

Tags:
    error-handling, exception-hierarchy, launchpad, diagnostics
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Failure categories, one per phase of a run.

    Pre-flight, parse and contract failures happen before any target is
    launched; launch and runtime failures happen after. The category is
    recorded in the diagnostic artifact and in the terminal log entry.

    Attributes:
        PREFLIGHT: Input path missing, wrong extension, target not found
        SIGNATURE: Target's parameter declaration cannot be determined
        PARSE: Parameter file is not valid structured data
        CONTRACT: Unknown parameter name, missing identity field
        LAUNCH: Target blocked on an unmet mandatory parameter
        RUNTIME: Target launched and raised a fault
        CONFIG: Invalid launcher configuration
        DELIVERY: Collaborator (notification, artifact) failure
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    PREFLIGHT = "PREFLIGHT"
    SIGNATURE = "SIGNATURE"
    PARSE = "PARSE"
    CONTRACT = "CONTRACT"
    LAUNCH = "LAUNCH"
    RUNTIME = "RUNTIME"
    CONFIG = "CONFIG"
    DELIVERY = "DELIVERY"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Where a failure happened: the run's inputs and identity, the offending
    parameter when there is one, and free-form extras in ``metadata``.
    Copied into the diagnostic artifact as-is.
    """

    script_path: str | None = None
    parameter_file: str | None = None
    script_name: str | None = None
    run_id: str | None = None
    parameter: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {
            "script_path": self.script_path,
            "parameter_file": self.parameter_file,
            "script_name": self.script_name,
            "run_id": self.run_id,
            "parameter": self.parameter,
        }
        return {**{k: v for k, v in known.items() if v is not None}, **self.metadata}


class LaunchpadError(Exception):
    """
    Base exception for all launchpad errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    raising them needs nothing more than a message.

    Examples:
        >>> error = LaunchpadError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        >>> error = LaunchpadError("Launch failed").with_context(
        ...     script_path="scripts/get_printers.py",
        ...     attempt_host="build-01",
        ... )
        >>> error.context.metadata["attempt_host"]
        'build-01'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LaunchpadError:
        """
        Attach context fields (or extra metadata) and return the error.

        Usage:
            raise InvalidParameterFile("Bad JSON").with_context(
                parameter_file="params/get_printers.json",
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Fields for log entries and the diagnostic artifact."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        if self.context:
            context_dict = self.context.to_dict()
            if context_dict:
                result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PRE-FLIGHT ERRORS
# =============================================================================


class PreflightError(LaunchpadError):
    """An input path failed the checks made before anything else runs."""

    default_category = ErrorCategory.PREFLIGHT


class InputNotFoundError(PreflightError):
    """Script or parameter file does not exist."""

    def __init__(self, path: str, *, role: str = "input"):
        self.path = path
        self.role = role
        super().__init__(f"The {role} '{path}' does not exist or is not a file")


class InvalidInputExtensionError(PreflightError):
    """Script or parameter file has an unsupported extension."""

    def __init__(self, path: str, *, expected: list[str], role: str = "input"):
        self.path = path
        self.expected = expected
        self.role = role
        super().__init__(
            f"The {role} '{path}' must have one of the extensions: {', '.join(expected)}"
        )


class TargetNotFound(PreflightError):
    """Target path does not resolve to an invocable script."""

    def __init__(self, target_path: str, message: str | None = None):
        self.target_path = target_path
        super().__init__(message or f"Target script not found: {target_path}")
        self.context.script_path = target_path


# =============================================================================
# SIGNATURE ERRORS
# =============================================================================


class SignatureError(LaunchpadError):
    """The target's parameter declaration could not be discovered."""

    default_category = ErrorCategory.SIGNATURE


class TargetNotExecutableShape(SignatureError):
    """The target exists but its declared parameter set cannot be determined."""

    def __init__(self, target_path: str, reason: str, *, cause: Exception | None = None):
        self.target_path = target_path
        self.reason = reason
        super().__init__(f"Cannot determine parameters of '{target_path}': {reason}", cause=cause)
        self.context.script_path = target_path


# =============================================================================
# PARSE ERRORS
# =============================================================================


class InvalidParameterFile(LaunchpadError):
    """Parameter file is not valid structured data."""

    default_category = ErrorCategory.PARSE

    def __init__(self, message: str, *, parameter_file: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.parameter_file = parameter_file
        if parameter_file is not None:
            self.context.parameter_file = parameter_file


# =============================================================================
# CONTRACT ERRORS
# =============================================================================


class ContractError(LaunchpadError):
    """
    Parameter file violates the target's parameter contract.

    Never retryable - the parameter file must be fixed.
    """

    default_category = ErrorCategory.CONTRACT


class UnknownParameter(ContractError):
    """Parameter file supplies a name the target does not declare."""

    def __init__(self, name: str, *, target_path: str | None = None):
        self.parameter_name = name
        self.target_path = target_path
        where = f" '{target_path}'" if target_path else ""
        super().__init__(f"Parameter '{name}' is not declared by the target script{where}")
        self.context.parameter = name
        self.context.script_path = target_path


class MissingScriptName(ContractError):
    """Parameter file lacks a non-empty identity field."""

    def __init__(self, field_name: str = "ScriptName", *, parameter_file: str | None = None):
        self.field_name = field_name
        super().__init__(f"The parameter file must provide a non-empty '{field_name}' value")
        self.context.parameter = field_name
        self.context.parameter_file = parameter_file


# =============================================================================
# LAUNCH / RUNTIME ERRORS
# =============================================================================


class LaunchError(LaunchpadError):
    """The target could not reach a running state."""

    default_category = ErrorCategory.LAUNCH


class BlockedLaunch(LaunchError):
    """Target rejected the bound arguments: a mandatory parameter has no value."""

    def __init__(self, missing: list[str], *, identity: str | None = None):
        self.missing = list(missing)
        names = ", ".join(self.missing) or "unknown"
        super().__init__(f"Target is blocked waiting for missing mandatory parameter(s): {names}")
        self.context.script_name = identity


class TargetExecutionFailed(LaunchpadError):
    """
    Target launched and raised a fault during execution.

    Marked retryable as a hint to the external scheduler; the launcher
    itself never retries.
    """

    default_category = ErrorCategory.RUNTIME
    default_retryable = True

    def __init__(
        self,
        reason: str,
        *,
        error_type: str | None = None,
        exit_code: int | None = None,
        target_traceback: str | None = None,
    ):
        self.reason = reason
        self.error_type = error_type
        self.exit_code = exit_code
        self.target_traceback = target_traceback
        super().__init__(f"Target execution failed: {reason}")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["reason"] = self.reason
        if self.error_type:
            result["target_error_type"] = self.error_type
        if self.exit_code is not None:
            result["exit_code"] = self.exit_code
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(LaunchpadError):
    """Launcher configuration is invalid."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# DELIVERY ERRORS
# =============================================================================


class DeliveryError(LaunchpadError):
    """A collaborator (mail, artifact store) could not deliver.

    Usually transient: the SMTP relay or the share may come back.
    """

    default_category = ErrorCategory.DELIVERY
    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Retry hint for any exception; only launcher errors can say yes."""
    if isinstance(error, LaunchpadError):
        return error.retryable
    return False


def categorize_error(error: BaseException) -> ErrorCategory:
    """Run phase to blame for *error*, guessing from builtin exception types."""
    if isinstance(error, LaunchpadError):
        return error.category

    if isinstance(error, (FileNotFoundError, IsADirectoryError)):
        return ErrorCategory.PREFLIGHT
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.CONTRACT
    if isinstance(error, OSError):
        return ErrorCategory.DELIVERY
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LaunchpadError",
    # Pre-flight
    "PreflightError",
    "InputNotFoundError",
    "InvalidInputExtensionError",
    "TargetNotFound",
    # Signature
    "SignatureError",
    "TargetNotExecutableShape",
    # Parse
    "InvalidParameterFile",
    # Contract
    "ContractError",
    "UnknownParameter",
    "MissingScriptName",
    # Launch / runtime
    "LaunchError",
    "BlockedLaunch",
    "TargetExecutionFailed",
    # Config / delivery
    "ConfigError",
    "DeliveryError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
