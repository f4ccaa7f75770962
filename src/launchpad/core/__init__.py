"""Core primitives: errors, settings and the parameter value model."""

from launchpad.core.errors import (
    BlockedLaunch,
    ErrorCategory,
    ErrorContext,
    InvalidParameterFile,
    LaunchpadError,
    MissingScriptName,
    TargetExecutionFailed,
    TargetNotExecutableShape,
    TargetNotFound,
    UnknownParameter,
)
from launchpad.core.values import Record, ValueShape, shape_of

__all__ = [
    "BlockedLaunch",
    "ErrorCategory",
    "ErrorContext",
    "InvalidParameterFile",
    "LaunchpadError",
    "MissingScriptName",
    "Record",
    "TargetExecutionFailed",
    "TargetNotExecutableShape",
    "TargetNotFound",
    "UnknownParameter",
    "ValueShape",
    "shape_of",
]
