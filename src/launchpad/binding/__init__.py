"""Parameter files, validation and argument binding."""

from launchpad.binding.binder import (
    ArgumentVector,
    BoundArgument,
    bind,
    coerce_value,
    expand_placeholders,
)
from launchpad.binding.parameter_file import (
    IDENTITY_FIELD,
    PARAMETER_FILE_SUFFIXES,
    UserParameterSet,
    load_parameter_file,
    parse_parameters,
)
from launchpad.binding.validator import find_unknown_parameters, script_identity, validate

__all__ = [
    "ArgumentVector",
    "BoundArgument",
    "IDENTITY_FIELD",
    "PARAMETER_FILE_SUFFIXES",
    "UserParameterSet",
    "bind",
    "coerce_value",
    "expand_placeholders",
    "find_unknown_parameters",
    "load_parameter_file",
    "parse_parameters",
    "script_identity",
    "validate",
]
