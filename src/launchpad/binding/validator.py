"""Parameter file validation against a target's signature.

Two independent, fatal checks run after parsing and before any launch:

1. every key other than ``ScriptName`` is declared by the target
   (``UnknownParameter`` names the first unknown key in file order);
2. ``ScriptName`` is present and non-empty (``MissingScriptName``).
"""

from __future__ import annotations

import logging
from typing import Any

from launchpad.binding.parameter_file import IDENTITY_FIELD
from launchpad.core.errors import MissingScriptName, UnknownParameter
from launchpad.core.values import is_empty
from launchpad.signature.models import ParameterSignature

logger = logging.getLogger(__name__)


def find_unknown_parameters(signature: ParameterSignature, user_parameters: dict[str, Any]) -> list[str]:
    """Keys of *user_parameters* the target does not declare, in file order."""
    return [
        name for name in user_parameters
        if name != IDENTITY_FIELD and name not in signature
    ]


def script_identity(user_parameters: dict[str, Any]) -> str | None:
    """The run identity from the ``ScriptName`` field, or None when missing/empty."""
    value = user_parameters.get(IDENTITY_FIELD)
    if is_empty(value):
        return None
    text = str(value).strip()
    return text or None


def validate(
    signature: ParameterSignature,
    user_parameters: dict[str, Any],
    target_path: str | None = None,
) -> None:
    """Validate a parsed parameter set against *signature*.

    Raises:
        UnknownParameter: A key is not declared by the target.
        MissingScriptName: The identity field is missing or empty.
    """
    unknown = find_unknown_parameters(signature, user_parameters)
    if unknown:
        logger.warning(
            "Parameter file supplies %d undeclared parameter(s) for %s: %s",
            len(unknown), target_path or signature.target, ", ".join(unknown),
        )
        raise UnknownParameter(unknown[0], target_path=target_path or signature.target)

    if script_identity(user_parameters) is None:
        raise MissingScriptName(IDENTITY_FIELD)
