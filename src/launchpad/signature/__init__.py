"""Signature inspection: the ordered parameter contract of a target."""

from launchpad.signature.models import (
    ParameterDescriptor,
    ParameterSignature,
    TypeCategory,
    default_values,
)
from launchpad.signature.protocol import SignatureProvider
from launchpad.signature.python_script import CONTROL_PARAMETERS, PythonScriptSignatureProvider
from launchpad.signature.registry import provider_for, register_provider, unregister_provider


def inspect_target(path, entrypoint: str = "main") -> ParameterSignature:
    """Inspect *path* with the provider registered for its kind."""
    return provider_for(path, entrypoint).inspect(path)


__all__ = [
    "CONTROL_PARAMETERS",
    "ParameterDescriptor",
    "ParameterSignature",
    "PythonScriptSignatureProvider",
    "SignatureProvider",
    "TypeCategory",
    "default_values",
    "inspect_target",
    "provider_for",
    "register_provider",
    "unregister_provider",
]
