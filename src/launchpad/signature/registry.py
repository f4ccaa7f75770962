"""Signature provider registry.

Selects the provider for a target by asking each registered provider
whether it supports the path. Python scripts are supported out of the
box; other target kinds register their own provider.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from launchpad.core.errors import TargetNotFound
from launchpad.signature.protocol import SignatureProvider
from launchpad.signature.python_script import PythonScriptSignatureProvider

ProviderFactory = Callable[[str], SignatureProvider]

_factories: dict[str, ProviderFactory] = {
    PythonScriptSignatureProvider.kind: PythonScriptSignatureProvider,
}


def register_provider(kind: str, factory: ProviderFactory) -> None:
    """Register a provider factory taking the entrypoint name."""
    _factories[kind] = factory


def unregister_provider(kind: str) -> None:
    _factories.pop(kind, None)


def list_providers() -> list[str]:
    return sorted(_factories)


def provider_for(path: Path | str, entrypoint: str = "main") -> SignatureProvider:
    """Return the provider that understands *path*.

    Raises:
        TargetNotFound: No registered provider supports the target kind.
    """
    path = Path(path)
    for factory in _factories.values():
        provider = factory(entrypoint)
        if provider.supports(path):
            return provider
    raise TargetNotFound(str(path), f"No signature provider supports target '{path}'")
