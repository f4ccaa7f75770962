"""Signature provider protocol.

Manifesto:
The launcher never depends on how a target's parameters are discovered.
``SignatureProvider`` is a ``typing.Protocol``: any object with the
right methods satisfies it, no base class required. One implementation
exists per supported target kind.

ARCHITECTURE
────────────
::

    SignatureProvider (Protocol)
      ├── .kind             ─ short name of the target kind
      ├── .supports(path)   ─ can this provider read the target?
      └── .inspect(path)    ─ ordered ParameterSignature

    Implementations:
      PythonScriptSignatureProvider ─ entrypoint function of a .py script

Tags:
    launchpad, signature, protocol, interface

Doc-Types:
    api-reference
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import ParameterSignature


@runtime_checkable
class SignatureProvider(Protocol):
    """Discovers the ordered parameter contract of a target.

    Example implementation:
        >>> class ShellProvider:
        ...     kind = "shell"
        ...
        ...     def supports(self, path: Path) -> bool:
        ...         return path.suffix == ".sh"
        ...
        ...     def inspect(self, path: Path) -> ParameterSignature:
        ...         return ParameterSignature(target=str(path))
    """

    kind: str

    def supports(self, path: Path) -> bool:
        """Whether this provider understands the target at *path*."""
        ...

    def inspect(self, path: Path) -> ParameterSignature:
        """Return the target's signature.

        Raises:
            TargetNotFound: *path* does not resolve to an invocable script.
            TargetNotExecutableShape: the declared parameter set cannot be
                determined.
        """
        ...
