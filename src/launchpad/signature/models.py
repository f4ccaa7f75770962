"""Parameter signature models.

A ``ParameterSignature`` is the ordered parameter contract of one target
script. Its order is the positional contract for argument binding: entry
``i`` of the bound argument vector is passed to descriptor ``i``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeCategory(str, Enum):
    """Declared shape of a target parameter."""

    SCALAR = "scalar"
    LIST = "list"
    MAP = "map"
    STRUCT = "struct"


@dataclass(frozen=True)
class ParameterDescriptor:
    """One declared parameter of a target.

    ``has_default`` distinguishes a declared default of ``None`` from no
    resolvable default. A parameter is ``mandatory`` when its declaration
    carries no default at all.
    """

    name: str
    type_category: TypeCategory = TypeCategory.SCALAR
    mandatory: bool = True
    declared_default: Any = None
    has_default: bool = False
    position: int = 0
    annotation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "position": self.position,
            "type_category": self.type_category.value,
            "mandatory": self.mandatory,
        }
        if self.annotation:
            d["annotation"] = self.annotation
        if self.has_default:
            d["default"] = self.declared_default
        return d


@dataclass(frozen=True)
class ParameterSignature:
    """Ordered, read-only parameter contract of a target script."""

    target: str
    parameters: tuple[ParameterDescriptor, ...] = field(default_factory=tuple)
    entrypoint: str = "main"

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        seen: set[str] = set()
        for descriptor in self.parameters:
            if descriptor.name in seen:
                raise ValueError(f"Duplicate parameter name in signature: {descriptor.name}")
            seen.add(descriptor.name)

    def __iter__(self) -> Iterator[ParameterDescriptor]:
        return iter(self.parameters)

    def __len__(self) -> int:
        return len(self.parameters)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.parameters)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.parameters]

    def get(self, name: str) -> ParameterDescriptor | None:
        for descriptor in self.parameters:
            if descriptor.name == name:
                return descriptor
        return None

    def describe(self) -> str:
        """Human-readable dump used in diagnostics and ``launchpad inspect``."""
        if not self.parameters:
            return f"{self.target}::{self.entrypoint}() declares no parameters"

        lines = [f"{self.target}::{self.entrypoint}"]
        for p in self.parameters:
            flags = "mandatory" if p.mandatory else "optional"
            default = f" default={p.declared_default!r}" if p.has_default else ""
            annotation = f" ({p.annotation})" if p.annotation else ""
            lines.append(
                f"  [{p.position}] {p.name}: {p.type_category.value}{annotation} {flags}{default}"
            )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "entrypoint": self.entrypoint,
            "parameters": [p.to_dict() for p in self.parameters],
        }


def default_values(signature: ParameterSignature) -> dict[str, Any]:
    """Script-declared defaults, name → value, in signature order."""
    return {p.name: p.declared_default for p in signature if p.has_default}
