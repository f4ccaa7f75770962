"""Argument binding: from signature, defaults and user input to a vector.

Manifesto:
    The argument vector is positional. Entry ``i`` is handed to the
    target's ``i``-th declared parameter, so the binder walks the
    signature, never the user's mapping, and emits exactly one slot per
    descriptor. A reordering here would silently hand the wrong value to
    the wrong parameter.

Algorithm, per descriptor in signature order::

    value = None
    value = defaults[name]            if name in defaults
    value = user[name]                if user[name] is not empty
    value = expand(value, environ)    if value is a string
    value = value.to_dict()           if descriptor is MAP and value is a Record
    vector.append(value)

Binding is total: it never raises. Type mismatches are left for the
target to reject at launch, where the supervisor observes them.

Example:
    >>> vector = bind(signature, default_values(signature), {"PrinterName": "$HOME/p"},
    ...               environ={"HOME": "/home/ops"})
    >>> vector[0]
    '/home/ops/p'

Tags:
    launchpad, binding, arguments, coercion, environment

Doc-Types:
    api-reference
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from launchpad.core.values import ValueShape, encode_value, is_empty, shape_of
from launchpad.framework.logging import get_logger
from launchpad.signature.models import ParameterDescriptor, ParameterSignature, TypeCategory

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(
    r"\$\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}"
    r"|\$(?P<bare>[A-Za-z_][A-Za-z0-9_]*)"
    r"|%(?P<percent>[A-Za-z_][A-Za-z0-9_()]*)%"
)


@dataclass(frozen=True)
class BoundArgument:
    """A resolved value for one descriptor."""

    descriptor: ParameterDescriptor
    value: Any
    source: str = "absent"  # absent, default, user


@dataclass(frozen=True)
class ArgumentVector:
    """Ordered values passed to the target, index-aligned with its signature."""

    bound: tuple[BoundArgument, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.bound)

    def __iter__(self) -> Iterator[Any]:
        return (b.value for b in self.bound)

    def __getitem__(self, index: int) -> Any:
        return self.bound[index].value

    @property
    def values(self) -> list[Any]:
        return [b.value for b in self.bound]

    @property
    def names(self) -> list[str]:
        return [b.descriptor.name for b in self.bound]

    def to_dict(self) -> list[dict[str, Any]]:
        """JSON-safe view: one entry per slot with its name and source."""
        return [
            {
                "position": index,
                "name": b.descriptor.name,
                "source": b.source,
                "value": encode_value(b.value),
            }
            for index, b in enumerate(self.bound)
        ]


def expand_placeholders(text: str, environ: Mapping[str, str]) -> str:
    """Substitute ``$NAME``, ``${NAME}`` and ``%NAME%`` from *environ*.

    Unknown placeholders are left verbatim.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare") or match.group("percent")
        return environ.get(name, match.group(0))

    return _PLACEHOLDER.sub(_replace, text)


def coerce_value(descriptor: ParameterDescriptor, value: Any) -> Any:
    """Bring *value* to the declared shape where a conversion is defined.

    Only a Record bound to a MAP parameter is converted; every other
    category/shape combination passes through unchanged.
    """
    match (descriptor.type_category, shape_of(value)):
        case (TypeCategory.MAP, ValueShape.RECORD):
            return value.to_dict()
        case (_, ValueShape.ABSENT | ValueShape.SCALAR | ValueShape.LIST | ValueShape.MAP | ValueShape.RECORD):
            return value


def bind(
    signature: ParameterSignature,
    default_values: Mapping[str, Any],
    user_parameters: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> ArgumentVector:
    """Produce the argument vector for *signature*.

    Args:
        signature: Ordered parameter contract of the target.
        default_values: Script-declared defaults, name → value.
        user_parameters: Values from the parameter file, name → value.
        environ: Environment snapshot for placeholder expansion. Defaults
            to a copy of the process environment taken now.
    """
    env = dict(os.environ) if environ is None else environ

    bound: list[BoundArgument] = []
    for descriptor in signature:
        name = descriptor.name
        value: Any = None
        source = "absent"

        if name in default_values:
            value = default_values[name]
            source = "default"

        if not is_empty(user_parameters.get(name)):
            value = user_parameters[name]
            source = "user"

        if isinstance(value, str):
            value = expand_placeholders(value, env)

        value = coerce_value(descriptor, value)
        bound.append(BoundArgument(descriptor=descriptor, value=value, source=source))

    logger.debug(
        "binding.bound",
        target=signature.target,
        slots=len(bound),
        sources={b.descriptor.name: b.source for b in bound},
    )
    return ArgumentVector(bound=tuple(bound))
