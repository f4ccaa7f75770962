"""Value shapes for parameter values.

Parameter files carry heterogeneous values: scalars, ordered lists and
nested objects. Nested objects are read as :class:`Record` instances, a
generic attribute/value record, so that the binder can tell a record the
user wrote apart from a native mapping and convert it only where the
target declares a map-typed parameter.

Architecture:

    .. code-block:: text

        ValueShape: tagged view over any parameter value
        ┌──────────────────────────────────────────────────────┐
        │  None                         → ABSENT               │
        │  str / int / float / bool …   → SCALAR               │
        │  list / tuple                 → LIST                 │
        │  dict                         → MAP                  │
        │  Record                       → RECORD               │
        └──────────────────────────────────────────────────────┘

        encode_value / decode_value: JSON-safe transport
        Record → {"$record": {...}}   (used by the launch worker protocol)

Example:
    >>> rec = Record.from_dict({"Tray": "A", "Copies": 2})
    >>> rec.Tray
    'A'
    >>> shape_of(rec)
    <ValueShape.RECORD: 'record'>
    >>> Record.from_dict(rec.to_dict()) == rec
    True

Tags:
    launchpad, core, values, record, codec

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

RECORD_MARKER = "$record"


class Record:
    """Generic structured record: ordered attribute/value pairs.

    Supports attribute access (``rec.Name``), item access (``rec["Name"]``)
    and ``items()``. Records compare equal when they hold the same pairs,
    regardless of order.
    """

    __slots__ = ("_fields",)

    def __init__(self, pairs: Mapping[str, Any] | None = None, **fields: Any) -> None:
        data: dict[str, Any] = dict(pairs or {})
        data.update(fields)
        object.__setattr__(self, "_fields", data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Record:
        return cls(data)

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, Any]]) -> Record:
        """Build a record from JSON object pairs (``object_pairs_hook``)."""
        return cls(dict(pairs))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(f"Record has no attribute {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is read-only")

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._fields == other._fields

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"Record({inner})"

    def __getstate__(self) -> dict[str, Any]:
        return self._fields

    def __setstate__(self, state: dict[str, Any]) -> None:
        object.__setattr__(self, "_fields", dict(state))

    def keys(self) -> list[str]:
        return list(self._fields)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._fields.items())

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Copy each attribute into a key/value entry (shallow)."""
        return dict(self._fields)


class ValueShape(str, Enum):
    """Actual shape of a parameter value."""

    ABSENT = "absent"
    SCALAR = "scalar"
    LIST = "list"
    MAP = "map"
    RECORD = "record"


def shape_of(value: Any) -> ValueShape:
    """Classify a value into its :class:`ValueShape`."""
    match value:
        case None:
            return ValueShape.ABSENT
        case Record():
            return ValueShape.RECORD
        case dict():
            return ValueShape.MAP
        case list() | tuple():
            return ValueShape.LIST
        case _:
            return ValueShape.SCALAR


def is_empty(value: Any) -> bool:
    """True for ``None`` and the empty string: values that never override."""
    return value is None or (isinstance(value, str) and value == "")


def records_from_plain(value: Any) -> Any:
    """Convert every nested ``dict`` of a loaded document into a Record."""
    match shape_of(value):
        case ValueShape.MAP:
            return Record({str(k): records_from_plain(v) for k, v in value.items()})
        case ValueShape.LIST:
            return [records_from_plain(v) for v in value]
        case ValueShape.RECORD:
            return Record({k: records_from_plain(v) for k, v in value.items()})
        case ValueShape.SCALAR | ValueShape.ABSENT:
            return value


# ---------------------------------------------------------------------------
# JSON transport
# ---------------------------------------------------------------------------


def encode_value(value: Any) -> Any:
    """Return a JSON-safe form of *value*; records are tagged."""
    match shape_of(value):
        case ValueShape.RECORD:
            return {RECORD_MARKER: {k: encode_value(v) for k, v in value.items()}}
        case ValueShape.MAP:
            return {str(k): encode_value(v) for k, v in value.items()}
        case ValueShape.LIST:
            return [encode_value(v) for v in value]
        case ValueShape.ABSENT:
            return None
        case ValueShape.SCALAR:
            if isinstance(value, (str, int, float, bool)):
                return value
            return repr(value)


def decode_value(value: Any) -> Any:
    """Inverse of :func:`encode_value`."""
    if isinstance(value, dict):
        if len(value) == 1 and RECORD_MARKER in value:
            return Record({k: decode_value(v) for k, v in value[RECORD_MARKER].items()})
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value
