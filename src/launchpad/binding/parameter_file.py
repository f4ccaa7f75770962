"""Parameter file loading.

A parameter file is one structured object whose top-level attributes are
parameter names, plus the reserved identity field ``ScriptName``:

.. code-block:: json

    {
        "ScriptName": "Get printers",
        "PrinterName": "MyCustomPrinter",
        "PrinterColor": "red",
        "Options": {"Duplex": true, "Copies": 2}
    }

JSON and YAML are accepted. The top level becomes an ordered ``dict`` in
file order; every nested object becomes a :class:`~launchpad.core.values.Record`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from launchpad.core.errors import InvalidParameterFile
from launchpad.core.values import Record, records_from_plain

IDENTITY_FIELD = "ScriptName"

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")
PARAMETER_FILE_SUFFIXES = JSON_SUFFIXES + YAML_SUFFIXES

UserParameterSet = dict[str, Any]


def load_parameter_file(path: Path | str) -> UserParameterSet:
    """Parse *path* into a user parameter set.

    Raises:
        InvalidParameterFile: The file cannot be read, is not valid
            JSON/YAML, or its top level is not an object.
    """
    path = Path(path)
    try:
        # utf-8-sig: files written by Windows tooling often carry a BOM
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidParameterFile(
            f"Cannot read parameter file '{path}': {exc}",
            parameter_file=str(path),
            cause=exc,
        ) from exc

    if path.suffix.lower() in YAML_SUFFIXES:
        return _parse_yaml(text, path)
    return _parse_json(text, path)


def parse_parameters(text: str, *, fmt: str = "json", source: str = "<string>") -> UserParameterSet:
    """Parse parameter text that did not come from a file."""
    if fmt == "yaml":
        return _parse_yaml(text, Path(source))
    return _parse_json(text, Path(source))


def _parse_json(text: str, path: Path) -> UserParameterSet:
    try:
        document = json.loads(text, object_pairs_hook=Record.from_pairs)
    except json.JSONDecodeError as exc:
        raise InvalidParameterFile(
            f"Parameter file '{path}' is not valid JSON: {exc}",
            parameter_file=str(path),
            cause=exc,
        ) from exc

    if not isinstance(document, Record):
        raise InvalidParameterFile(
            f"Parameter file '{path}' must contain a JSON object, got {type(document).__name__}",
            parameter_file=str(path),
        )
    return document.to_dict()


def _parse_yaml(text: str, path: Path) -> UserParameterSet:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidParameterFile(
            f"Parameter file '{path}' is not valid YAML: {exc}",
            parameter_file=str(path),
            cause=exc,
        ) from exc

    if not isinstance(document, dict):
        raise InvalidParameterFile(
            f"Parameter file '{path}' must contain a mapping, got {type(document).__name__}",
            parameter_file=str(path),
        )
    return {str(key): records_from_plain(value) for key, value in document.items()}
