"""
Shared pytest fixtures for launchpad tests.

This module provides:
- Paths to the fixture target scripts
- A parameter-file writer
- Settings pointed at a temporary artifact directory
"""

import json
import sys
from pathlib import Path
from typing import Any

import pytest
import yaml

# Ensure launchpad package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from launchpad.core.settings import LaunchpadSettings  # noqa: E402

TARGETS = Path(__file__).parent / "fixtures" / "targets"


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests that spawn worker processes."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "integration" not in markers and "unit" not in markers:
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def targets() -> Path:
    """Directory holding the fixture target scripts."""
    return TARGETS


@pytest.fixture
def write_params(tmp_path: Path):
    """Write a parameter file and return its path.

    Usage:
        path = write_params({"ScriptName": "x"})               # JSON
        path = write_params({"ScriptName": "x"}, "p.yaml")     # YAML
        path = write_params('{"broken": ', "bad.json")         # raw text
    """

    def _write(content: Any, name: str = "params.json") -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        elif path.suffix in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(content, sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(tmp_path: Path) -> LaunchpadSettings:
    """Settings with artifacts under tmp_path and no mail relay."""
    return LaunchpadSettings(
        artifact_dir=tmp_path / "artifacts",
        smtp_host=None,
        notify_recipients=[],
        launch_grace_seconds=10.0,
        python_executable=sys.executable,
    )
