"""Write-once artifact store for run inputs and failure diagnostics.

Every run produces files under one directory, sharing a
``<run-stamp>_<label>_`` prefix so an operator can pair them::

    {artifact_dir}/
    ├── 20261018T091500Z_get-printers_get_printers.json            (copy, always)
    └── 20261018T091500Z_get-printers_get_printers.diagnostic.json (failure only)

Files are opened in exclusive-create mode: an existing file is never
overwritten.
"""

from __future__ import annotations

import logging
import re
import shutil
from datetime import UTC, datetime
from pathlib import Path

from launchpad.diagnostics.builder import DiagnosticArtifact

logger = logging.getLogger(__name__)

DIAGNOSTIC_SUFFIX = ".diagnostic.json"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def run_stamp(moment: datetime | None = None) -> str:
    """Compact UTC timestamp used as the artifact name prefix."""
    return (moment or datetime.now(UTC)).strftime("%Y%m%dT%H%M%SZ")


def safe_label(label: str) -> str:
    """Collapse characters that do not belong in a file name."""
    cleaned = _UNSAFE.sub("-", label.strip()).strip("-")
    return cleaned or "run"


class ArtifactStore:
    """Names and writes the artifacts of one run.

    Parameters
    ----------
    root
        Directory receiving the artifacts. Created on first write.
    stamp
        Run stamp shared by every artifact of the run.
    """

    def __init__(self, root: Path, stamp: str | None = None) -> None:
        self.root = Path(root).expanduser()
        self.stamp = stamp or run_stamp()

    def prefix(self, label: str) -> str:
        return f"{self.stamp}_{safe_label(label)}_"

    def parameter_copy_path(self, label: str, parameter_file: Path) -> Path:
        return self.root / f"{self.prefix(label)}{Path(parameter_file).name}"

    def diagnostic_path(self, label: str, parameter_file: Path | None) -> Path:
        stem = Path(parameter_file).stem if parameter_file else "run"
        return self.root / f"{self.prefix(label)}{stem}{DIAGNOSTIC_SUFFIX}"

    def copy_parameter_file(self, label: str, parameter_file: Path) -> Path:
        """Copy the parameter file verbatim, byte for byte.

        Raises:
            FileExistsError: An artifact with the same name already exists.
            OSError: The source cannot be read or the copy written.
        """
        dest = self.parameter_copy_path(label, parameter_file)
        self.root.mkdir(parents=True, exist_ok=True)
        with open(parameter_file, "rb") as src, open(dest, "xb") as dst:
            shutil.copyfileobj(src, dst)
        logger.info("Copied parameter file to %s", dest)
        return dest

    def write_diagnostic(
        self,
        label: str,
        artifact: DiagnosticArtifact,
        parameter_file: Path | None,
    ) -> Path:
        """Serialise *artifact* next to the parameter-file copy.

        Raises:
            FileExistsError: An artifact with the same name already exists.
            OSError: The file cannot be written.
        """
        dest = self.diagnostic_path(label, parameter_file)
        self.root.mkdir(parents=True, exist_ok=True)
        with open(dest, "x", encoding="utf-8") as fh:
            fh.write(artifact.to_json())
            fh.write("\n")
        logger.info("Wrote diagnostic artifact to %s", dest)
        return dest
