"""Failure diagnostics and run artifacts."""

from launchpad.diagnostics.artifacts import DIAGNOSTIC_SUFFIX, ArtifactStore, run_stamp, safe_label
from launchpad.diagnostics.builder import DiagnosticArtifact, build_diagnostic

__all__ = [
    "DIAGNOSTIC_SUFFIX",
    "ArtifactStore",
    "DiagnosticArtifact",
    "build_diagnostic",
    "run_stamp",
    "safe_label",
]
