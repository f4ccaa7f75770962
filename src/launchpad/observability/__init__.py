"""Observability for launcher runs.

Key components:
- telemetry: run start/outcome/end entries and per-run log file paths
"""

from .telemetry import RunTelemetry, log_file_path, new_run_id

__all__ = [
    "RunTelemetry",
    "log_file_path",
    "new_run_id",
]
