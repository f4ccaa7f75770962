"""Launcher settings.

Every knob of a run that is not one of the two input paths comes from
here: logging, artifact storage, the post-launch grace period, the target
entrypoint, and operator notification.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    A scheduler host sets ``LAUNCHPAD_*`` variables (or a ``.env`` file)
    once; individual runs override only what they need on the command line.

    - **Pydantic validation:** Type-checked at startup, not mid-run
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box for development

Examples:
    >>> from launchpad.core.settings import LaunchpadSettings
    >>> settings = LaunchpadSettings(launch_grace_seconds=1.5)
    >>> settings.launch_grace_seconds
    1.5

Tags:
    settings, configuration, pydantic, environment, launchpad

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LaunchpadSettings(BaseSettings):
    """Settings shared by every launcher run.

    Fields
    ──────
    log_level             : Structlog log level
    log_format            : ``console`` or ``json``
    log_dir               : Directory for per-run log files (None = stderr only)
    artifact_dir          : Directory for parameter-file copies and diagnostics
    launch_grace_seconds  : Wait for the target's launch acknowledgement
    entrypoint            : Name of the target's entrypoint function
    python_executable     : Interpreter used to run targets
    smtp_*                : Outbound mail for failure notifications
    mail_from             : Sender address for notifications
    notify_recipients     : Default operator addresses
    """

    model_config = SettingsConfigDict(
        env_prefix="LAUNCHPAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "console"
    log_dir: Path | None = None

    # ── Storage ──────────────────────────────────────────────────
    artifact_dir: Path = Field(
        default_factory=lambda: Path.home() / ".launchpad" / "artifacts",
        description="Parameter-file copies and diagnostic artifacts",
    )

    # ── Supervision ──────────────────────────────────────────────
    launch_grace_seconds: float = Field(default=5.0, gt=0)
    entrypoint: str = "main"
    python_executable: str = Field(default_factory=lambda: sys.executable)

    # ── Notification ─────────────────────────────────────────────
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    mail_from: str = "launchpad@localhost"
    notify_recipients: list[str] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        fmt = value.lower()
        if fmt not in {"console", "json"}:
            raise ValueError(f"Unsupported log format: {value}")
        return fmt

    @property
    def mail_enabled(self) -> bool:
        """Whether an SMTP relay is configured."""
        return bool(self.smtp_host)
