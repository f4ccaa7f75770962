"""Command-line interface."""

from launchpad.cli.app import app

__all__ = ["app"]
