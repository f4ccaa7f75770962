"""Console alert channel, used when no mail relay is configured."""

from __future__ import annotations

from typing import Any

from rich.console import Console

from launchpad.framework.alerts.base import BaseChannel
from launchpad.framework.alerts.protocol import (
    Alert,
    AlertSeverity,
    ChannelType,
    DeliveryResult,
)

_STYLES = {
    AlertSeverity.INFO: "blue",
    AlertSeverity.WARNING: "yellow",
    AlertSeverity.ERROR: "red",
    AlertSeverity.CRITICAL: "bold magenta",
}


class ConsoleChannel(BaseChannel):
    """
    Console output channel.

    Prints alerts to stderr so they never mix with a run's JSON output.
    """

    def __init__(
        self,
        name: str = "console",
        *,
        min_severity: AlertSeverity = AlertSeverity.INFO,
        console: Console | None = None,
        **kwargs: Any,
    ):
        super().__init__(name, ChannelType.CONSOLE, min_severity=min_severity, **kwargs)
        self._console = console or Console(stderr=True)

    def send(self, alert: Alert) -> DeliveryResult:
        """Print alert to console."""
        style = _STYLES.get(alert.severity, "")
        out = self._console

        out.print(f"[{alert.severity.value}] {alert.title}", style=style, markup=False, highlight=False)
        out.print(f"  Source: {alert.source}", markup=False, highlight=False)
        out.print(f"  Priority: {alert.priority.value}", markup=False, highlight=False)
        if alert.recipients:
            out.print(f"  Recipients: {', '.join(alert.recipients)}", markup=False, highlight=False)
        for attachment in alert.attachments:
            out.print(
                f"  Attachment: {attachment.filename} ({len(attachment.content)} bytes)",
                markup=False,
                highlight=False,
            )
        out.print(alert.message, markup=False, highlight=False)
        out.print()

        return DeliveryResult.ok(self._name)
