"""Operator notification over alert channels.

The notifier is the single entry point the runner uses on a failure
path. Delivery is best effort: a channel that raises or reports a
failure is logged and the remaining channels are still tried.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from launchpad.core.settings import LaunchpadSettings
from launchpad.framework.alerts.channels import ConsoleChannel, EmailChannel
from launchpad.framework.alerts.protocol import (
    Alert,
    AlertChannel,
    AlertPriority,
    AlertSeverity,
    Attachment,
    ChannelType,
    DeliveryResult,
)
from launchpad.framework.logging import get_logger

logger = get_logger(__name__)


class Notifier:
    """Routes one notification to every registered channel."""

    def __init__(self, channels: Iterable[AlertChannel] = ()):
        self._channels: dict[str, AlertChannel] = {}
        for channel in channels:
            self.register(channel)

    def register(self, channel: AlertChannel) -> None:
        """Register an alert channel."""
        self._channels[channel.name] = channel

    def unregister(self, name: str) -> None:
        """Unregister a channel by name."""
        self._channels.pop(name, None)

    def list_channels(self) -> list[str]:
        return sorted(self._channels)

    def list_by_type(self, channel_type: ChannelType) -> list[str]:
        return [name for name, channel in self._channels.items() if channel.channel_type == channel_type]

    @classmethod
    def from_settings(
        cls,
        settings: LaunchpadSettings,
        recipients: Sequence[str] | None = None,
    ) -> Notifier:
        """Mail when an SMTP host and recipients are known, console otherwise."""
        to = list(recipients or settings.notify_recipients)
        if settings.mail_enabled and to:
            channel: AlertChannel = EmailChannel(
                "email",
                smtp_host=settings.smtp_host,
                from_address=settings.mail_from,
                recipients=to,
                smtp_port=settings.smtp_port,
                smtp_user=settings.smtp_user,
                smtp_password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
            )
        else:
            if settings.mail_enabled:
                logger.warning("notify.no_recipients", smtp_host=settings.smtp_host)
            channel = ConsoleChannel()
        return cls([channel])

    def send(self, alert: Alert) -> list[DeliveryResult]:
        """Deliver *alert* to every matching channel. Never raises."""
        results: list[DeliveryResult] = []
        for channel in self._channels.values():
            if not channel.should_send(alert):
                continue
            try:
                result = channel.send(alert)
            except Exception as exc:
                result = DeliveryResult.fail(channel.name, exc)
            if result.success:
                logger.info("notify.delivered", channel=channel.name, title=alert.title)
            else:
                logger.error("notify.failed", channel=channel.name, error=result.message)
            results.append(result)
        return results

    def notify(
        self,
        recipients: Sequence[str],
        subject: str,
        body: str,
        priority: AlertPriority = AlertPriority.HIGH,
        attachments: Sequence[Attachment] | None = None,
        *,
        severity: AlertSeverity = AlertSeverity.ERROR,
        source: str = "launchpad",
        run_id: str | None = None,
    ) -> list[DeliveryResult]:
        """Send one operator notification."""
        alert = Alert(
            severity=severity,
            title=subject,
            message=body,
            source=source,
            priority=priority,
            recipients=list(recipients),
            attachments=list(attachments or []),
            run_id=run_id,
        )
        return self.send(alert)
