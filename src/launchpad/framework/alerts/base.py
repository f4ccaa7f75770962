"""Shared state for operator alert channels: identity, severity floor, on/off switch."""

from __future__ import annotations

from abc import ABC, abstractmethod

from launchpad.framework.alerts.protocol import Alert, AlertSeverity, ChannelType, DeliveryResult


class BaseChannel(ABC):
    """
    Concrete channels implement ``send``; the notifier calls it only when
    ``should_send`` accepts the alert.

    A failed launch raises an ERROR alert, so the default floor lets it
    through while INFO traffic stays off channels that did not ask for it.
    """

    def __init__(
        self,
        name: str,
        channel_type: ChannelType,
        *,
        min_severity: AlertSeverity = AlertSeverity.ERROR,
        enabled: bool = True,
    ) -> None:
        self._name = name
        self._channel_type = channel_type
        self._min_severity = min_severity
        self._enabled = enabled

    def __repr__(self) -> str:
        state = "on" if self._enabled else "off"
        return f"{type(self).__name__}({self._name!r}, >= {self._min_severity.value}, {state})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def channel_type(self) -> ChannelType:
        return self._channel_type

    @property
    def min_severity(self) -> AlertSeverity:
        return self._min_severity

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def should_send(self, alert: Alert) -> bool:
        return self._enabled and alert.severity >= self._min_severity

    @abstractmethod
    def send(self, alert: Alert) -> DeliveryResult:
        """Deliver *alert*, reporting failure in the result rather than raising."""
