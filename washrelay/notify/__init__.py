"""Outbound notification senders."""

from washrelay.notify.base import NotificationSender
from washrelay.notify.line import LineMessagingClient

__all__ = ["LineMessagingClient", "NotificationSender"]
