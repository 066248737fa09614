"""Notification sender interface.

Delivery is best effort: senders log failures and return False instead of
raising, and callers may ignore the result. Nothing is retried.
"""

from abc import ABC, abstractmethod


class NotificationSender(ABC):
    """Delivers text messages to platform users."""

    async def close(self) -> None:
        """Release client resources."""

    @abstractmethod
    async def reply(self, reply_token: str, text: str) -> bool:
        """Answer a webhook event using its one-shot reply token."""

    @abstractmethod
    async def push(self, to: str, text: str) -> bool:
        """Send a message to one user id."""

    @abstractmethod
    async def broadcast(self, text: str) -> bool:
        """Send a message to every user who follows the bot."""
