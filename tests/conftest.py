"""Shared test fixtures for pytest."""

import pytest

from washrelay.config import Settings
from washrelay.notify import NotificationSender
from washrelay.router import EventRouter
from washrelay.schemas import TextMessageEvent
from washrelay.store import InMemoryMachineStore


class RecordingSender(NotificationSender):
    """Sender that records every message instead of calling LINE.

    Set ``fail`` to make every call report failure, or ``error`` to make
    every call raise.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[str, str | None, str]] = []
        self.fail = False
        self.error: Exception | None = None

    async def _record(self, channel: str, target: str | None, text: str) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((channel, target, text))
        return not self.fail

    async def reply(self, reply_token: str, text: str) -> bool:
        return await self._record("reply", reply_token, text)

    async def push(self, to: str, text: str) -> bool:
        return await self._record("push", to, text)

    async def broadcast(self, text: str) -> bool:
        return await self._record("broadcast", None, text)

    def on(self, channel: str) -> list[tuple[str | None, str]]:
        return [(target, text) for ch, target, text in self.sent if ch == channel]


@pytest.fixture
def sender():
    """A recording notification sender."""
    return RecordingSender()


@pytest.fixture
def store():
    """A fresh in-memory machine store."""
    return InMemoryMachineStore()


@pytest.fixture
def router(store, sender):
    """An event router over the in-memory store and recording sender."""
    return EventRouter(store, sender)


@pytest.fixture
def text_event():
    """Factory for LINE text message events."""

    def make(text: str, user_id: str = "U1", reply_token: str = "rt-1") -> TextMessageEvent:
        return TextMessageEvent.model_validate(
            {
                "type": "message",
                "replyToken": reply_token,
                "source": {"type": "user", "userId": user_id},
                "message": {"type": "text", "id": "1", "text": text},
            }
        )

    return make


@pytest.fixture
def settings():
    """Settings for an in-memory store, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        store_backend="memory",
        line_channel_access_token="test-token",
        log_level="WARNING",
    )


@pytest.fixture
def client(settings, store, sender):
    """Test client for the server wired to the in-memory store and recording sender."""
    from fastapi.testclient import TestClient

    from washrelay.server import create_app

    app = create_app(settings=settings, store=store, sender=sender)
    with TestClient(app) as test_client:
        yield test_client
