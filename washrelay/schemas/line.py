"""LINE webhook payload schemas.

Only text message events are modelled. Events of any other kind or shape are
dropped by ``parse_text_events`` and never reach the router.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from washrelay.logging import get_logger

logger = get_logger(__name__)


class TextMessage(BaseModel):
    """The ``message`` object of a text message event."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["text"]
    text: str


class EventSource(BaseModel):
    """The ``source`` object; only the sender's user id is used."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)


class TextMessageEvent(BaseModel):
    """A user sent the bot a text message."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Literal["message"]
    message: TextMessage
    source: EventSource
    reply_token: str = Field(..., alias="replyToken")


def parse_text_events(body: Any) -> list[TextMessageEvent]:
    """Extract the text message events from a webhook body.

    Args:
        body: Decoded JSON body, expected as ``{"events": [...]}``.

    Returns:
        Valid text message events in delivery order.
    """
    if not isinstance(body, dict):
        return []
    raw_events = body.get("events")
    if not isinstance(raw_events, list):
        return []

    events = []
    for raw in raw_events:
        try:
            events.append(TextMessageEvent.model_validate(raw))
        except ValidationError:
            kind = raw.get("type") if isinstance(raw, dict) else None
            logger.debug("webhook_event_ignored", event_type=kind)
    return events
