"""LINE Messaging API sender."""

from typing import Any

import httpx

from washrelay.logging import get_logger
from washrelay.notify.base import NotificationSender

logger = get_logger(__name__)


class LineMessagingClient(NotificationSender):
    """Sends text messages through the LINE Messaging API.

    Args:
        channel_access_token: Long-lived channel access token.
        base_url: API root, "https://api.line.me" unless testing.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        channel_access_token: str,
        base_url: str = "https://api.line.me",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {channel_access_token}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def reply(self, reply_token: str, text: str) -> bool:
        return await self._post(
            "/v2/bot/message/reply", {"replyToken": reply_token}, text, kind="reply"
        )

    async def push(self, to: str, text: str) -> bool:
        return await self._post("/v2/bot/message/push", {"to": to}, text, kind="push")

    async def broadcast(self, text: str) -> bool:
        return await self._post("/v2/bot/message/broadcast", {}, text, kind="broadcast")

    async def _post(self, path: str, target: dict[str, Any], text: str, kind: str) -> bool:
        payload = {**target, "messages": [{"type": "text", "text": text}]}
        try:
            response = await self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "line_send_failed",
                kind=kind,
                status_code=e.response.status_code,
                body=e.response.text,
            )
            return False
        except httpx.HTTPError as e:
            logger.error("line_send_failed", kind=kind, error=str(e))
            return False
        logger.debug("line_sent", kind=kind)
        return True
