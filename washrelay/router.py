"""Event router.

Turns webhook text messages and hardware reports into machine events, then
runs the store write and notifications the state machine decides on.

Each event is handled once as read, decide, write, notify. There is no
locking, so two events for the same machine can interleave and the later
write wins. Failures never propagate: store errors become an apology reply
(user commands) or a log entry (hardware reports), and notification errors
are only logged.
"""

from collections.abc import Awaitable, Callable

from washrelay import messages
from washrelay.commands import Help, Usage, parse_command
from washrelay.exceptions import StoreError
from washrelay.logging import get_logger
from washrelay.machine import (
    Channel,
    Event,
    HardwareReport,
    Policy,
    Register,
    Transition,
    apply,
)
from washrelay.metrics import record_notification, record_transition
from washrelay.notify import NotificationSender
from washrelay.schemas import TextMessageEvent
from washrelay.store import MachineStore

logger = get_logger(__name__)


class EventRouter:
    """Dispatches inbound events to the machine state machine.

    Args:
        store: Where machine records live.
        sender: How notifications are delivered.
        policy: Release gate and broadcast switches.
    """

    def __init__(
        self,
        store: MachineStore,
        sender: NotificationSender,
        policy: Policy | None = None,
    ) -> None:
        self.store = store
        self.sender = sender
        self.policy = policy or Policy()

    async def handle_webhook_events(self, events: list[TextMessageEvent]) -> None:
        """Handle webhook events one by one; a failing event does not stop the rest."""
        for event in events:
            try:
                await self.handle_text_message(event)
            except Exception:
                logger.exception("text_message_failed", user_id=event.source.user_id)

    async def handle_text_message(self, event: TextMessageEvent) -> Transition | None:
        """Handle one text message and reply to its sender.

        Returns:
            The transition when the text was a complete command and the
            store could be reached, otherwise None.
        """
        user_id = event.source.user_id
        reply_token = event.reply_token
        logger.info("text_message_received", user_id=user_id, text=event.message.text)

        command = parse_command(event.message.text, user_id)
        if isinstance(command, Help):
            await self._deliver(Channel.REPLY, self.sender.reply, reply_token, command.text)
            return None
        if isinstance(command, Usage):
            await self._deliver(Channel.REPLY, self.sender.reply, reply_token, command.hint)
            return None

        try:
            transition = await self._apply(command)
        except Exception as e:
            # StoreError is expected; anything else also gets a traceback
            logger.error(
                "store_failed",
                machine_id=command.machine_id,
                event_type=_event_name(command),
                error=str(e),
                exc_info=not isinstance(e, StoreError),
            )
            apology = (
                messages.REGISTER_FAILED
                if isinstance(command, Register)
                else messages.RELEASE_FAILED
            )
            await self._deliver(Channel.REPLY, self.sender.reply, reply_token, apology)
            return None

        await self._notify(transition, reply_token)
        return transition

    async def dispatch_hardware_report(self, report: HardwareReport) -> None:
        """Background entry point for a report; nothing raised here escapes."""
        try:
            await self.handle_hardware_report(report)
        except Exception:
            logger.exception("hardware_report_failed", machine_id=report.machine_id)

    async def handle_hardware_report(self, report: HardwareReport) -> Transition | None:
        """Apply a hardware report; store failures are logged and dropped."""
        logger.info(
            "hardware_report_received",
            machine_id=report.machine_id,
            phase=report.phase.value,
        )
        try:
            transition = await self._apply(report)
        except StoreError as e:
            logger.error(
                "store_failed",
                machine_id=report.machine_id,
                event_type=_event_name(report),
                error=str(e),
            )
            return None

        await self._notify(transition, reply_token=None)
        return transition

    async def _apply(self, event: Event) -> Transition:
        current = await self.store.get(event.machine_id)
        transition = apply(current, event, policy=self.policy)

        if transition.released:
            await self.store.mark_idle(event.machine_id, transition.record.updated_at)
        elif transition.record is not None:
            await self.store.upsert(transition.record)

        record_transition(_event_name(event), transition.outcome.value)
        new = transition.record or current
        logger.info(
            "machine_transition",
            machine_id=event.machine_id,
            event_type=_event_name(event),
            outcome=transition.outcome.value,
            status=new.status.value if new else None,
            current_user=new.current_user if new else None,
        )
        return transition

    async def _notify(self, transition: Transition, reply_token: str | None) -> None:
        for notification in transition.notifications:
            if notification.channel is Channel.REPLY:
                if reply_token is None:
                    logger.warning("reply_without_token", text=notification.text)
                    continue
                await self._deliver(
                    Channel.REPLY, self.sender.reply, reply_token, notification.text
                )
            elif notification.channel is Channel.PUSH:
                await self._deliver(
                    Channel.PUSH, self.sender.push, notification.to, notification.text
                )
            else:
                await self._deliver(Channel.BROADCAST, self.sender.broadcast, notification.text)

    async def _deliver(
        self,
        channel: Channel,
        send: Callable[..., Awaitable[bool]],
        *args: str,
    ) -> bool:
        try:
            delivered = await send(*args)
        except Exception:
            logger.exception("notification_failed", channel=channel.value)
            delivered = False
        record_notification(channel.value, delivered)
        return delivered


def _event_name(event: Event) -> str:
    if isinstance(event, HardwareReport):
        return "hardware_report"
    return type(event).__name__.lower()
