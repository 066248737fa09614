"""Transition rules for washing machine records.

Everything here is pure: the current record and an event go in, the record
to write and the notifications to send come out. Reading and writing the
store and delivering messages is the router's job.

Register and hardware reports are always accepted (last writer wins).
Release is the only event that frees a machine, so it is checked against the
bound user and, unless the policy says otherwise, the finished state.
"""

from datetime import UTC, datetime

from washrelay import messages
from washrelay.machine.types import (
    Channel,
    Event,
    HardwareReport,
    MachineRecord,
    MachineStatus,
    Notification,
    Outcome,
    Policy,
    Register,
    Release,
    ReportPhase,
    Transition,
)

DEFAULT_POLICY = Policy()


def apply(
    current: MachineRecord | None,
    event: Event,
    *,
    now: datetime | None = None,
    policy: Policy = DEFAULT_POLICY,
) -> Transition:
    """Apply ``event`` to ``current`` (None when the machine has no record yet).

    Args:
        current: The record read from the store before handling the event.
        event: A Register, Release or HardwareReport.
        now: Timestamp for ``updated_at``; defaults to the current UTC time.
        policy: Release gate and broadcast switches.

    Returns:
        The transition describing the write and notifications.
    """
    now = now or datetime.now(UTC)

    if isinstance(event, Register):
        return _register(event, now)
    if isinstance(event, HardwareReport):
        return _report(current, event, now, policy)
    if isinstance(event, Release):
        return _release(current, event, now, policy)
    raise TypeError(f"Unsupported event: {event!r}")


def _register(event: Register, now: datetime) -> Transition:
    record = MachineRecord(
        machine_id=event.machine_id,
        status=MachineStatus.WAITING_START,
        current_user=event.user_id,
        updated_at=now,
    )
    reply = Notification(
        Channel.REPLY, messages.REGISTERED.format(machine_id=event.machine_id)
    )
    return Transition(Outcome.REGISTERED, record, [reply])


def _report(
    current: MachineRecord | None,
    event: HardwareReport,
    now: datetime,
    policy: Policy,
) -> Transition:
    # Unseen machines start out unbound; there is nobody to notify.
    user = current.current_user if current else None
    machine_id = event.machine_id
    notifications: list[Notification] = []

    if event.phase is ReportPhase.STARTED:
        status = MachineStatus.RUNNING
        outcome = Outcome.STARTED
        if user:
            notifications.append(
                Notification(
                    Channel.PUSH, messages.STARTED.format(machine_id=machine_id), to=user
                )
            )
    else:
        status = MachineStatus.FINISHED_WAIT
        outcome = Outcome.FINISHED
        if user:
            note = f"{policy.finish_note}\n" if policy.finish_note else ""
            text = messages.FINISHED.format(machine_id=machine_id, note=note)
            notifications.append(Notification(Channel.PUSH, text, to=user))
        if policy.broadcast_on_finish:
            notifications.append(
                Notification(
                    Channel.BROADCAST,
                    messages.BROADCAST_FINISHED.format(machine_id=machine_id),
                )
            )

    record = MachineRecord(machine_id, status, user, now)
    return Transition(outcome, record, notifications)


def _release(
    current: MachineRecord | None,
    event: Release,
    now: datetime,
    policy: Policy,
) -> Transition:
    machine_id = event.machine_id

    if current is None:
        return _reject(Outcome.NO_RECORD, messages.NO_RECORD.format(machine_id=machine_id))

    if current.current_user != event.user_id:
        return _reject(Outcome.NOT_OWNER, messages.NOT_OWNER.format(machine_id=machine_id))

    if policy.release_requires_finished and current.status is not MachineStatus.FINISHED_WAIT:
        label = messages.STATUS_LABELS[current.status.value]
        return _reject(
            Outcome.NOT_FINISHED,
            messages.NOT_FINISHED.format(machine_id=machine_id, status=label),
        )

    record = MachineRecord(machine_id, MachineStatus.IDLE, None, now)
    notifications = [
        Notification(Channel.REPLY, messages.RELEASED.format(machine_id=machine_id))
    ]
    if policy.broadcast_on_release:
        notifications.append(
            Notification(
                Channel.BROADCAST, messages.BROADCAST_IDLE.format(machine_id=machine_id)
            )
        )
    return Transition(Outcome.RELEASED, record, notifications)


def _reject(outcome: Outcome, text: str) -> Transition:
    return Transition(outcome, None, [Notification(Channel.REPLY, text)])
