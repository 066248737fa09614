"""Types shared by the machine state machine and its collaborators."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MachineStatus(str, Enum):
    """Availability state of a washing machine."""

    IDLE = "idle"
    WAITING_START = "waiting_start"
    RUNNING = "running"
    FINISHED_WAIT = "finished_wait"


class ReportPhase(str, Enum):
    """Cycle phase announced by a hardware reporter."""

    STARTED = "started"
    FINISHED = "finished"


class Channel(str, Enum):
    """How a notification is delivered."""

    REPLY = "reply"  # answers the webhook event that triggered it
    PUSH = "push"
    BROADCAST = "broadcast"


class Outcome(str, Enum):
    """What a transition did, used for replies, logs and metrics."""

    REGISTERED = "registered"
    STARTED = "started"
    FINISHED = "finished"
    RELEASED = "released"
    NO_RECORD = "no_record"
    NOT_OWNER = "not_owner"
    NOT_FINISHED = "not_finished"


@dataclass(frozen=True)
class MachineRecord:
    """Stored state of one machine, keyed by ``machine_id``."""

    machine_id: str
    status: MachineStatus
    current_user: str | None
    updated_at: datetime


@dataclass(frozen=True)
class Register:
    machine_id: str
    user_id: str


@dataclass(frozen=True)
class Release:
    machine_id: str
    user_id: str


@dataclass(frozen=True)
class HardwareReport:
    machine_id: str
    phase: ReportPhase


Event = Register | Release | HardwareReport


@dataclass(frozen=True)
class Notification:
    """A message to send as a side effect of a transition.

    ``to`` is only set for push notifications; replies are addressed by the
    reply token of the triggering event.
    """

    channel: Channel
    text: str
    to: str | None = None


@dataclass(frozen=True)
class Policy:
    """Tunable parts of the machine rules."""

    release_requires_finished: bool = True
    broadcast_on_finish: bool = False
    broadcast_on_release: bool = False
    finish_note: str = ""


@dataclass(frozen=True)
class Transition:
    """Result of applying an event to a machine record.

    ``record`` is the record to write, or None when nothing changes.
    ``released`` marks a release, which the store applies as a mark-idle
    update instead of a full upsert.
    """

    outcome: Outcome
    record: MachineRecord | None
    notifications: list[Notification] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.record is not None

    @property
    def released(self) -> bool:
        return self.outcome is Outcome.RELEASED
