"""Washing machine binding state machine."""

from washrelay.machine.transitions import apply
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

__all__ = [
    "apply",
    "Channel",
    "Event",
    "HardwareReport",
    "MachineRecord",
    "MachineStatus",
    "Notification",
    "Outcome",
    "Policy",
    "Register",
    "Release",
    "ReportPhase",
    "Transition",
]
