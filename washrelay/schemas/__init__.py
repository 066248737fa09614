"""Inbound and outbound payload schemas."""

from washrelay.schemas.line import (
    EventSource,
    TextMessage,
    TextMessageEvent,
    parse_text_events,
)
from washrelay.schemas.machines import (
    ErrorResponse,
    HardwareReportAck,
    HardwareReportRequest,
    MachineListResponse,
    MachineView,
)

__all__ = [
    "ErrorResponse",
    "EventSource",
    "HardwareReportAck",
    "HardwareReportRequest",
    "MachineListResponse",
    "MachineView",
    "TextMessage",
    "TextMessageEvent",
    "parse_text_events",
]
