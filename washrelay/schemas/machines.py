"""Request and response schemas for hardware reports and machine views."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from washrelay.machine import MachineRecord


class HardwareReportRequest(BaseModel):
    """Body posted by a machine's controller board.

    ``machine_id`` and ``status`` are accepted for older ESP32 firmware.
    """

    model_config = ConfigDict(str_strip_whitespace=True, coerce_numbers_to_str=True)

    resource_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("resource_id", "machine_id"),
        description="Machine identifier, e.g. 'A1'",
    )
    phase: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("phase", "status"),
        description="Cycle phase: 'started' or 'finished'",
    )


class HardwareReportAck(BaseModel):
    """Response to a well-formed hardware report."""

    ok: bool = True
    accepted: bool = Field(..., description="False when the phase was not recognised")


class ErrorResponse(BaseModel):
    """Response to a malformed hardware report."""

    error: str


class MachineView(BaseModel):
    """Current state of one machine."""

    machine_id: str
    status: str
    current_user: str | None
    updated_at: datetime

    @classmethod
    def from_record(cls, record: MachineRecord) -> "MachineView":
        return cls(
            machine_id=record.machine_id,
            status=record.status.value,
            current_user=record.current_user,
            updated_at=record.updated_at,
        )


class MachineListResponse(BaseModel):
    """Response for the machine listing endpoint."""

    machines: list[MachineView]
    count: int
