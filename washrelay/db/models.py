"""Database models for washrelay persistence."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

from washrelay.machine import MachineRecord, MachineStatus


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class Machine(SQLModel, table=True):
    """Current record of one washing machine.

    Same shape as the ``machines`` table used with Supabase.
    """

    __tablename__ = "machines"
    __table_args__ = {"extend_existing": True}

    machine_id: str = Field(primary_key=True)  # free-form, user supplied
    status: MachineStatus = Field(default=MachineStatus.IDLE, index=True)
    current_user: str | None = Field(default=None)
    updated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_record(cls, record: MachineRecord) -> "Machine":
        return cls(
            machine_id=record.machine_id,
            status=record.status,
            current_user=record.current_user,
            updated_at=record.updated_at,
        )

    def to_record(self) -> MachineRecord:
        # SQLite stores naive datetimes, treat as UTC
        updated_at = self.updated_at
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=UTC)
        return MachineRecord(
            machine_id=self.machine_id,
            status=MachineStatus(self.status),
            current_user=self.current_user,
            updated_at=updated_at,
        )
