"""Process-local record store.

Starts empty and fills lazily; contents are lost on restart.
"""

from dataclasses import replace
from datetime import datetime

from washrelay.machine import MachineRecord, MachineStatus
from washrelay.store.base import MachineStore


class InMemoryMachineStore(MachineStore):
    """Record store backed by a dict."""

    def __init__(self) -> None:
        self._records: dict[str, MachineRecord] = {}

    async def get(self, machine_id: str) -> MachineRecord | None:
        return self._records.get(machine_id)

    async def upsert(self, record: MachineRecord) -> None:
        self._records[record.machine_id] = record

    async def mark_idle(self, machine_id: str, updated_at: datetime) -> None:
        # Like an UPDATE ... WHERE, a missing row is left missing.
        record = self._records.get(machine_id)
        if record is not None:
            self._records[machine_id] = replace(
                record,
                status=MachineStatus.IDLE,
                current_user=None,
                updated_at=updated_at,
            )

    async def list_all(self) -> list[MachineRecord]:
        return [self._records[key] for key in sorted(self._records)]
