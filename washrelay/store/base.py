"""Record store interface.

Stores give no transactional guarantees. Handlers read a record, decide, and
write the whole record back, so concurrent events for the same machine can
overwrite each other (last write wins).
"""

from abc import ABC, abstractmethod
from datetime import datetime

from washrelay.machine import MachineRecord


class MachineStore(ABC):
    """Durable mapping from machine id to its current record.

    Implementations raise ``StoreError`` for any backend failure.
    """

    async def start(self) -> None:
        """Prepare the backend (create tables, open clients)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def get(self, machine_id: str) -> MachineRecord | None:
        """Return the record for ``machine_id`` or None if it was never seen."""

    @abstractmethod
    async def upsert(self, record: MachineRecord) -> None:
        """Insert or fully replace the record with the same machine id."""

    @abstractmethod
    async def mark_idle(self, machine_id: str, updated_at: datetime) -> None:
        """Set the machine idle and clear its bound user."""

    @abstractmethod
    async def list_all(self) -> list[MachineRecord]:
        """Return all known records ordered by machine id."""
