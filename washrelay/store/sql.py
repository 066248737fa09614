"""SQLModel-backed record store."""

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from washrelay.db import Machine, close_db, get_session, init_db
from washrelay.exceptions import StoreError
from washrelay.machine import MachineRecord, MachineStatus
from washrelay.store.base import MachineStore


class SqlMachineStore(MachineStore):
    """Record store on the configured SQL database (SQLite by default)."""

    async def start(self) -> None:
        await init_db()

    async def close(self) -> None:
        await close_db()

    async def get(self, machine_id: str) -> MachineRecord | None:
        try:
            async with get_session() as session:
                result = await session.execute(
                    select(Machine).where(Machine.machine_id == machine_id)
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read machine '{machine_id}': {e}") from e
        return row.to_record() if row else None

    async def upsert(self, record: MachineRecord) -> None:
        try:
            async with get_session() as session:
                # merge() updates the row with the same primary key or inserts one
                await session.merge(Machine.from_record(record))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to write machine '{record.machine_id}': {e}") from e

    async def mark_idle(self, machine_id: str, updated_at: datetime) -> None:
        try:
            async with get_session() as session:
                await session.execute(
                    update(Machine)
                    .where(Machine.machine_id == machine_id)
                    .values(
                        status=MachineStatus.IDLE,
                        current_user=None,
                        updated_at=updated_at,
                    )
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to release machine '{machine_id}': {e}") from e

    async def list_all(self) -> list[MachineRecord]:
        try:
            async with get_session() as session:
                result = await session.execute(select(Machine).order_by(Machine.machine_id))
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list machines: {e}") from e
        return [row.to_record() for row in rows]
