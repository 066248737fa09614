"""Record store on a Supabase ``machines`` table through its PostgREST API.

Rows look like ``{"machine_id", "status", "current_user", "updated_at"}``.
Upserts rely on ``Prefer: resolution=merge-duplicates`` with ``machine_id``
as the primary key.
"""

from datetime import datetime
from typing import Any

import httpx

from washrelay.exceptions import StoreError
from washrelay.logging import get_logger
from washrelay.machine import MachineRecord, MachineStatus
from washrelay.store.base import MachineStore

logger = get_logger(__name__)


def _to_row(record: MachineRecord) -> dict[str, Any]:
    return {
        "machine_id": record.machine_id,
        "status": record.status.value,
        "current_user": record.current_user,
        "updated_at": record.updated_at.isoformat(),
    }


def _from_row(row: dict[str, Any]) -> MachineRecord:
    return MachineRecord(
        machine_id=row["machine_id"],
        status=MachineStatus(row["status"]),
        current_user=row.get("current_user"),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _decode(response: httpx.Response) -> list[MachineRecord]:
    try:
        return [_from_row(row) for row in response.json()]
    except (ValueError, KeyError, TypeError) as e:
        logger.error("supabase_response_invalid", body=response.text[:200], error=str(e))
        raise StoreError(f"Unexpected Supabase response: {e}") from e


class SupabaseMachineStore(MachineStore):
    """Record store talking to ``{url}/rest/v1/machines``.

    Args:
        url: The Supabase project URL.
        service_key: Service role key, sent as ``apikey`` and bearer token.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, "/machines", **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "supabase_request_failed",
                method=method,
                status_code=e.response.status_code,
                body=e.response.text,
            )
            raise StoreError(f"Supabase {method} failed with {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise StoreError(f"Supabase {method} failed: {e}") from e
        return response

    async def get(self, machine_id: str) -> MachineRecord | None:
        response = await self._send(
            "GET", params={"machine_id": f"eq.{machine_id}", "select": "*"}
        )
        records = _decode(response)
        return records[0] if records else None

    async def upsert(self, record: MachineRecord) -> None:
        await self._send(
            "POST",
            json=_to_row(record),
            headers={"Prefer": "resolution=merge-duplicates"},
        )

    async def mark_idle(self, machine_id: str, updated_at: datetime) -> None:
        await self._send(
            "PATCH",
            params={"machine_id": f"eq.{machine_id}"},
            json={
                "status": MachineStatus.IDLE.value,
                "current_user": None,
                "updated_at": updated_at.isoformat(),
            },
        )

    async def list_all(self) -> list[MachineRecord]:
        response = await self._send("GET", params={"select": "*", "order": "machine_id.asc"})
        return _decode(response)
