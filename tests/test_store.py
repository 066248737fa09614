"""Tests for the machine record stores."""

import json
from datetime import UTC, datetime

import httpx
import pytest
import pytest_asyncio

from washrelay.config import Settings
from washrelay.exceptions import StoreError
from washrelay.machine import MachineRecord, MachineStatus
from washrelay.store import (
    InMemoryMachineStore,
    SqlMachineStore,
    SupabaseMachineStore,
    create_store,
)

T1 = datetime(2026, 10, 17, 8, 0, tzinfo=UTC)
T2 = datetime(2026, 10, 17, 9, 0, tzinfo=UTC)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def any_store(request, tmp_path, monkeypatch):
    """Each store implementation; SQL runs on a throwaway SQLite file."""
    if request.param == "memory":
        yield InMemoryMachineStore()
        return

    import washrelay.db.engine

    settings = Settings(_env_file=None, database_url=f"sqlite+aiosqlite:///{tmp_path}/test.db")
    monkeypatch.setattr(washrelay.db.engine, "get_settings", lambda: settings)
    washrelay.db.engine._engine = None

    store = SqlMachineStore()
    await store.start()
    yield store
    await store.close()


@pytest.mark.asyncio
class TestStoreContract:
    """Behaviour every store shares."""

    async def test_unknown_machine(self, any_store):
        assert await any_store.get("A1") is None

    async def test_upsert_then_get(self, any_store):
        record = MachineRecord("A1", MachineStatus.WAITING_START, "U1", T1)
        await any_store.upsert(record)
        assert await any_store.get("A1") == record

    async def test_upsert_replaces_whole_record(self, any_store):
        await any_store.upsert(MachineRecord("A1", MachineStatus.WAITING_START, "U1", T1))
        await any_store.upsert(MachineRecord("A1", MachineStatus.RUNNING, None, T2))
        assert await any_store.get("A1") == MachineRecord("A1", MachineStatus.RUNNING, None, T2)

    async def test_mark_idle_clears_binding(self, any_store):
        await any_store.upsert(MachineRecord("A1", MachineStatus.FINISHED_WAIT, "U1", T1))
        await any_store.mark_idle("A1", T2)
        assert await any_store.get("A1") == MachineRecord("A1", MachineStatus.IDLE, None, T2)

    async def test_mark_idle_on_unknown_machine_does_nothing(self, any_store):
        await any_store.mark_idle("A1", T2)
        assert await any_store.get("A1") is None

    async def test_list_all_is_sorted(self, any_store):
        await any_store.upsert(MachineRecord("B1", MachineStatus.RUNNING, None, T1))
        await any_store.upsert(MachineRecord("A1", MachineStatus.IDLE, None, T1))
        assert [r.machine_id for r in await any_store.list_all()] == ["A1", "B1"]


class SupabaseHandler:
    """Fake PostgREST endpoint for the machines table."""

    def __init__(self, rows=None, status_code=200):
        self.rows = rows or []
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "boom"})
        if request.method == "GET":
            return httpx.Response(200, json=self.rows)
        return httpx.Response(201 if request.method == "POST" else 204)


def supabase_store(handler) -> SupabaseMachineStore:
    return SupabaseMachineStore(
        "https://proj.supabase.co/",
        "service-key",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestSupabaseStore:
    """Tests for the PostgREST-backed store."""

    async def test_get_queries_by_machine_id(self):
        handler = SupabaseHandler(
            rows=[
                {
                    "machine_id": "A1",
                    "status": "running",
                    "current_user": "U1",
                    "updated_at": "2026-10-17T08:00:00+00:00",
                }
            ]
        )
        store = supabase_store(handler)
        record = await store.get("A1")
        await store.close()

        assert record == MachineRecord("A1", MachineStatus.RUNNING, "U1", T1)
        request = handler.requests[0]
        assert request.url.path == "/rest/v1/machines"
        assert request.url.params["machine_id"] == "eq.A1"
        assert request.headers["apikey"] == "service-key"
        assert request.headers["Authorization"] == "Bearer service-key"

    async def test_get_unknown_machine(self):
        store = supabase_store(SupabaseHandler(rows=[]))
        assert await store.get("A1") is None
        await store.close()

    async def test_upsert_merges_duplicates(self):
        handler = SupabaseHandler()
        store = supabase_store(handler)
        await store.upsert(MachineRecord("A1", MachineStatus.WAITING_START, "U1", T1))
        await store.close()

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.headers["Prefer"] == "resolution=merge-duplicates"
        assert json.loads(request.content) == {
            "machine_id": "A1",
            "status": "waiting_start",
            "current_user": "U1",
            "updated_at": "2026-10-17T08:00:00+00:00",
        }

    async def test_mark_idle_patches(self):
        handler = SupabaseHandler()
        store = supabase_store(handler)
        await store.mark_idle("A1", T2)
        await store.close()

        request = handler.requests[0]
        assert request.method == "PATCH"
        assert request.url.params["machine_id"] == "eq.A1"
        body = json.loads(request.content)
        assert body["status"] == "idle"
        assert body["current_user"] is None

    async def test_http_error_becomes_store_error(self):
        store = supabase_store(SupabaseHandler(status_code=500))
        with pytest.raises(StoreError):
            await store.upsert(MachineRecord("A1", MachineStatus.IDLE, None, T1))
        await store.close()

    async def test_connection_error_becomes_store_error(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        store = supabase_store(refuse)
        with pytest.raises(StoreError):
            await store.get("A1")
        await store.close()


class TextHandler:
    """Fake endpoint answering every request with a fixed body."""

    def __init__(self, body, content_type="application/json"):
        self.body = body
        self.content_type = content_type

    def __call__(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=self.body.encode(), headers={"Content-Type": self.content_type}
        )


@pytest.mark.asyncio
class TestSupabaseMalformedResponses:
    """Unexpected response bodies are reported as StoreError."""

    async def test_non_json_body(self):
        store = supabase_store(TextHandler("<html>gateway</html>", "text/html"))
        with pytest.raises(StoreError):
            await store.get("A1")
        await store.close()

    async def test_unknown_status_value(self):
        row = {
            "machine_id": "A1",
            "status": "broken",
            "current_user": None,
            "updated_at": "2026-10-17T08:00:00+00:00",
        }
        store = supabase_store(SupabaseHandler(rows=[row]))
        with pytest.raises(StoreError):
            await store.get("A1")
        await store.close()

    async def test_row_missing_fields(self):
        store = supabase_store(SupabaseHandler(rows=[{"machine_id": "A1"}]))
        with pytest.raises(StoreError):
            await store.list_all()
        await store.close()

    async def test_object_instead_of_rows(self):
        store = supabase_store(TextHandler(json.dumps({"message": "oops"})))
        with pytest.raises(StoreError):
            await store.list_all()
        await store.close()


class TestCreateStore:
    def test_memory(self):
        settings = Settings(_env_file=None, store_backend="memory")
        assert isinstance(create_store(settings), InMemoryMachineStore)

    def test_sql_is_default(self):
        assert isinstance(create_store(Settings(_env_file=None)), SqlMachineStore)

    def test_supabase_requires_credentials(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
        with pytest.raises(ValueError):
            create_store(Settings(_env_file=None, store_backend="supabase"))
