"""Machine record stores."""

from washrelay.config import Settings
from washrelay.store.base import MachineStore
from washrelay.store.memory import InMemoryMachineStore
from washrelay.store.sql import SqlMachineStore
from washrelay.store.supabase import SupabaseMachineStore


def create_store(settings: Settings) -> MachineStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return InMemoryMachineStore()
    if settings.store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase store needs SUPABASE_URL and SUPABASE_SERVICE_KEY")
        return SupabaseMachineStore(
            settings.supabase_url,
            settings.supabase_service_key,
            timeout=settings.http_timeout,
        )
    return SqlMachineStore()


__all__ = [
    "create_store",
    "InMemoryMachineStore",
    "MachineStore",
    "SqlMachineStore",
    "SupabaseMachineStore",
]
