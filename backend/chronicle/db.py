from typing import Any, Dict, Iterable, List, Optional, Set
import logging

# Lightweight adapter over the Supabase client, with an in-memory fallback when SUPABASE_URL is missing.
from supabase import acreate_client, AsyncClient

from .config import Settings
from .errors import StorageError
from .schemas.pydantic_schemas import PersistedEntry

logger = logging.getLogger(__name__)


def _row_from_entry(entry: PersistedEntry) -> Dict[str, Any]:
    # Only send populated columns so an upsert updates rather than blanks existing values
    return {k: v for k, v in entry.model_dump().items() if v is not None}


class InMemoryDB:
    def __init__(self) -> None:
        self.entries: Dict[str, Dict[str, Any]] = {}

    async def list_persisted_call_ids(self, call_ids: Optional[Iterable[str]] = None) -> Set[str]:
        if call_ids is None:
            return set(self.entries)
        return {cid for cid in call_ids if cid in self.entries}

    async def upsert_entry(self, entry: PersistedEntry) -> PersistedEntry:
        current = self.entries.get(entry.call_id, {})
        merged = dict(current)
        merged.update(_row_from_entry(entry))
        self.entries[entry.call_id] = merged
        return PersistedEntry(**merged)

    async def list_entries(self) -> List[PersistedEntry]:
        return [PersistedEntry(**row) for row in self.entries.values()]

    async def get_entry(self, call_id: str) -> Optional[PersistedEntry]:
        row = self.entries.get(call_id)
        return PersistedEntry(**row) if row else None


class SupabaseDB:
    def __init__(self, client: AsyncClient, table: str = "entry") -> None:
        self.client = client
        self.table = table

    async def list_persisted_call_ids(self, call_ids: Optional[Iterable[str]] = None) -> Set[str]:
        try:
            query = self.client.table(self.table).select("call_id")
            if call_ids is not None:
                ids = list(call_ids)
                if not ids:
                    return set()
                query = query.in_("call_id", ids)
            res = await query.execute()
        except Exception as e:
            logger.error(f"Supabase error listing call ids: {e}")
            raise StorageError(f"Supabase error: {e}") from e
        return {row["call_id"] for row in (res.data or [])}

    async def upsert_entry(self, entry: PersistedEntry) -> PersistedEntry:
        try:
            res = await self.client.table(self.table).upsert(_row_from_entry(entry), on_conflict="call_id").execute()
        except Exception as e:
            logger.error(f"Supabase error upserting entry {entry.call_id}: {e}")
            raise StorageError(f"Supabase error: {e}") from e
        rows = res.data or []
        return PersistedEntry(**rows[0]) if rows else entry

    async def list_entries(self) -> List[PersistedEntry]:
        try:
            res = await self.client.table(self.table).select("call_id, created_at, transcript, cleaned_narrative").execute()
        except Exception as e:
            logger.error(f"Supabase error listing entries: {e}")
            raise StorageError(f"Supabase error: {e}") from e
        return [PersistedEntry(**row) for row in (res.data or [])]

    async def get_entry(self, call_id: str) -> Optional[PersistedEntry]:
        try:
            res = await self.client.table(self.table).select("*").eq("call_id", call_id).limit(1).execute()
        except Exception as e:
            raise StorageError(f"Supabase error: {e}") from e
        rows = res.data or []
        return PersistedEntry(**rows[0]) if rows else None


async def create_db(settings: Settings):
    """Build the entry store: Supabase when configured, otherwise in-memory."""
    if settings.supabase_configured:
        client = await acreate_client(settings.supabase_url, settings.supabase_key)
        logger.info(f"Using Supabase entry store (table {settings.entry_table})")
        return SupabaseDB(client, table=settings.entry_table)
    logger.info("SUPABASE_URL not set; using in-memory entry store")
    return InMemoryDB()
