"""Shared fixtures for the sync pipeline tests.

Fakes stand in for the Vapi provider, the entry store and the LLM backend so
the pipeline can be exercised without network access.
"""

from typing import Dict, Iterable, List, Optional

import pytest

from chronicle.config import Settings
from chronicle.db import InMemoryDB
from chronicle.errors import GenerationError, ProviderError, StorageError
from chronicle.schemas.pydantic_schemas import PersistedEntry, RemoteCallRecord


class FakeProvider:
    def __init__(
        self,
        calls: Optional[List[RemoteCallRecord]] = None,
        details: Optional[Dict[str, RemoteCallRecord]] = None,
        fail_listing: bool = False,
        fail_ids: Iterable[str] = (),
    ) -> None:
        self.calls = calls or []
        self.details = details or {}
        self.fail_listing = fail_listing
        self.fail_ids = set(fail_ids)
        self.detail_requests: List[str] = []

    async def list_calls(self) -> List[RemoteCallRecord]:
        if self.fail_listing:
            raise ProviderError("Vapi API error: 401", status_code=401)
        return list(self.calls)

    async def get_call(self, call_id: str) -> RemoteCallRecord:
        self.detail_requests.append(call_id)
        if call_id in self.fail_ids:
            raise ProviderError("Vapi API error: 404", call_id=call_id, status_code=404)
        return self.details.get(call_id) or RemoteCallRecord(id=call_id)


class FakeGenerator:
    def __init__(self, fail_on: Iterable[str] = ()) -> None:
        self.fail_on = set(fail_on)
        self.requests: List[str] = []

    async def clean_transcript(self, transcript: str) -> str:
        self.requests.append(transcript)
        if transcript in self.fail_on:
            raise GenerationError("Failed to clean transcript: InternalServerError")
        return f"Dear diary: {transcript}"


class RecordingDB(InMemoryDB):
    """In-memory store that records every call made against it."""

    def __init__(self) -> None:
        super().__init__()
        self.operations: List[str] = []
        self.fail_upserts_for: set = set()

    async def list_persisted_call_ids(self, call_ids=None):
        self.operations.append("list_persisted_call_ids")
        return await super().list_persisted_call_ids(call_ids)

    async def upsert_entry(self, entry: PersistedEntry) -> PersistedEntry:
        self.operations.append(f"upsert:{entry.call_id}")
        if entry.call_id in self.fail_upserts_for:
            raise StorageError("Supabase error: connection reset")
        return await super().upsert_entry(entry)

    async def list_entries(self):
        self.operations.append("list_entries")
        return await super().list_entries()


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings with every external backend unconfigured."""
    for name in (
        "VAPI_API_KEY",
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "GROQ_API_KEY",
        "OPENAI_API_KEY",
        "REUSE_CLEANED_NARRATIVES",
        "DEFAULT_PHONE_NUMBER",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings()


@pytest.fixture
def store() -> RecordingDB:
    return RecordingDB()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()
