import asyncio
import logging
from typing import Dict, List, Optional

from ..config import Settings, get_settings
from ..errors import ChronicleError, ProviderError, StorageError
from ..schemas.pydantic_schemas import (
    FetchOutcome,
    PersistedEntry,
    ProcessedCall,
    RemoteCallRecord,
    SyncResult,
)
from .narrative_cleaner import NarrativeCleaner
from .reconciliation import diff
from .timestamps import resolve_timestamp
from .transcript_fetcher import TranscriptFetcher

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Runs one provider-to-journal sync.

    Stages run one after another and each fans out over the whole batch:
    list remote calls, reconcile against stored ids, fetch missing
    transcripts, load stored timestamps, clean narratives, assemble entries.
    Only a failed listing fails the run; everything else degrades per call.
    """

    def __init__(self, provider, store, generator, settings: Optional[Settings] = None) -> None:
        self.provider = provider
        self.store = store
        self.settings = settings or get_settings()
        self.fetcher = TranscriptFetcher(provider, store)
        self.cleaner = NarrativeCleaner(generator)

    async def run(self) -> SyncResult:
        try:
            calls = await self.provider.list_calls()
        except ProviderError as e:
            logger.error(f"Failed to fetch calls from provider: {e}")
            return SyncResult(ok=False, error=str(e))
        logger.info(f"Sync started with {len(calls)} remote calls")
        if not calls:
            return SyncResult(ok=True)

        remote_ids = [call.id for call in calls]
        missing = await self._find_missing(remote_ids)

        outcomes: List[FetchOutcome] = []
        if missing:
            ordered = [cid for cid in dict.fromkeys(remote_ids) if cid in missing]
            outcomes = await self.fetcher.fetch_and_store(ordered)
            failed = [o for o in outcomes if not o.success]
            if failed:
                logger.warning(f"{len(failed)} of {len(outcomes)} transcript fetches failed: {[o.id for o in failed]}")

        persisted = await self._load_persisted()
        entries = await asyncio.gather(*[self._process_call(call, persisted.get(call.id)) for call in calls])
        cleaned = sum(1 for e in entries if e.cleanedNarrative)
        logger.info(f"Sync finished: {len(entries)} entries, {cleaned} with narratives")
        return SyncResult(ok=True, entries=list(entries), fetch_outcomes=outcomes)

    async def _find_missing(self, remote_ids: List[str]) -> set:
        try:
            persisted_ids = await self.store.list_persisted_call_ids(remote_ids)
        except StorageError as e:
            # Upserts are idempotent, so re-fetching everything is safe
            logger.warning(f"Could not check stored calls, treating all as missing: {e}")
            persisted_ids = set()
        existing, missing = diff(remote_ids, persisted_ids)
        logger.info(f"Reconciled calls: {len(existing)} existing, {len(missing)} missing")
        return missing

    async def _load_persisted(self) -> Dict[str, PersistedEntry]:
        try:
            entries = await self.store.list_entries()
        except StorageError as e:
            logger.warning(f"Could not load stored entries for timestamp hints: {e}")
            return {}
        return {entry.call_id: entry for entry in entries}

    async def _process_call(self, call: RemoteCallRecord, stored: Optional[PersistedEntry]) -> ProcessedCall:
        hints = [stored.created_at if stored else None] + call.date_hints()
        timestamp = resolve_timestamp(hints, call.id, strict=True)
        transcript = call.transcript or (stored.transcript if stored else None)
        narrative = None

        if stored and stored.cleaned_narrative and self.settings.reuse_cleaned_narratives:
            narrative = stored.cleaned_narrative
        elif transcript and transcript.strip():
            try:
                result = await self.cleaner.clean(transcript, hints, call.id)
            except ChronicleError as e:
                logger.warning(f"Skipping narrative cleaning for call {call.id}: {e}")
            except Exception:
                logger.exception(f"Unexpected error cleaning call {call.id}")
            else:
                narrative = result.cleanedNarrative
                timestamp = result.createdAt
                if stored:
                    await self._save_narrative(call.id, narrative, timestamp)

        return ProcessedCall(
            id=call.id,
            timestamp=timestamp,
            createdAt=timestamp,
            transcript=transcript,
            cleanedNarrative=narrative,
            title=call.title,
        )

    async def _save_narrative(self, call_id: str, narrative: str, created_at: str) -> None:
        try:
            await self.store.upsert_entry(
                PersistedEntry(call_id=call_id, cleaned_narrative=narrative, created_at=created_at)
            )
        except StorageError as e:
            logger.warning(f"Could not store narrative for call {call_id}: {e}")
