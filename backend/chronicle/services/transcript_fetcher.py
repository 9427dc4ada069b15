import asyncio
import logging
from typing import List, Sequence

from ..errors import ChronicleError, ValidationError
from ..schemas.pydantic_schemas import FetchOutcome, PersistedEntry
from .timestamps import resolve_timestamp

logger = logging.getLogger(__name__)


class TranscriptFetcher:
    """Fetches call details from the provider and stores one entry per call id."""

    def __init__(self, provider, store) -> None:
        self.provider = provider
        self.store = store

    async def fetch_and_store(self, call_ids: Sequence[str]) -> List[FetchOutcome]:
        if not call_ids:
            raise ValidationError("Call IDs must be provided as a non-empty array")
        logger.info(f"Fetching transcripts for {len(call_ids)} calls")
        # Outcomes come back in input order; each id is isolated from the others
        return list(await asyncio.gather(*[self._fetch_one(cid) for cid in call_ids]))

    async def _fetch_one(self, call_id: str) -> FetchOutcome:
        try:
            call = await self.provider.get_call(call_id)
            created_at = resolve_timestamp(call.date_hints(), call_id)
            await self.store.upsert_entry(
                PersistedEntry(call_id=call_id, transcript=call.transcript, created_at=created_at)
            )
        except ChronicleError as e:
            logger.warning(f"Error processing call ID {call_id}: {e}")
            return FetchOutcome(id=call_id, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error processing call ID {call_id}")
            return FetchOutcome(id=call_id, success=False, error=f"{type(e).__name__}: {e}")
        logger.info(f"Stored transcript for call {call_id} (created_at {created_at})")
        return FetchOutcome(id=call_id, success=True)
