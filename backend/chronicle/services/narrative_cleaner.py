import logging
from typing import Sequence

from ..errors import ValidationError
from ..schemas.pydantic_schemas import NarrativeResult
from .timestamps import TimestampLike, resolve_timestamp

logger = logging.getLogger(__name__)


class NarrativeCleaner:
    def __init__(self, generator) -> None:
        self.generator = generator

    async def clean(self, transcript: str, hints: Sequence[TimestampLike], record_id: str) -> NarrativeResult:
        """Turn a transcript into a journal entry and pin down its timestamp.

        Hints are tried in order (persisted date first, then raw provider
        dates); the strict id-derived fallback applies when none parse.
        Raises GenerationError when the backend fails; callers keep the
        uncleaned state in that case.
        """
        if not transcript or not transcript.strip():
            raise ValidationError("Transcript data is required")
        created_at = resolve_timestamp(hints, record_id, strict=True)
        narrative = await self.generator.clean_transcript(transcript)
        logger.info(f"Cleaned transcript for call {record_id} ({len(narrative)} chars)")
        return NarrativeResult(cleanedNarrative=narrative, createdAt=created_at)
