from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class RemoteCallRecord(BaseModel):
    """One call as reported by the provider listing. Date fields are raw and untrusted."""

    id: str
    transcript: Optional[str] = None
    createdAt: Optional[str] = None
    startedAt: Optional[str] = None
    endedAt: Optional[str] = None
    title: Optional[str] = None

    @classmethod
    def from_provider(cls, payload: Dict[str, Any]) -> "RemoteCallRecord":
        # Vapi nests the transcript under artifact on newer call objects
        artifact = payload.get("artifact") or {}
        transcript = payload.get("transcript") or (artifact.get("transcript") if isinstance(artifact, dict) else None)

        def raw(key: str) -> Optional[str]:
            value = payload.get(key)
            return str(value) if value is not None else None

        return cls(
            id=str(payload["id"]),
            transcript=transcript or None,
            createdAt=raw("createdAt"),
            startedAt=raw("startedAt"),
            endedAt=raw("endedAt"),
            title=payload.get("name") or payload.get("title"),
        )

    def date_hints(self) -> List[Optional[str]]:
        return [self.createdAt, self.startedAt, self.endedAt]


class PersistedEntry(BaseModel):
    call_id: str
    transcript: Optional[str] = None
    cleaned_narrative: Optional[str] = None
    created_at: str


class ProcessedCall(BaseModel):
    id: str
    timestamp: str
    createdAt: str
    transcript: Optional[str] = None
    cleanedNarrative: Optional[str] = None
    title: Optional[str] = None


class FetchOutcome(BaseModel):
    id: str
    success: bool
    error: Optional[str] = None


class NarrativeResult(BaseModel):
    cleanedNarrative: str
    createdAt: str


class SyncResult(BaseModel):
    ok: bool
    entries: List[ProcessedCall] = Field(default_factory=list)
    error: Optional[str] = None
    fetch_outcomes: List[FetchOutcome] = Field(default_factory=list)


class CallStartRequest(BaseModel):
    phone_number: Optional[str] = None
    mode: str = "Normal"


class CallIdsRequest(BaseModel):
    call_ids: List[str]


class ReconciliationResponse(BaseModel):
    existing: List[str]
    missing: List[str]


class EntryListResponse(BaseModel):
    items: List[PersistedEntry]
    total: int
