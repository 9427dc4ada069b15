from fastapi import APIRouter, Depends, HTTPException
from ..schemas.pydantic_schemas import CallStartRequest, CallIdsRequest, ReconciliationResponse, FetchOutcome
from ..services.reconciliation import diff
from ..services.transcript_fetcher import TranscriptFetcher
from ..errors import ProviderError, StorageError, ValidationError
from .deps import get_provider, get_store
from typing import List
import logging

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/start", status_code=202)
async def start_call(payload: CallStartRequest, provider=Depends(get_provider)):
    logger.info(
        f"Received call request {'to ' + payload.phone_number if payload.phone_number else 'to default number'} "
        f"with mode {payload.mode}"
    )
    try:
        result = await provider.initiate_call(phone_number=payload.phone_number, mode=payload.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        logger.error(f"Failed to initiate call: {e}")
        raise HTTPException(status_code=502, detail="Failed to initiate call")
    return {"call_id": result.get("id"), "status": result.get("status") or "queued", "mode": payload.mode}


@router.post("/check", response_model=ReconciliationResponse)
async def check_calls(payload: CallIdsRequest, store=Depends(get_store)):
    try:
        persisted = await store.list_persisted_call_ids(payload.call_ids)
    except StorageError as e:
        logger.error(f"Error checking calls in database: {e}")
        raise HTTPException(status_code=500, detail="Failed to check calls in database")
    existing, missing = diff(payload.call_ids, persisted)
    # Preserve request order in the response
    return {
        "existing": [cid for cid in dict.fromkeys(payload.call_ids) if cid in existing],
        "missing": [cid for cid in dict.fromkeys(payload.call_ids) if cid in missing],
    }


@router.post("/transcripts", response_model=List[FetchOutcome])
async def fetch_transcripts(payload: CallIdsRequest, provider=Depends(get_provider), store=Depends(get_store)):
    try:
        return await TranscriptFetcher(provider, store).fetch_and_store(list(dict.fromkeys(payload.call_ids)))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
