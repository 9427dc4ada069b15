from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from ..schemas.pydantic_schemas import EntryListResponse, SyncResult
from ..errors import StorageError
from .deps import build_orchestrator, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sync", response_model=SyncResult)
async def run_sync(orchestrator=Depends(build_orchestrator)):
    result = await orchestrator.run()
    if not result.ok:
        return JSONResponse(status_code=502, content=result.model_dump())
    return result


@router.get("/entries", response_model=EntryListResponse)
async def list_entries(store=Depends(get_store)):
    try:
        items = await store.list_entries()
    except StorageError as e:
        logger.error(f"Error fetching entries: {e}")
        return JSONResponse(status_code=500, content={"detail": "Failed to fetch entries"})
    items.sort(key=lambda e: e.created_at, reverse=True)
    return {"items": items, "total": len(items)}
