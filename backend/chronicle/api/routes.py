from fastapi import APIRouter
from .calls import router as calls_router
from .sync import router as sync_router

api_router = APIRouter()
api_router.include_router(calls_router, prefix="/calls", tags=["calls"])
api_router.include_router(sync_router, tags=["sync"])
