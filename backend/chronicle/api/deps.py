from fastapi import Depends, Request

from ..config import Settings
from ..services.sync_orchestrator import SyncOrchestrator


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request):
    return request.app.state.db


def get_provider(request: Request):
    return request.app.state.vapi


def get_generator(request: Request):
    return request.app.state.llm


def build_orchestrator(
    provider=Depends(get_provider),
    store=Depends(get_store),
    generator=Depends(get_generator),
    settings: Settings = Depends(get_settings_dep),
) -> SyncOrchestrator:
    # Fresh orchestrator per request; it owns the working batch for one run
    return SyncOrchestrator(provider, store, generator, settings)
