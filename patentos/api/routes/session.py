from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from patentos.agents.orchestrator import PatentOrchestrator
from patentos.api.deps import get_orchestrator
from patentos.models.schemas import SortRequest
from patentos.models.session import SessionSnapshot
from patentos.services import logger as log_service

router = APIRouter(prefix="/api/session", tags=["session"])

KEEPALIVE_SECONDS = 15.0


@router.get("", response_model=SessionSnapshot)
async def get_session(orchestrator: PatentOrchestrator = Depends(get_orchestrator)):
    """Current status, ordered patents, activity log, selection and sort mode."""
    return orchestrator.snapshot()


@router.post("/reset", response_model=SessionSnapshot)
async def reset_session(orchestrator: PatentOrchestrator = Depends(get_orchestrator)):
    return orchestrator.reset()


@router.put("/sort", response_model=SessionSnapshot)
async def set_sort_mode(
    request: SortRequest,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.set_sort_mode(request.mode)


@router.delete("/selection", response_model=SessionSnapshot)
async def clear_selection(orchestrator: PatentOrchestrator = Depends(get_orchestrator)):
    return orchestrator.clear_selection()


@router.get("/stream")
async def stream_session(
    request: Request,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    """SSE endpoint for the activity terminal: log lines, status and patent updates."""
    store = orchestrator.store

    async def event_generator():
        queue = store.subscribe()
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    continue
                yield {"event": event.event.value, "data": json.dumps(event.data)}
        except asyncio.CancelledError:
            log_service.log_event(event_type="stream_closed", message="Session stream cancelled")
            raise
        finally:
            store.unsubscribe(queue)

    return EventSourceResponse(event_generator())
