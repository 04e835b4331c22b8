from __future__ import annotations

from fastapi import APIRouter, Depends

from patentos.agents.orchestrator import PatentOrchestrator
from patentos.api.deps import get_orchestrator
from patentos.models.schemas import SearchRequest
from patentos.models.session import SessionSnapshot

router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=SessionSnapshot)
async def submit_search(
    request: SearchRequest,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    """Run a landscape search and return the session once it resolves.

    A newer search started meanwhile wins; this response then reflects it.
    """
    return await orchestrator.submit_search(request.query)
