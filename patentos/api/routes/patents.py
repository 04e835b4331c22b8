from __future__ import annotations

import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from patentos.agents.orchestrator import PatentOrchestrator
from patentos.api.deps import get_orchestrator
from patentos.models.schemas import PriorArtResponse, SelectionResponse

router = APIRouter(prefix="/api/patents", tags=["patents"])


def _not_found(patent_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Patent not in current results: {patent_id}")


def _attachment_header(patent_id: str) -> str:
    # Ids come from the model; keep the plain filename latin-1 safe
    filename = f"{patent_id}_case_file.md"
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.post("/{patent_id}/select", response_model=SelectionResponse)
async def select_patent(
    patent_id: str,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    """Select a patent and return a freshly generated FTO analysis."""
    try:
        patent, analysis = await orchestrator.select_entity(patent_id)
    except KeyError:
        raise _not_found(patent_id)
    return SelectionResponse(patent=patent, analysis=analysis)


@router.post("/{patent_id}/prior-art", response_model=PriorArtResponse)
async def request_prior_art(
    patent_id: str,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    try:
        patent = await orchestrator.request_prior_art(patent_id)
    except KeyError:
        raise _not_found(patent_id)
    return PriorArtResponse(patent=patent)


@router.get("/{patent_id}/report", response_class=PlainTextResponse)
async def export_report(
    patent_id: str,
    orchestrator: PatentOrchestrator = Depends(get_orchestrator),
):
    """Download the Markdown case file for a patent."""
    try:
        body = orchestrator.export_case_file(patent_id)
    except KeyError:
        raise _not_found(patent_id)
    return PlainTextResponse(
        body,
        media_type="text/markdown",
        headers={"Content-Disposition": _attachment_header(patent_id)},
    )
