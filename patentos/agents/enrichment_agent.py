from __future__ import annotations

import asyncio
import contextlib

from patentos.agents.base import BaseAgent
from patentos.errors import EnrichmentError
from patentos.models.patent import Patent
from patentos.models.session import LogType
from patentos.services import logger as log_service
from patentos.services.prompt_store import render_prompt

DEEP_DIVE_FAILED = "Deep dive analysis failed due to agent timeout."
DEEP_DIVE_WARNING = "Deep dive analysis failed; showing fallback notice."
DEEP_DIVE_EMPTY ="Analysis unavailable."
PRIOR_ART_EMPTY = "Prior art simulation unavailable."
FALLBACK_MARKER = "**System Notice:**"
FALLBACK_PRIOR_ART = (
    f"{FALLBACK_MARKER} Real-time deep scan timed out. \n\n"
    "**Simulated Finding:** High probability of existing prior art in US Sector 4 "
    "(Semiconductors). Recommend manual review."
)

NARRATION_STEPS: tuple[tuple[str, LogType], ...] = (
    ("Accessing JPO (Japan) and KIPO (Korea) citation databases...", LogType.INFO),
    ("Analyzing 142 citation vectors for semantic overlap...", LogType.ACTION),
)


class EnrichmentAgent(BaseAgent):
    """Lazy per-patent enrichment: FTO narrative and prior-art dossier.

    The narrative is fetched on every selection and never cached. The dossier
    is fetched at most once per patent per search generation; concurrent
    requests for the same patent share one gateway call.
    """

    name = "enrichment"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._in_flight: dict[tuple[int, str], asyncio.Task[str]] = {}

    async def deep_dive(self, patent: Patent) -> str:
        self.emit(f"Generating Freedom-to-Operate report for {patent.id}...", LogType.INFO)
        prompt = render_prompt(
            "deep_dive.prompt",
            patent_id=patent.id,
            title=patent.title,
            status=patent.status.value,
            score=patent.uk_replicability_score,
            jurisdictions=", ".join(patent.jurisdictions),
        )
        try:
            text = await self.gateway.generate_text(prompt, caller="deep_dive")
        except Exception as exc:
            failure = EnrichmentError(patent.id, "deep_dive", exc)
            log_service.log_event(
                event_type="enrichment_failed",
                message=str(failure),
                error=str(exc),
                patent_id=patent.id,
            )
            self.emit(DEEP_DIVE_WARNING, LogType.WARNING)
            return DEEP_DIVE_FAILED
        return text.strip() or DEEP_DIVE_EMPTY

    async def prior_art(self, patent_id: str) -> str:
        """Return the dossier for `patent_id`, fetching it only if needed.

        Raises `KeyError` if the patent is not in the current result set.
        """
        patent = self.store.get(patent_id)
        generation = self.store.generation

        if patent.prior_art_report:
            self.emit(f"Retrieving cached Prior Art report for {patent.id}...", LogType.INFO, generation)
            return patent.prior_art_report

        key = (generation, patent_id)
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch_prior_art(patent, generation))
            self._in_flight[key] = task
            task.add_done_callback(lambda _t, key=key: self._in_flight.pop(key, None))
        # Shielded so a cancelled HTTP request does not kill the shared fetch
        return await asyncio.shield(task)

    async def _fetch_prior_art(self, patent: Patent, generation: int) -> str:
        self.emit(
            f"Initiating Prior Art Discovery Protocol for {patent.id}...",
            LogType.ACTION,
            generation,
        )
        prompt = render_prompt(
            "prior_art.prompt",
            patent_id=patent.id,
            title=patent.title,
            abstract=patent.abstract,
        )
        narration = asyncio.create_task(self._narrate(generation))
        try:
            report = (await self.gateway.generate_text(prompt, caller="prior_art")).strip()
        except Exception as exc:
            failure = EnrichmentError(patent.id, "prior_art", exc)
            log_service.log_event(
                event_type="enrichment_failed",
                message=str(failure),
                error=str(exc),
                patent_id=patent.id,
            )
            self.emit(
                "Prior art protocol warning: Using simulation fallback due to timeout.",
                LogType.WARNING,
                generation,
            )
            self.store.attach_prior_art(generation, patent.id, FALLBACK_PRIOR_ART, fallback=True)
            return FALLBACK_PRIOR_ART
        finally:
            narration.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await narration

        report = report or PRIOR_ART_EMPTY
        self.emit("Found high-risk citation vectors.", LogType.SUCCESS, generation)
        self.emit(f"Prior Art Dossier attached to case file {patent.id}.", LogType.INFO, generation)
        self.store.attach_prior_art(generation, patent.id, report)
        return report

    async def _narrate(self, generation: int) -> None:
        """Cosmetic progress lines; cancelled as soon as the real call resolves."""
        for message, log_type in NARRATION_STEPS:
            await self.pace()
            self.emit(message, log_type, generation)
