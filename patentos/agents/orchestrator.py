from __future__ import annotations

from patentos.agents.enrichment_agent import EnrichmentAgent
from patentos.agents.search_agent import SearchAgent
from patentos.config import settings
from patentos.errors import ConfigError, TransportError
from patentos.llm_client import AIGateway
from patentos.models.patent import Patent
from patentos.models.session import LogType, SessionSnapshot, SortMode
from patentos.services import logger as log_service
from patentos.services.report_export import build_case_file
from patentos.services.session_store import SessionStore


class PatentOrchestrator:
    """Action handlers behind the view layer.

    Flow:
      1. submit_search: new generation, gateway call, sanitize, store
      2. select_entity: set selection, fetch transient FTO analysis
      3. request_prior_art: cached dossier fetch with fallback

    The view reads state only through `snapshot()`.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        gateway: AIGateway | None = None,
        *,
        pacing_ms: int | None = None,
        narration_ms: int | None = None,
        result_count: int | None = None,
    ):
        self.store = store or SessionStore()
        self.gateway = gateway or AIGateway()
        self.search_agent = SearchAgent(
            self.store,
            self.gateway,
            pacing_ms=settings.ux_pacing_ms if pacing_ms is None else pacing_ms,
            result_count=settings.search_result_count if result_count is None else result_count,
        )
        self.enrichment_agent = EnrichmentAgent(
            self.store,
            self.gateway,
            pacing_ms=settings.prior_art_narration_ms if narration_ms is None else narration_ms,
        )

    def snapshot(self) -> SessionSnapshot:
        return self.store.snapshot()

    async def submit_search(self, query: str) -> SessionSnapshot:
        query = query.strip()
        if not query:
            raise ValueError("Search query must not be empty.")

        generation = self.store.begin_search(query)
        self.store.append_log(
            f'Initiating global patent scan for: "{query}"', LogType.INFO, generation=generation
        )
        log_service.log_event(
            event_type="search_started",
            message="Search started",
            generation=generation,
            query=query[:100],
        )

        try:
            if not self.gateway.is_configured:
                raise ConfigError("OPENROUTER_API_KEY is not set.")
            patents = await self.search_agent.search(query, generation)
        except ConfigError as exc:
            log_service.log_event(
                event_type="search_failed", message="Missing credential", error=str(exc)
            )
            self.store.append_log(
                "Error: No API Key found in environment variables.",
                LogType.ERROR,
                generation=generation,
            )
            self.store.fail_search(generation)
        except TransportError as exc:
            log_service.log_event(
                event_type="search_failed", message="Gateway transport failure", error=str(exc)
            )
            self.store.append_log(
                "Agent encountered a fatal indexing error. Please retry.",
                LogType.ERROR,
                generation=generation,
            )
            self.store.append_log(
                "System Malfunction: Search terminated abnormally.",
                LogType.ERROR,
                generation=generation,
            )
            self.store.fail_search(generation)
        except Exception as exc:
            log_service.log_event(
                event_type="search_failed",
                message="Unexpected search failure",
                error=f"{type(exc).__name__}: {exc}",
            )
            self.store.append_log(
                "System Malfunction: Search terminated abnormally.",
                LogType.ERROR,
                generation=generation,
            )
            self.store.fail_search(generation)
        else:
            self.store.complete_search(generation, patents)

        return self.snapshot()

    def reset(self) -> SessionSnapshot:
        self.store.reset()
        return self.snapshot()

    async def select_entity(self, patent_id: str) -> tuple[Patent, str]:
        """Select a patent and fetch a fresh FTO analysis for it."""
        patent = self.store.select(patent_id)
        analysis = await self.enrichment_agent.deep_dive(patent)
        # Dropped if the user moved on while the analysis was loading
        self.store.set_analysis(patent_id, analysis)
        try:
            return self.store.get(patent_id), analysis
        except KeyError:
            return patent, analysis

    def clear_selection(self) -> SessionSnapshot:
        self.store.clear_selection()
        return self.snapshot()

    async def request_prior_art(self, patent_id: str) -> Patent:
        await self.enrichment_agent.prior_art(patent_id)
        return self.store.get(patent_id)

    def set_sort_mode(self, mode: SortMode | str) -> SessionSnapshot:
        self.store.set_sort_mode(mode)
        return self.snapshot()

    def export_case_file(self, patent_id: str) -> str:
        patent = self.store.get(patent_id)
        analysis = self.store.analysis if self.store.selected_id == patent_id else None
        return build_case_file(patent, analysis)
