from __future__ import annotations

from typing import Any

from patentos.agents.base import BaseAgent
from patentos.errors import ParseError
from patentos.models.patent import Feasibility, OpportunityType, Patent, PatentStatus
from patentos.models.session import LogType
from patentos.services import logger as log_service
from patentos.services.prompt_store import render_prompt
from patentos.services.sanitizer import sanitize_all


PATENT_RECORD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "description": "Patent Number (e.g., US7654321B2)"},
        "title": {"type": "string", "description": "Official Title"},
        "abstract": {"type": "string", "description": "Technical summary of the invention"},
        "assignee": {"type": "string", "description": "Company or Inventor"},
        "filingDate": {"type": "string", "description": "YYYY-MM-DD"},
        "expirationDate": {"type": "string", "description": "YYYY-MM-DD"},
        "status": {"type": "string", "enum": [s.value for s in PatentStatus]},
        "jurisdictions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Active jurisdictions (e.g., US, EP, GB, WO)",
        },
        "ukReplicabilityScore": {"type": "number", "description": "0-100 Safety Score"},
        "ukReplicabilityReason": {
            "type": "string",
            "description": "Short legal rationale for the score.",
        },
        "opportunityType": {"type": "string", "enum": [o.value for o in OpportunityType]},
        "riskScore": {"type": "number", "description": "0-100 Legal Danger Score"},
        "reverseEngineeringFeasibility": {
            "type": "string",
            "enum": [f.value for f in Feasibility],
        },
        "isTradeSecretCandidate": {
            "type": "boolean",
            "description": "Is this better as a secret?",
        },
    },
    "required": [
        "id",
        "title",
        "abstract",
        "assignee",
        "filingDate",
        "expirationDate",
        "status",
        "jurisdictions",
        "ukReplicabilityScore",
        "ukReplicabilityReason",
        "opportunityType",
        "riskScore",
        "reverseEngineeringFeasibility",
        "isTradeSecretCandidate",
    ],
}

SEARCH_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"patents": {"type": "array", "items": PATENT_RECORD_SCHEMA}},
    "required": ["patents"],
}


class SearchAgent(BaseAgent):
    """Runs one landscape query through the gateway and sanitizes the answer."""

    name = "search"

    def __init__(self, *args, result_count: int = 6, **kwargs):
        super().__init__(*args, **kwargs)
        self.result_count = max(int(result_count), 1)

    async def search(self, query: str, generation: int) -> list[Patent]:
        """Return sanitized patents sorted by replicability, best first.

        A malformed payload resolves to an empty list. `ConfigError` and
        `TransportError` propagate so the caller can mark the search failed.
        """
        self.emit(f"Initializing {self.gateway.model} agent...", LogType.INFO, generation)
        await self.pace(0.75)
        self.emit(f'Accessing global patent index for "{query}"...', LogType.ACTION, generation)
        await self.pace()
        self.emit(
            "Filtering for UK-replicable opportunities (Expired/US-Only)...",
            LogType.ACTION,
            generation,
        )

        prompt = render_prompt("search.prompt", query=query, count=self.result_count)
        try:
            raw_records = await self.gateway.generate_records(
                prompt, SEARCH_RESPONSE_SCHEMA, caller=self.name
            )
        except ParseError as exc:
            log_service.log_event(
                event_type="search_parse_error",
                message="Search payload could not be parsed",
                error=str(exc),
                generation=generation,
            )
            self.emit(
                "Warning: Agent response was malformed. Attempting recovery...",
                LogType.WARNING,
                generation,
            )
            return []

        self.emit("Cross-referencing filing dates with UK IPO database...", LogType.ACTION, generation)
        await self.pace(1.25)

        patents = sanitize_all(raw_records)
        patents.sort(key=lambda p: p.uk_replicability_score, reverse=True)

        self.emit(
            f"Analysis complete. Identified {len(patents)} strategic vectors.",
            LogType.SUCCESS,
            generation,
        )
        return patents
