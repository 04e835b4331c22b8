from __future__ import annotations

import asyncio
from typing import Any

import pytest

from patentos.agents.orchestrator import PatentOrchestrator
from patentos.services.session_store import SessionStore


class FakeGateway:
    """Scripted stand-in for AIGateway.

    Set `records`/`text` for the happy path, `records_error`/`text_error` to
    fail, and `text_gate` to hold text calls until the test releases them.
    """

    model = "fake/model"

    def __init__(
        self,
        records: list[Any] | None = None,
        text: str = "",
        *,
        records_error: Exception | None = None,
        text_error: Exception | None = None,
    ):
        self.is_configured = True
        self.records = records or []
        self.text = text
        self.records_error = records_error
        self.text_error = text_error
        self.text_gate: asyncio.Event | None = None
        self.record_calls: list[str] = []
        self.text_calls: list[tuple[str, str]] = []

    async def generate_records(self, prompt: str, schema: dict, *, caller: str = "search", **kwargs):
        self.record_calls.append(prompt)
        if self.records_error is not None:
            raise self.records_error
        return self.records

    async def generate_text(self, prompt: str, *, caller: str = "enrichment") -> str:
        self.text_calls.append((caller, prompt))
        if self.text_gate is not None:
            await self.text_gate.wait()
        if self.text_error is not None:
            raise self.text_error
        return self.text


def raw_patent(**overrides: Any) -> dict[str, Any]:
    record = {
        "id": "US7654321B2",
        "title": "Solid-state electrolyte separator",
        "abstract": "A ceramic separator for lithium cells.",
        "assignee": "Acme Energy",
        "filingDate": "2004-03-01",
        "expirationDate": "2024-03-01",
        "status": "Expired",
        "jurisdictions": ["US"],
        "ukReplicabilityScore": 80,
        "ukReplicabilityReason": "Expired and never filed in GB.",
        "opportunityType": "Public Domain",
        "riskScore": 20,
        "reverseEngineeringFeasibility": "High",
        "isTradeSecretCandidate": False,
    }
    record.update(overrides)
    return record


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def gateway():
    return FakeGateway(
        records=[
            raw_patent(id="US1", ukReplicabilityScore=40, riskScore=90),
            raw_patent(id="US2", ukReplicabilityScore=95, riskScore=10),
            raw_patent(id="US3", ukReplicabilityScore=70, riskScore=60),
        ],
        text="# Executive Verdict\nCAUTION",
    )


@pytest.fixture
def orchestrator(store, gateway):
    return PatentOrchestrator(store, gateway, pacing_ms=0, narration_ms=0, result_count=3)
