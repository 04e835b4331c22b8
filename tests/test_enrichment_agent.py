"""Tests for narrative and prior-art enrichment."""
from __future__ import annotations

import asyncio

import pytest

from patentos.agents.enrichment_agent import (
    DEEP_DIVE_EMPTY,
    DEEP_DIVE_FAILED,
    DEEP_DIVE_WARNING,
    FALLBACK_MARKER,
    EnrichmentAgent,
)
from patentos.errors import ConfigError, TransportError
from patentos.models.patent import Patent
from patentos.models.session import LogType

from conftest import FakeGateway


def _seed(store, *ids: str) -> int:
    gen = store.begin_search("battery")
    store.complete_search(gen, [Patent(id=i, title=f"Title {i}") for i in ids])
    return gen


class TestDeepDive:
    @pytest.mark.asyncio
    async def test_returns_text_and_refetches_every_time(self, store):
        _seed(store, "US1")
        gateway = FakeGateway(text="  # Executive Verdict\nYES  ")
        agent = EnrichmentAgent(store, gateway)

        first = await agent.deep_dive(store.get("US1"))
        second = await agent.deep_dive(store.get("US1"))

        assert first == second == "# Executive Verdict\nYES"
        assert [caller for caller, _ in gateway.text_calls] == ["deep_dive", "deep_dive"]
        assert "US1" in gateway.text_calls[0][1]

    @pytest.mark.asyncio
    async def test_failure_returns_sentinel(self, store):
        _seed(store, "US1")
        agent = EnrichmentAgent(store, FakeGateway(text_error=TransportError("timeout")))

        assert await agent.deep_dive(store.get("US1")) == DEEP_DIVE_FAILED
        assert store.logs[-1].type is LogType.WARNING
        assert store.logs[-1].message == DEEP_DIVE_WARNING

    @pytest.mark.asyncio
    async def test_empty_reply_returns_placeholder(self, store):
        _seed(store, "US1")
        agent = EnrichmentAgent(store, FakeGateway(text=""))

        assert await agent.deep_dive(store.get("US1")) == DEEP_DIVE_EMPTY


class TestPriorArt:
    @pytest.mark.asyncio
    async def test_success_attaches_report_by_id(self, store):
        _seed(store, "US1", "US2")
        store.select("US1")
        agent = EnrichmentAgent(store, FakeGateway(text="**CITATION ANALYSIS RESULTS**"))

        report = await agent.prior_art("US1")

        assert report == "**CITATION ANALYSIS RESULTS**"
        assert store.get("US1").prior_art_report == report
        assert store.get("US1").prior_art_fallback is False
        assert store.get("US2").prior_art_report is None
        assert store.selected_patent.prior_art_report == report
        assert store.logs[-1].message == "Prior Art Dossier attached to case file US1."

    @pytest.mark.asyncio
    async def test_cached_report_makes_no_new_call(self, store):
        _seed(store, "US1")
        gateway = FakeGateway(text="dossier")
        agent = EnrichmentAgent(store, gateway)

        first = await agent.prior_art("US1")
        second = await agent.prior_art("US1")

        assert first == second == "dossier"
        assert len(gateway.text_calls) == 1
        assert "Retrieving cached Prior Art report for US1" in store.logs[-1].message

    @pytest.mark.asyncio
    async def test_concurrent_requests_share_one_call(self, store):
        _seed(store, "US1")
        gateway = FakeGateway(text="dossier")
        gateway.text_gate = asyncio.Event()
        agent = EnrichmentAgent(store, gateway)

        first = asyncio.create_task(agent.prior_art("US1"))
        second = asyncio.create_task(agent.prior_art("US1"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        gateway.text_gate.set()

        assert await asyncio.gather(first, second) == ["dossier", "dossier"]
        assert len(gateway.text_calls) == 1

    @pytest.mark.asyncio
    async def test_different_patents_fetch_concurrently(self, store):
        _seed(store, "US1", "US2")
        gateway = FakeGateway(text="dossier")
        agent = EnrichmentAgent(store, gateway)

        await asyncio.gather(agent.prior_art("US1"), agent.prior_art("US2"))

        assert len(gateway.text_calls) == 2
        assert store.get("US1").prior_art_report == "dossier"
        assert store.get("US2").prior_art_report == "dossier"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [TransportError("timeout"), ConfigError("no key"), RuntimeError("unexpected")]
    )
    async def test_failure_attaches_marked_fallback(self, store, error):
        _seed(store, "US1")
        gateway = FakeGateway(text_error=error)
        agent = EnrichmentAgent(store, gateway)

        report = await agent.prior_art("US1")

        patent = store.get("US1")
        assert report == patent.prior_art_report
        assert patent.prior_art_report.startswith(FALLBACK_MARKER)
        assert patent.prior_art_fallback is True
        assert any(e.type is LogType.WARNING for e in store.logs)

        # the fallback counts as the cached result
        await agent.prior_art("US1")
        assert len(gateway.text_calls) == 1

    @pytest.mark.asyncio
    async def test_narration_does_not_gate_result(self, store):
        _seed(store, "US1")
        # A slow narration would take minutes; the result must not wait for it
        agent = EnrichmentAgent(store, FakeGateway(text="dossier"), pacing_ms=600_000)

        report = await asyncio.wait_for(agent.prior_art("US1"), timeout=2)

        assert report == "dossier"
        messages = [e.message for e in store.logs]
        assert not any("citation databases" in m for m in messages)

    @pytest.mark.asyncio
    async def test_result_for_replaced_results_is_dropped(self, store):
        _seed(store, "US1")
        gateway = FakeGateway(text="old dossier")
        gateway.text_gate = asyncio.Event()
        agent = EnrichmentAgent(store, gateway)

        pending = asyncio.create_task(agent.prior_art("US1"))
        await asyncio.sleep(0)
        _seed(store, "US1")
        gateway.text_gate.set()
        await pending

        assert store.get("US1").prior_art_report is None

    @pytest.mark.asyncio
    async def test_unknown_patent_raises(self, store):
        _seed(store, "US1")
        agent = EnrichmentAgent(store, FakeGateway())

        with pytest.raises(KeyError):
            await agent.prior_art("missing")
