from __future__ import annotations

from datetime import datetime, timezone

from patentos.agents.enrichment_agent import FALLBACK_PRIOR_ART
from patentos.models.patent import Patent
from patentos.services.report_export import DISCLAIMER, build_case_file


def test_case_file_has_metrics_and_disclaimer():
    patent = Patent(
        id="US7654321B2",
        title="Separator",
        jurisdictions=("US", "JP"),
        uk_replicability_score=88,
        is_trade_secret_candidate=True,
    )

    body = build_case_file(patent, generated_at=datetime(2026, 1, 2, 3, 4, tzinfo=timezone.utc))

    assert body.startswith("# Case File US7654321B2")
    assert "Generated: 2026-01-02 03:04 UTC" in body
    assert "| UK replicability score | 88/100 |" in body
    assert "| Jurisdictions | US, JP |" in body
    assert "| Trade secret candidate | Yes |" in body
    assert DISCLAIMER in body
    assert "Freedom-to-Operate" not in body
    assert "Prior Art Dossier" not in body


def test_case_file_flags_fallback_dossier():
    patent = Patent(id="US1").with_prior_art(FALLBACK_PRIOR_ART, fallback=True)

    body = build_case_file(patent, "# Executive Verdict\nNO")

    assert "## Freedom-to-Operate Analysis" in body
    assert "## Prior Art Dossier" in body
    assert "Fallback content" in body
    assert "Simulated Finding" in body
