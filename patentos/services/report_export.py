"""Markdown case-file export for a single patent."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from patentos.models.patent import Patent

DISCLAIMER = (
    "This case file is AI-generated technical analysis produced by PatentOS. "
    "It is not legal advice and carries no guarantee of accuracy. "
    "Consult a registered patent attorney before acting on it."
)


def _metric_rows(patent: Patent) -> list[tuple[str, str]]:
    return [
        ("Status", patent.status.value),
        ("Filing date", patent.filing_date),
        ("Expiration date", patent.expiration_date),
        ("Jurisdictions", ", ".join(patent.jurisdictions) or "None recorded"),
        ("UK replicability score", f"{patent.uk_replicability_score}/100"),
        ("Risk score", f"{patent.risk_score}/100"),
        ("Opportunity type", patent.opportunity_type.value),
        ("Reverse engineering feasibility", patent.reverse_engineering_feasibility.value),
        ("Trade secret candidate", "Yes" if patent.is_trade_secret_candidate else "No"),
    ]


def build_case_file(
    patent: Patent,
    analysis: Optional[str] = None,
    *,
    generated_at: Optional[datetime] = None,
) -> str:
    stamp = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M UTC")
    lines: list[str] = [
        f"# Case File {patent.id}",
        "",
        f"**{patent.title}**",
        "",
        f"Assignee: {patent.assignee}  ",
        f"Generated: {stamp}",
        "",
        "## Metrics",
        "",
        "| Field | Value |",
        "| --- | --- |",
    ]
    lines.extend(f"| {label} | {value} |" for label, value in _metric_rows(patent))
    lines += [
        "",
        "## UK Replicability Rationale",
        "",
        patent.uk_replicability_reason,
        "",
        "## Abstract",
        "",
        patent.abstract,
    ]

    if analysis:
        lines += ["", "## Freedom-to-Operate Analysis", "", analysis.strip()]

    if patent.prior_art_report:
        lines += ["", "## Prior Art Dossier", ""]
        if patent.prior_art_fallback:
            lines += ["> Fallback content: the live prior-art scan did not complete.", ""]
        lines.append(patent.prior_art_report.strip())

    lines += ["", "---", "", f"*{DISCLAIMER}*", ""]
    return "\n".join(lines)
