from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Untrusted AI output. Only the sanitizer reads values out of it.
RawPatentRecord = Any

UNKNOWN_ID = "UNKNOWN_ID"
UNTITLED = "Untitled Patent Analysis"
NO_ABSTRACT = "No abstract available for this asset."
UNKNOWN_ASSIGNEE = "Unknown Entity"
NO_DATE = "N/A"
NO_REASON = "Automated analysis unavailable."


class PatentStatus(StrEnum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    EXPIRING_SOON = "Expiring Soon"


class OpportunityType(StrEnum):
    PUBLIC_DOMAIN = "Public Domain"
    LICENSING = "Licensing"
    RISK_HIGH = "Risk High"
    TERRITORIAL_GAP = "Territorial Gap"


class Feasibility(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Patent(BaseModel):
    """A sanitized patent-opportunity record.

    Instances are immutable; enrichment produces a patched copy that the
    session store swaps in by id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = UNKNOWN_ID
    title: str = UNTITLED
    abstract: str = NO_ABSTRACT
    assignee: str = UNKNOWN_ASSIGNEE
    filing_date: str = NO_DATE
    expiration_date: str = NO_DATE
    status: PatentStatus = PatentStatus.ACTIVE
    jurisdictions: tuple[str, ...] = ()
    uk_replicability_score: int = Field(default=0, ge=0, le=100)
    uk_replicability_reason: str = NO_REASON
    opportunity_type: OpportunityType = OpportunityType.RISK_HIGH
    risk_score: int = Field(default=50, ge=0, le=100)
    reverse_engineering_feasibility: Feasibility = Feasibility.MEDIUM
    is_trade_secret_candidate: bool = False
    prior_art_report: Optional[str] = None
    prior_art_fallback: bool = False

    def with_prior_art(self, report: str, *, fallback: bool = False) -> "Patent":
        return self.model_copy(update={"prior_art_report": report, "prior_art_fallback": fallback})
