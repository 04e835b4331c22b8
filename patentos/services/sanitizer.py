"""Trust boundary between raw AI output and the session store.

``sanitize`` is total: whatever the model returns, the result is a valid
``Patent`` with every score clamped and every enum inside its fixed set.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, TypeVar

from patentos.models.patent import (
    NO_ABSTRACT,
    NO_DATE,
    NO_REASON,
    UNKNOWN_ASSIGNEE,
    UNKNOWN_ID,
    UNTITLED,
    Feasibility,
    OpportunityType,
    Patent,
    PatentStatus,
    RawPatentRecord,
)

E = TypeVar("E", bound=StrEnum)

_TRUE_STRINGS = {"true", "yes", "y", "1"}


def _text(value: Any, default: str) -> str:
    if not isinstance(value, str):
        return default
    cleaned = value.strip()
    return cleaned or default


def _identifier(value: Any) -> str:
    # Patent numbers occasionally come back as bare integers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _text(value, UNKNOWN_ID)


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        # Arbitrarily long ints do not fit a float; clamp by sign
        try:
            number = float(value)
        except OverflowError:
            number = math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _score(value: Any, default: int) -> int:
    number = _number(value)
    if number is None:
        return default
    return int(round(min(100.0, max(0.0, number))))


def _choice(value: Any, enum_cls: type[E], default: E) -> E:
    if isinstance(value, str):
        for member in enum_cls:
            if member.value == value:
                return member
    return default


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    number = _number(value)
    return bool(number)


def _jurisdictions(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    codes: list[str] = []
    for item in value:
        if isinstance(item, str) and item.strip():
            codes.append(item.strip())
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            codes.append(str(item))
    return tuple(codes)


def sanitize(raw: RawPatentRecord) -> Patent:
    """Normalize one untrusted record candidate into a ``Patent``. Never raises."""
    record: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    get = record.get

    return Patent(
        id=_identifier(get("id")),
        title=_text(get("title"), UNTITLED),
        abstract=_text(get("abstract"), NO_ABSTRACT),
        assignee=_text(get("assignee"), UNKNOWN_ASSIGNEE),
        filing_date=_text(get("filingDate"), NO_DATE),
        expiration_date=_text(get("expirationDate"), NO_DATE),
        status=_choice(get("status"), PatentStatus, PatentStatus.ACTIVE),
        jurisdictions=_jurisdictions(get("jurisdictions")),
        uk_replicability_score=_score(get("ukReplicabilityScore"), 0),
        uk_replicability_reason=_text(get("ukReplicabilityReason"), NO_REASON),
        opportunity_type=_choice(get("opportunityType"), OpportunityType, OpportunityType.RISK_HIGH),
        risk_score=_score(get("riskScore"), 50),
        reverse_engineering_feasibility=_choice(
            get("reverseEngineeringFeasibility"), Feasibility, Feasibility.MEDIUM
        ),
        is_trade_secret_candidate=_flag(get("isTradeSecretCandidate")),
    )


def sanitize_all(raw_records: Any) -> list[Patent]:
    """Sanitize every candidate independently; nothing is dropped."""
    if not isinstance(raw_records, (list, tuple)):
        return []
    return [sanitize(raw) for raw in raw_records]
