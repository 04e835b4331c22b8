from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from patentos.models.patent import Patent


class AgentStatus(StrEnum):
    IDLE = "IDLE"
    SEARCHING = "SEARCHING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class SortMode(StrEnum):
    REPLICABILITY = "replicability"
    INVALIDATION = "invalidation"


class LogType(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ACTION = "action"
    ERROR = "error"


class LogEvent(BaseModel):
    """One line of the user-visible activity log."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: str
    type: LogType = LogType.INFO


class SessionSnapshot(BaseModel):
    """Read-only projection of the session handed to the view layer."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    query: str
    status: AgentStatus
    patents: list[Patent]
    logs: list[LogEvent]
    selected_id: Optional[str] = None
    selected_patent: Optional[Patent] = None
    sort_mode: SortMode
    analysis: Optional[str] = None
