from __future__ import annotations

from patentos.models.events import EventType, SSEEvent
from patentos.models.patent import Patent
from patentos.models.session import AgentStatus, LogEvent


def log_appended(entry: LogEvent) -> SSEEvent:
    return SSEEvent(event=EventType.LOG, data=entry.model_dump(mode="json"))


def log_cleared(generation: int) -> SSEEvent:
    return SSEEvent(event=EventType.LOG_CLEARED, data={"generation": generation})


def status_changed(status: AgentStatus, generation: int, **kwargs) -> SSEEvent:
    return SSEEvent(
        event=EventType.STATUS,
        data={"status": status.value, "generation": generation, **kwargs},
    )


def patent_updated(patent: Patent) -> SSEEvent:
    return SSEEvent(
        event=EventType.PATENT_UPDATED,
        data=patent.model_dump(mode="json", by_alias=True),
    )
