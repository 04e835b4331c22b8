from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Optional

from patentos.models.events import SSEEvent
from patentos.models.patent import Patent
from patentos.models.session import AgentStatus, LogEvent, LogType, SessionSnapshot, SortMode
from patentos.services import logger as log_service
from patentos.services import streaming
from patentos.services.projector import project

SUBSCRIBER_QUEUE_SIZE = 256


class SessionStore:
    """Single state container for one application run.

    Every mutation goes through one of the transition methods below. None of
    them awaits, so on the event loop each transition applies fully or not at
    all. Collections are replaced wholesale (tuples), never edited in place.

    The generation counter increases on every new search and on reset.
    Writers that started under an older generation are ignored.
    """

    def __init__(self) -> None:
        self._generation = 0
        self._query = ""
        self._status = AgentStatus.IDLE
        self._patents: tuple[Patent, ...] = ()
        self._logs: tuple[LogEvent, ...] = ()
        self._selected_id: Optional[str] = None
        self._analysis: Optional[tuple[str, str]] = None
        self._sort_mode = SortMode.REPLICABILITY
        self._subscribers: set[asyncio.Queue[SSEEvent]] = set()

    # --- Read-only views ---

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def query(self) -> str:
        return self._query

    @property
    def status(self) -> AgentStatus:
        return self._status

    @property
    def patents(self) -> tuple[Patent, ...]:
        return self._patents

    @property
    def logs(self) -> tuple[LogEvent, ...]:
        return self._logs

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_patent(self) -> Optional[Patent]:
        if self._selected_id is None:
            return None
        return self._find(self._selected_id)

    @property
    def sort_mode(self) -> SortMode:
        return self._sort_mode

    @property
    def analysis(self) -> Optional[str]:
        """Narrative analysis for the current selection, if it has arrived."""
        if self._analysis is None or self._analysis[0] != self._selected_id:
            return None
        return self._analysis[1]

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def get(self, patent_id: str) -> Patent:
        patent = self._find(patent_id)
        if patent is None:
            raise KeyError(patent_id)
        return patent

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            query=self._query,
            status=self._status,
            patents=project(self._patents, self._sort_mode),
            logs=list(self._logs),
            selected_id=self._selected_id,
            selected_patent=self.selected_patent,
            sort_mode=self._sort_mode,
            analysis=self.analysis,
        )

    # --- Transitions ---

    def begin_search(self, query: str) -> int:
        """Start a new search generation, discarding everything from the last one."""
        self._generation += 1
        self._query = query
        self._status = AgentStatus.SEARCHING
        self._patents = ()
        self._logs = ()
        self._selected_id = None
        self._analysis = None
        log_service.log_session_transition(
            self._generation, "begin_search", self._status.value, {"query": query[:100]}
        )
        self._publish(streaming.log_cleared(self._generation))
        self._publish(streaming.status_changed(self._status, self._generation, query=query))
        return self._generation

    def complete_search(self, generation: int, patents: Iterable[Patent]) -> bool:
        if not self.is_current(generation):
            log_service.log_session_transition(
                generation, "complete_search", "discarded", {"current": self._generation}
            )
            return False
        self._patents = tuple(patents)
        self._status = AgentStatus.COMPLETED
        log_service.log_session_transition(
            generation, "complete_search", self._status.value, {"results": len(self._patents)}
        )
        self._publish(
            streaming.status_changed(self._status, generation, results=len(self._patents))
        )
        return True

    def fail_search(self, generation: int) -> bool:
        if not self.is_current(generation):
            return False
        self._patents = ()
        self._status = AgentStatus.ERROR
        log_service.log_session_transition(generation, "fail_search", self._status.value)
        self._publish(streaming.status_changed(self._status, generation))
        return True

    def reset(self) -> int:
        """Return to the initial state. Any in-flight search becomes stale."""
        self._generation += 1
        self._query = ""
        self._status = AgentStatus.IDLE
        self._patents = ()
        self._logs = ()
        self._selected_id = None
        self._analysis = None
        self._sort_mode = SortMode.REPLICABILITY
        log_service.log_session_transition(self._generation, "reset", self._status.value)
        self._publish(streaming.log_cleared(self._generation))
        self._publish(streaming.status_changed(self._status, self._generation))
        return self._generation

    def append_log(
        self,
        message: str,
        log_type: LogType = LogType.INFO,
        *,
        generation: Optional[int] = None,
    ) -> Optional[LogEvent]:
        """Append to the activity log; lines from a stale generation are dropped."""
        if generation is not None and not self.is_current(generation):
            return None
        entry = LogEvent(message=message, type=log_type)
        self._logs = (*self._logs, entry)
        self._publish(streaming.log_appended(entry))
        return entry

    def select(self, patent_id: str) -> Patent:
        patent = self.get(patent_id)
        if self._selected_id != patent_id:
            self._analysis = None
        self._selected_id = patent_id
        return patent

    def clear_selection(self) -> None:
        self._selected_id = None
        self._analysis = None

    def set_analysis(self, patent_id: str, text: str) -> bool:
        if self._selected_id != patent_id:
            return False
        self._analysis = (patent_id, text)
        return True

    def set_sort_mode(self, mode: SortMode | str) -> SortMode:
        self._sort_mode = SortMode(mode)
        return self._sort_mode

    def attach_prior_art(
        self,
        generation: int,
        patent_id: str,
        report: str,
        *,
        fallback: bool = False,
    ) -> Optional[Patent]:
        """Replace one patent by id with a copy carrying the dossier."""
        if not self.is_current(generation):
            return None
        current = self._find(patent_id)
        if current is None:
            return None
        updated = current.with_prior_art(report, fallback=fallback)
        self._patents = tuple(updated if p.id == patent_id else p for p in self._patents)
        log_service.log_session_transition(
            generation, "attach_prior_art", self._status.value,
            {"patent_id": patent_id, "fallback": fallback},
        )
        self._publish(streaming.patent_updated(updated))
        return updated

    # --- Subscribers ---

    def subscribe(self, maxsize: int = SUBSCRIBER_QUEUE_SIZE) -> asyncio.Queue[SSEEvent]:
        queue: asyncio.Queue[SSEEvent] = asyncio.Queue(maxsize=maxsize)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[SSEEvent]) -> None:
        self._subscribers.discard(queue)

    def _publish(self, event: SSEEvent) -> None:
        for queue in self._subscribers:
            # A stalled client loses its oldest events, not the newest
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(event)

    def _find(self, patent_id: str) -> Optional[Patent]:
        for patent in self._patents:
            if patent.id == patent_id:
                return patent
        return None
