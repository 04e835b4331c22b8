from __future__ import annotations

import asyncio
from typing import Optional

from patentos.llm_client import AIGateway
from patentos.models.session import LogEvent, LogType
from patentos.services.session_store import SessionStore


class BaseAgent:
    """Shared plumbing for agents that talk to the AI gateway.

    Subclasses set `name` and call `emit` to narrate progress into the
    session's activity log and `pace` between cosmetic steps.
    """

    name: str = "base"

    def __init__(
        self,
        store: SessionStore,
        gateway: AIGateway | None = None,
        *,
        pacing_ms: int = 0,
    ):
        self.store = store
        self.gateway = gateway or AIGateway()
        self.pacing_ms = max(int(pacing_ms), 0)

    def emit(
        self,
        message: str,
        log_type: LogType = LogType.INFO,
        generation: Optional[int] = None,
    ) -> Optional[LogEvent]:
        return self.store.append_log(message, log_type, generation=generation)

    async def pace(self, multiplier: float = 1.0) -> None:
        if self.pacing_ms:
            await asyncio.sleep(self.pacing_ms * multiplier / 1000)
