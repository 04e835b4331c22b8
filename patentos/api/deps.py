from __future__ import annotations

from patentos.agents.orchestrator import PatentOrchestrator

# One session per application run
_orchestrator: PatentOrchestrator | None = None


def get_orchestrator() -> PatentOrchestrator:
    """Return the process-wide orchestrator, creating it on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = PatentOrchestrator()
    return _orchestrator
