"""Error taxonomy shared by the gateway, the agents and the HTTP layer."""
from __future__ import annotations


class PatentOSError(Exception):
    """Base class for all application errors."""


class ConfigError(PatentOSError):
    """The AI credential is missing; no search can run."""


class TransportError(PatentOSError):
    """Network, auth or timeout failure while calling the AI gateway."""


class ParseError(PatentOSError):
    """The AI gateway answered with a payload that is not usable JSON."""


class EnrichmentError(PatentOSError):
    """A narrative or dossier fetch failed; always recovered with fallback text."""

    def __init__(self, patent_id: str, kind: str, cause: Exception | None = None):
        self.patent_id = patent_id
        self.kind = kind
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{kind} enrichment failed for {patent_id}{detail}")
