from __future__ import annotations

from collections.abc import Sequence

from patentos.models.patent import Patent
from patentos.models.session import SortMode


def project(patents: Sequence[Patent], sort_mode: SortMode | str) -> list[Patent]:
    """Return a new list ordered for display. The input is never mutated.

    ``sorted`` is stable with ``reverse=True`` too, so ties keep their
    response order.
    """
    mode = SortMode(sort_mode)
    if mode is SortMode.INVALIDATION:
        return sorted(patents, key=lambda p: p.risk_score, reverse=True)
    return sorted(patents, key=lambda p: p.uk_replicability_score, reverse=True)
