"""
consolidation/overload/threshold.py
────────────────────────────────────
Static utilisation threshold: the simplest overload policy.

A host is overloaded when its most recent utilisation sample is strictly
above a fixed threshold. It needs no history beyond one sample, which makes
it the natural fallback for the local regression policy while a host is
still warming up.
"""

from __future__ import annotations

from consolidation.shared.config import DEFAULT_STATIC_THRESHOLD, require_positive
from consolidation.shared.models import HostView, latest_utilization


class StaticThresholdOverloadPolicy:
    """
    Overloaded iff latest utilisation > threshold.

    A host with an empty history is never overloaded: there is no evidence.
    """

    def __init__(self, threshold: float = DEFAULT_STATIC_THRESHOLD) -> None:
        self._threshold = require_positive("Static utilisation threshold", threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def is_overloaded(self, host: HostView) -> bool:
        latest = latest_utilization(host)
        if latest is None:
            return False
        return latest > self._threshold

    def __repr__(self) -> str:
        return f"StaticThresholdOverloadPolicy(threshold={self._threshold})"
