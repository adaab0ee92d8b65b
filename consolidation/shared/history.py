"""
consolidation/shared/history.py
────────────────────────────────
UtilizationHistory: the rolling per-host sample buffer behind a HostSnapshot.

Why this is a separate file from models.py
------------------------------------------
models.py describes a host *at decision time*. history.py accumulates what
was observed *before* it. The controller appends one sample per scheduling
interval and freezes the buffer into a HostSnapshot when it asks for a
verdict.

Only the most recent MAX_HISTORY_SAMPLES are kept; the local regression only
ever reads the last WINDOW of them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Sequence

from pydantic import BaseModel, Field

from consolidation.shared.config import MAX_HISTORY_SAMPLES, WINDOW
from consolidation.shared.errors import InsufficientHistoryError
from consolidation.shared.models import HostSnapshot, VmSnapshot


class UtilizationSample(BaseModel):
    """One utilisation reading taken at the end of a scheduling interval."""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    utilization: float = Field(..., ge=0, description="Fraction of capacity in use")


class UtilizationHistory(BaseModel):
    """
    Rolling utilisation history of one host.

    Fields:
        host_id      → Host the samples belong to.
        max_samples  → Cap on stored samples. Oldest are dropped first.
        samples      → Raw samples, oldest first.
        sample_count → Total samples ever added, including dropped ones.
    """
    host_id: str = Field(..., description="Host the samples belong to")
    max_samples: int = Field(MAX_HISTORY_SAMPLES, ge=1)
    samples: List[UtilizationSample] = Field(default_factory=list)
    sample_count: int = Field(0, ge=0)

    def add_sample(self, sample: UtilizationSample) -> None:
        """Append a sample and trim to max_samples (FIFO)."""
        self.samples.append(sample)
        if len(self.samples) > self.max_samples:
            self.samples = self.samples[-self.max_samples:]
        self.sample_count += 1

    def extend(self, values: Iterable[float]) -> None:
        """Append plain utilisation values, oldest first."""
        for value in values:
            self.add_sample(UtilizationSample(utilization=value))

    @property
    def values(self) -> List[float]:
        """Utilisation values, oldest first. Empty if no samples yet."""
        return [s.utilization for s in self.samples]

    def has_enough_data(self, window: int = WINDOW) -> bool:
        return len(self.samples) >= window

    def recent(self, window: int = WINDOW) -> List[float]:
        """
        The last `window` values, oldest first.

        Raises:
            InsufficientHistoryError: if fewer than `window` samples are stored.
        """
        return recent_window(self.values, window)

    def to_snapshot(self, vms: Iterable[VmSnapshot], bandwidth: float) -> HostSnapshot:
        """Freeze the current history into a HostSnapshot for one decision."""
        return HostSnapshot(
            host_id=self.host_id,
            utilization_history=self.values,
            vms=list(vms),
            bandwidth=bandwidth,
        )


def recent_window(history: Sequence[float], window: int = WINDOW) -> List[float]:
    """
    Return the last `window` samples of an oldest-first history, oldest first.

    Only the returned suffix is copied, so the cost does not grow with the
    length of the history.

    Raises:
        InsufficientHistoryError: if the history is shorter than `window`.
    """
    available = len(history)
    if available < window:
        raise InsufficientHistoryError(available=available, required=window)
    return [float(v) for v in history[available - window:]]
