"""
consolidation/shared/models.py
───────────────────────────────
Data contracts exchanged between the consolidation controller and the
overload detection core.

Design philosophy
-----------------
The core never owns hosts or VMs. It receives a read-only view of a host
at decision time and returns a verdict. Anything that quacks like HostView
works (the simulator's own host objects, for example); HostSnapshot and
VmSnapshot are the concrete, validated implementations used by tests and
by callers that have nothing better.

Reading guide
-------------
Read top-to-bottom. Section 1 is what the core reads, section 2 what it
writes, section 3 the capability every overload policy implements.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: HOST AND VM VIEWS
# What the core is allowed to know about a host at decision time.
# ─────────────────────────────────────────────────────────────────────────────

@runtime_checkable
class VmView(Protocol):
    """Anything exposing a memory size. Only `ram` sizes a migration."""

    @property
    def ram(self) -> float: ...


@runtime_checkable
class HostView(Protocol):
    """
    Read-only view of a host consumed by overload policies.

    host_id              → identity used to key the prediction record.
    utilization_history  → samples ordered oldest-first.
    vms                  → VMs currently resident on the host.
    bandwidth            → network bandwidth capacity (bits per time unit).
    """

    @property
    def host_id(self) -> str: ...

    @property
    def utilization_history(self) -> Sequence[float]: ...

    @property
    def vms(self) -> Sequence[VmView]: ...

    @property
    def bandwidth(self) -> float: ...


class VmSnapshot(BaseModel):
    """
    A VM as seen by the overload detector.

    Fields:
        vm_id → Unique identifier of the VM.
        ram   → Memory size. The whole footprint is copied during a live
                migration, so the largest VM bounds the migration time.
    """
    model_config = ConfigDict(frozen=True)

    vm_id: str = Field(..., description="Unique identifier for this VM")
    ram: float = Field(
        ..., ge=0, allow_inf_nan=False,
        description="Memory size (bytes, or any unit matching bandwidth)"
    )


class HostSnapshot(BaseModel):
    """
    Immutable view of a host at the moment an overload check runs.

    Owned by the caller. The core reads it and never mutates it.

    Why bandwidth is not constrained here:
        A snapshot is data, not configuration. A non-positive bandwidth is
        rejected when the migration time is actually estimated, with
        InvalidConfigurationError, so the failure names the real problem.
    """
    model_config = ConfigDict(frozen=True)

    host_id: str = Field(..., description="Unique identifier for this host")
    utilization_history: List[float] = Field(
        default_factory=list,
        description="Utilisation samples, oldest first. Valid readings lie in [0, 1]."
    )
    vms: List[VmSnapshot] = Field(
        default_factory=list,
        description="VMs currently resident on the host"
    )
    bandwidth: float = Field(..., description="Network bandwidth capacity")


def latest_utilization(host: HostView) -> Optional[float]:
    """Most recent utilisation sample of any host view, or None with no history yet."""
    history = host.utilization_history
    if not history:
        return None
    return float(history[-1])


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: PREDICTION RECORD
# What the local regression policy writes after every successful fit.
# ─────────────────────────────────────────────────────────────────────────────

class PredictionRecord(BaseModel):
    """
    The last computed prediction for one host.

    One record per host, replaced on every decision that reaches the
    regression step. Decisions delegated to the fallback leave it untouched.

    Fields:
        host_id               → Which host this prediction is for.
        intercept, slope      → The fitted trend over the window.
        migration_intervals   → Scheduling intervals needed to migrate the
                                largest VM; sets the projection horizon.
        predicted_utilization → Projected utilisation × safety parameter.
                                >= 1.0 means the host was flagged.
        recorded_at           → When the prediction was computed.
    """
    model_config = ConfigDict(frozen=True)

    host_id: str
    intercept: float
    slope: float
    migration_intervals: int = Field(..., ge=0)
    predicted_utilization: float
    recorded_at: datetime = Field(default_factory=datetime.utcnow)


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: OVERLOAD POLICY CAPABILITY
# ─────────────────────────────────────────────────────────────────────────────

@runtime_checkable
class OverloadPolicy(Protocol):
    """
    A single operation: is this host overloaded right now?

    The local regression policy implements it and also consumes it as its
    fallback, so policies compose into chains.
    """

    def is_overloaded(self, host: HostView) -> bool: ...
