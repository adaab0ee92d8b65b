"""
consolidation/shared/config.py
───────────────────────────────
Tunable constants and validated settings for overload detection.

Constants are module-level so tests can import and assert against them
directly. The two carried over from the research policy (WINDOW and
MIGRATION_BANDWIDTH_DIVISOR) are defaults, not invariants: both can be
overridden per policy instance through LocalRegressionConfig.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from consolidation.shared.errors import InvalidConfigurationError

# ── Constants ─────────────────────────────────────────────────────────────────

WINDOW: int = 10
"""Number of most recent utilisation samples fed to the local regression.

10 keeps the regression responsive to the latest values. Hosts with a shorter
history are handed to the fallback policy.
"""

MIGRATION_BANDWIDTH_DIVISOR: float = 16.0
"""Divides raw host bandwidth to get the bandwidth usable by one live migration.

16 = 2 × 8: half of the link is assumed available for migration traffic, and
bandwidth is expressed in bits while VM memory is in bytes.
"""

OVERLOAD_UTILIZATION: float = 1.0
"""Full capacity. An adjusted prediction at or above this value is an overload."""

DEGENERACY_EPSILON: float = 1e-12
"""Floor for the closed-form denominators of the weighted fit.

A weighted design spread or a weighted sample variance at or below this
value means the fit has no unique or no meaningful trend.
"""

DEFAULT_SAFETY_PARAMETER: float = 1.2
"""Safety multiplier used when a policy is built without an explicit one.

1.2 inflates every prediction by 20%, leaving a margin before SLA violations.
"""

DEFAULT_SCHEDULING_INTERVAL: float = 300.0
"""Seconds between two consecutive overload checks of the same host."""

DEFAULT_STATIC_THRESHOLD: float = 0.7
"""Utilisation threshold of the static fallback wired in by the policy factory."""

MAX_HISTORY_SAMPLES: int = 30
"""Cap on utilisation samples retained per host (FIFO drop)."""


# ── Validated settings ────────────────────────────────────────────────────────

class LocalRegressionConfig(BaseModel):
    """
    Validated settings of one local-regression overload policy.

    Fields:
        safety_parameter    → Multiplier applied to the projected utilisation.
                              1.2 means "assume 20% more load than forecast".
        scheduling_interval → Time between overload checks. Same unit as the
                              migration time estimate (seconds by default).
        window              → Number of recent samples fitted.
        bandwidth_divisor   → See MIGRATION_BANDWIDTH_DIVISOR.
    """
    model_config = ConfigDict(frozen=True)

    safety_parameter: float = Field(
        DEFAULT_SAFETY_PARAMETER, gt=0,
        description="Multiplicative margin on the forecast"
    )
    scheduling_interval: float = Field(
        DEFAULT_SCHEDULING_INTERVAL, gt=0,
        description="Time between overload checks"
    )
    window: int = Field(WINDOW, ge=3, description="Regression window length")
    bandwidth_divisor: float = Field(
        MIGRATION_BANDWIDTH_DIVISOR, gt=0,
        description="Raw bandwidth / divisor = migration bandwidth"
    )


def build_config(**settings: float) -> LocalRegressionConfig:
    """
    Build a LocalRegressionConfig, surfacing bad values as InvalidConfigurationError.

    Raises:
        InvalidConfigurationError: if any setting violates its constraint.
    """
    try:
        return LocalRegressionConfig(**settings)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidConfigurationError(
            f"Invalid local regression configuration ({problems})."
        ) from exc


def require_positive(name: str, value: float) -> float:
    """Return value unchanged, or raise InvalidConfigurationError if it is not > 0."""
    if not value > 0:
        raise InvalidConfigurationError(f"{name} must be > 0, got {value!r}.")
    return float(value)
