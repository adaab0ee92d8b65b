"""
consolidation/overload/local_regression.py
───────────────────────────────────────────
LocalRegressionOverloadPolicy: forecast-based host overload detection.

What this is
─────────────
The consolidation controller asks, once per host per scheduling interval:
"should I start moving VMs off this host?" Answering from the current
utilisation alone is too late: a live migration takes time, and the host
must still have headroom when it finishes. This policy forecasts the
utilisation at the moment a migration started now would complete.

Algorithm
──────────
  1. window     = last WINDOW samples of the host history (oldest → newest).
                  Fewer samples → fallback policy decides.
  2. (a, b)     = trend_estimator.estimate(window).
                  DegenerateFitError → fallback policy decides.
  3. intervals  = ceil(max_vm_migration_time(host) / scheduling_interval)
  4. predicted  = (a + b · (WINDOW + intervals)) × safety_parameter
  5. record predicted for the host (overwrite)
  6. overloaded = predicted ≥ 1.0

Fallback arbitration
─────────────────────
Insufficient history and degenerate fits are data-quality conditions, not
errors: the verdict is produced entirely by the fallback policy and no
prediction is recorded for that call. A missing fallback is a setup defect
and raises MissingFallbackError on every call, whether or not the fallback
would actually be needed.

Composition
────────────
Both the trend estimator and the fallback are capabilities handed in at
construction. Swapping LoessTrendEstimator for RobustLoessTrendEstimator, or
chaining another LocalRegressionOverloadPolicy as the fallback, needs no
subclassing.

Thread safety
──────────────
is_overloaded() may be called concurrently for different hosts. The only
mutable state is the per-host prediction record; writes to it are guarded
by a threading.Lock. Configuration setters are meant for setup time.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from consolidation.overload.migration import max_vm_migration_time, migration_intervals
from consolidation.overload.trend import LoessTrendEstimator, TrendEstimator
from consolidation.shared.config import (
    DEFAULT_SAFETY_PARAMETER,
    DEFAULT_SCHEDULING_INTERVAL,
    MIGRATION_BANDWIDTH_DIVISOR,
    OVERLOAD_UTILIZATION,
    WINDOW,
    LocalRegressionConfig,
    build_config,
)
from consolidation.shared.errors import (
    DegenerateFitError,
    InsufficientHistoryError,
    InvalidConfigurationError,
    MissingFallbackError,
)
from consolidation.shared.history import recent_window
from consolidation.shared.models import HostView, OverloadPolicy, PredictionRecord

logger = logging.getLogger(__name__)


class LocalRegressionOverloadPolicy:
    """
    Overload policy based on a local regression forecast of host utilisation.

    Lifecycle:
        policy = LocalRegressionOverloadPolicy(
            safety_parameter=1.2,
            scheduling_interval=300.0,
            fallback=StaticThresholdOverloadPolicy(0.7),
        )
        overloaded = policy.is_overloaded(host)      # once per host per tick
        policy.predicted_utilization(host.host_id)   # last forecast, or None

    Attributes (public, readable by tests):
        config           : LocalRegressionConfig (validated settings)
        fallback         : Optional[OverloadPolicy]
        trend_estimator  : TrendEstimator
    """

    def __init__(
        self,
        safety_parameter: float = DEFAULT_SAFETY_PARAMETER,
        scheduling_interval: float = DEFAULT_SCHEDULING_INTERVAL,
        fallback: Optional[OverloadPolicy] = None,
        trend_estimator: Optional[TrendEstimator] = None,
        window: int = WINDOW,
        bandwidth_divisor: float = MIGRATION_BANDWIDTH_DIVISOR,
    ) -> None:
        """
        Raises:
            InvalidConfigurationError: if safety_parameter, scheduling_interval
                                       or bandwidth_divisor is not > 0, or
                                       window < 3.
        """
        self._config: LocalRegressionConfig = build_config(
            safety_parameter=safety_parameter,
            scheduling_interval=scheduling_interval,
            window=window,
            bandwidth_divisor=bandwidth_divisor,
        )
        self._fallback: Optional[OverloadPolicy] = None
        if fallback is not None:
            self.fallback = fallback
        self._trend_estimator: TrendEstimator = (
            trend_estimator if trend_estimator is not None else LoessTrendEstimator()
        )

        self._predictions: Dict[str, PredictionRecord] = {}
        self._lock = threading.Lock()

    # ── Configuration ─────────────────────────────────────────────────────────

    @property
    def config(self) -> LocalRegressionConfig:
        return self._config

    @property
    def safety_parameter(self) -> float:
        return self._config.safety_parameter

    @safety_parameter.setter
    def safety_parameter(self, value: float) -> None:
        self._config = self._updated_config(safety_parameter=value)

    @property
    def scheduling_interval(self) -> float:
        return self._config.scheduling_interval

    @scheduling_interval.setter
    def scheduling_interval(self, value: float) -> None:
        self._config = self._updated_config(scheduling_interval=value)

    @property
    def window(self) -> int:
        return self._config.window

    @property
    def trend_estimator(self) -> TrendEstimator:
        return self._trend_estimator

    @property
    def fallback(self) -> Optional[OverloadPolicy]:
        """Policy that decides when the regression cannot. None until set."""
        return self._fallback

    @fallback.setter
    def fallback(self, policy: OverloadPolicy) -> None:
        """
        Assign the fallback policy. Re-assigning the same policy is a no-op.

        Raises:
            InvalidConfigurationError: if policy is None, is this policy
                                       itself, or has no is_overloaded().
        """
        if policy is None:
            raise InvalidConfigurationError("Fallback overload policy must not be None.")
        if policy is self:
            raise InvalidConfigurationError("A policy cannot be its own fallback.")
        if not callable(getattr(policy, "is_overloaded", None)):
            raise InvalidConfigurationError(
                f"Fallback {policy!r} does not implement is_overloaded(host)."
            )
        self._fallback = policy

    def _updated_config(self, **changes: float) -> LocalRegressionConfig:
        settings = self._config.model_dump()
        settings.update(changes)
        return build_config(**settings)

    # ── Decision ──────────────────────────────────────────────────────────────

    def is_overloaded(self, host: HostView) -> bool:
        """
        Decide whether `host` is about to exceed full capacity.

        Args:
            host: Read-only host view. Never mutated.

        Returns:
            True if the adjusted forecast at the migration-completion horizon
            is ≥ 1.0, or the fallback's verdict when the regression cannot run.

        Raises:
            MissingFallbackError:      no fallback policy configured.
            InvalidConfigurationError: host bandwidth is not > 0, or the
                                       migration time is not finite.
        """
        config = self._config
        fallback = self._require_fallback()

        try:
            window = recent_window(host.utilization_history, config.window)
            estimate = self._trend_estimator.estimate(window)
        except (InsufficientHistoryError, DegenerateFitError) as exc:
            logger.debug(
                "Host %s: %s Delegating to fallback %r.",
                host.host_id, exc.reason, fallback,
            )
            return bool(fallback.is_overloaded(host))

        intervals = self._migration_intervals(host, config)
        predicted = estimate.at(config.window + intervals) * config.safety_parameter

        self._record(PredictionRecord(
            host_id=host.host_id,
            intercept=estimate.intercept,
            slope=estimate.slope,
            migration_intervals=intervals,
            predicted_utilization=predicted,
        ))
        logger.debug(
            "Host %s: trend a=%.4f b=%.4f, horizon=%d+%d, predicted=%.4f (×%.2f)",
            host.host_id, estimate.intercept, estimate.slope,
            config.window, intervals, predicted, config.safety_parameter,
        )
        return predicted >= OVERLOAD_UTILIZATION

    def migration_intervals(self, host: HostView) -> int:
        """Scheduling intervals needed to migrate the largest VM off `host`."""
        return self._migration_intervals(host, self._config)

    @staticmethod
    def _migration_intervals(host: HostView, config: LocalRegressionConfig) -> int:
        migration_time = max_vm_migration_time(host, config.bandwidth_divisor)
        return migration_intervals(migration_time, config.scheduling_interval)

    def _require_fallback(self) -> OverloadPolicy:
        if self._fallback is None:
            raise MissingFallbackError(
                "LocalRegressionOverloadPolicy has no fallback policy. "
                "Assign one before calling is_overloaded()."
            )
        return self._fallback

    # ── Prediction record ─────────────────────────────────────────────────────

    def _record(self, record: PredictionRecord) -> None:
        with self._lock:
            self._predictions[record.host_id] = record

    def get_prediction(self, host_id: str) -> Optional[PredictionRecord]:
        """Last prediction recorded for a host, or None if never computed."""
        with self._lock:
            return self._predictions.get(host_id)

    def predicted_utilization(self, host_id: str) -> Optional[float]:
        """Last adjusted predicted utilisation for a host, or None."""
        record = self.get_prediction(host_id)
        return record.predicted_utilization if record is not None else None

    @property
    def predictions(self) -> Dict[str, PredictionRecord]:
        """Snapshot copy of all recorded predictions, keyed by host id."""
        with self._lock:
            return dict(self._predictions)

    def clear_predictions(self) -> None:
        with self._lock:
            self._predictions.clear()

    def __repr__(self) -> str:
        return (
            f"LocalRegressionOverloadPolicy("
            f"safety_parameter={self.safety_parameter}, "
            f"scheduling_interval={self.scheduling_interval}, "
            f"estimator={self._trend_estimator!r}, "
            f"fallback={self._fallback!r})"
        )
