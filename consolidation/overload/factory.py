"""
consolidation/overload/factory.py
──────────────────────────────────
Build an overload policy from its short name.

Experiment drivers select policies by name and a single numeric parameter:

    "thr"  → StaticThresholdOverloadPolicy(threshold=parameter)
    "lr"   → LocalRegressionOverloadPolicy(safety_parameter=parameter),
             LoessTrendEstimator, static threshold fallback
    "lrr"  → same as "lr" with RobustLoessTrendEstimator

The local regression variants fall back to a static threshold of
DEFAULT_STATIC_THRESHOLD while a host's history is too short to fit.
"""

from __future__ import annotations

from typing import Optional

from consolidation.overload.local_regression import LocalRegressionOverloadPolicy
from consolidation.overload.threshold import StaticThresholdOverloadPolicy
from consolidation.overload.trend import LoessTrendEstimator, RobustLoessTrendEstimator
from consolidation.shared.config import (
    DEFAULT_SAFETY_PARAMETER,
    DEFAULT_SCHEDULING_INTERVAL,
    DEFAULT_STATIC_THRESHOLD,
)
from consolidation.shared.errors import InvalidConfigurationError
from consolidation.shared.models import OverloadPolicy

POLICY_NAMES = ("thr", "lr", "lrr")


def build_overload_policy(
    name: str,
    parameter: Optional[float] = None,
    scheduling_interval: float = DEFAULT_SCHEDULING_INTERVAL,
    fallback: Optional[OverloadPolicy] = None,
) -> OverloadPolicy:
    """
    Args:
        name:                One of POLICY_NAMES (case-insensitive).
        parameter:           Threshold for "thr", safety parameter for "lr"/"lrr".
                             None → DEFAULT_STATIC_THRESHOLD / DEFAULT_SAFETY_PARAMETER.
        scheduling_interval: Used by the local regression variants.
        fallback:            Overrides the static threshold fallback of "lr"/"lrr".

    Raises:
        InvalidConfigurationError: unknown name or invalid parameter.
    """
    key = name.strip().lower()

    if key == "thr":
        threshold = DEFAULT_STATIC_THRESHOLD if parameter is None else parameter
        return StaticThresholdOverloadPolicy(threshold)

    if key in ("lr", "lrr"):
        estimator = LoessTrendEstimator() if key == "lr" else RobustLoessTrendEstimator()
        return LocalRegressionOverloadPolicy(
            safety_parameter=DEFAULT_SAFETY_PARAMETER if parameter is None else parameter,
            scheduling_interval=scheduling_interval,
            fallback=(
                fallback if fallback is not None
                else StaticThresholdOverloadPolicy(DEFAULT_STATIC_THRESHOLD)
            ),
            trend_estimator=estimator,
        )

    raise InvalidConfigurationError(
        f"Unknown overload policy {name!r}. Expected one of {', '.join(POLICY_NAMES)}."
    )
