"""
consolidation/overload: host overload detection policies.

Public API:

    Trend estimation:
        LoessTrendEstimator        : tricube-weighted local linear regression
        RobustLoessTrendEstimator  : tricube fit + bisquare robust refit
        TrendEstimate              : intercept/slope pair

    Migration time:
        max_vm_migration_time()    : largest VM ram / (bandwidth / 16)
        migration_intervals()      : ceil(time / scheduling interval)

    Policies:
        LocalRegressionOverloadPolicy   : forecast-based, with fallback
        StaticThresholdOverloadPolicy   : latest sample > threshold
        build_overload_policy()         : "thr" / "lr" / "lrr" by name
        find_overloaded_hosts()         : one policy over many hosts
"""

from consolidation.overload.trend import (
    LoessTrendEstimator,
    RobustLoessTrendEstimator,
    TrendEstimate,
    TrendEstimator,
)
from consolidation.overload.migration import max_vm_migration_time, migration_intervals
from consolidation.overload.threshold import StaticThresholdOverloadPolicy
from consolidation.overload.local_regression import LocalRegressionOverloadPolicy
from consolidation.overload.factory import POLICY_NAMES, build_overload_policy
from consolidation.overload.detection import find_overloaded_hosts

__all__ = [
    "LoessTrendEstimator",
    "RobustLoessTrendEstimator",
    "TrendEstimate",
    "TrendEstimator",
    "max_vm_migration_time",
    "migration_intervals",
    "StaticThresholdOverloadPolicy",
    "LocalRegressionOverloadPolicy",
    "POLICY_NAMES",
    "build_overload_policy",
    "find_overloaded_hosts",
]
