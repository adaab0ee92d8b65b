"""
consolidation: host overload detection for VM consolidation.

Usage:
    from consolidation import (
        HostSnapshot, VmSnapshot,
        LocalRegressionOverloadPolicy, StaticThresholdOverloadPolicy,
    )

    policy = LocalRegressionOverloadPolicy(
        safety_parameter=1.2,
        scheduling_interval=300.0,
        fallback=StaticThresholdOverloadPolicy(0.7),
    )
    if policy.is_overloaded(host):
        ...   # caller picks a VM and a destination
"""

from consolidation.shared.errors import (
    DegenerateFitError,
    InsufficientHistoryError,
    InvalidConfigurationError,
    MissingFallbackError,
    OverloadDetectionError,
)
from consolidation.shared.models import (
    HostSnapshot,
    HostView,
    OverloadPolicy,
    PredictionRecord,
    VmSnapshot,
    VmView,
    latest_utilization,
)
from consolidation.shared.history import UtilizationHistory, UtilizationSample
from consolidation.shared.config import WINDOW, LocalRegressionConfig
from consolidation.overload import (
    LocalRegressionOverloadPolicy,
    LoessTrendEstimator,
    RobustLoessTrendEstimator,
    StaticThresholdOverloadPolicy,
    TrendEstimate,
    build_overload_policy,
    find_overloaded_hosts,
    max_vm_migration_time,
)

__all__ = [
    "DegenerateFitError",
    "InsufficientHistoryError",
    "InvalidConfigurationError",
    "MissingFallbackError",
    "OverloadDetectionError",
    "HostSnapshot",
    "HostView",
    "OverloadPolicy",
    "PredictionRecord",
    "VmSnapshot",
    "VmView",
    "latest_utilization",
    "UtilizationHistory",
    "UtilizationSample",
    "WINDOW",
    "LocalRegressionConfig",
    "LocalRegressionOverloadPolicy",
    "LoessTrendEstimator",
    "RobustLoessTrendEstimator",
    "StaticThresholdOverloadPolicy",
    "TrendEstimate",
    "build_overload_policy",
    "find_overloaded_hosts",
    "max_vm_migration_time",
]
