"""
consolidation/overload/migration.py
────────────────────────────────────
Worst-case live migration time for a host.

If the host is about to overload, the controller will move a VM off it.
The move is not instant: the whole VM memory has to cross the network. The
overload policy must therefore look at least as far ahead as the slowest
possible migration, i.e. the one of the largest resident VM.

    time = max(vm.ram) / (bandwidth / MIGRATION_BANDWIDTH_DIVISOR)

A host with no VMs has nothing to migrate: time = 0.
"""

from __future__ import annotations

import math

from consolidation.shared.config import MIGRATION_BANDWIDTH_DIVISOR, require_positive
from consolidation.shared.errors import InvalidConfigurationError
from consolidation.shared.models import HostView


def max_vm_migration_time(
    host: HostView,
    bandwidth_divisor: float = MIGRATION_BANDWIDTH_DIVISOR,
) -> float:
    """
    Time needed to live-migrate the largest VM currently on `host`.

    Args:
        host:              Host view exposing `vms` (each with `ram`) and `bandwidth`.
        bandwidth_divisor: Raw bandwidth / divisor = bandwidth usable by one
                           migration. Defaults to 16 (half the link, bits → bytes).

    Returns:
        float ≥ 0, in the time unit implied by bandwidth (seconds by default).

    Raises:
        InvalidConfigurationError: if bandwidth or bandwidth_divisor is not > 0,
                                   or the resulting time is not finite.
    """
    bandwidth = require_positive("Host bandwidth", host.bandwidth)
    divisor = require_positive("Bandwidth divisor", bandwidth_divisor)
    max_ram = max((float(vm.ram) for vm in host.vms), default=0.0)
    migration_time = max_ram / (bandwidth / divisor)
    if not math.isfinite(migration_time):
        raise InvalidConfigurationError(
            f"Migration time of host {host.host_id!r} is not finite "
            f"(largest VM ram={max_ram!r}, bandwidth={bandwidth!r})."
        )
    return migration_time


def migration_intervals(migration_time: float, scheduling_interval: float) -> int:
    """
    Number of whole scheduling intervals a migration spans (rounded up).

    Raises:
        InvalidConfigurationError: if scheduling_interval is not > 0, or the
                                   migration time is negative or the interval
                                   count is not finite.
    """
    interval = require_positive("Scheduling interval", scheduling_interval)
    if not migration_time >= 0:
        raise InvalidConfigurationError(
            f"Migration time must be >= 0, got {migration_time!r}."
        )
    intervals = migration_time / interval
    if not math.isfinite(intervals):
        raise InvalidConfigurationError(
            f"Migration of {migration_time!r} over a scheduling interval of "
            f"{interval!r} spans a non-finite number of intervals."
        )
    return int(math.ceil(intervals))
