"""
tests/test_migration.py
────────────────────────
Test suite for consolidation/overload/migration.py

Group 1: max_vm_migration_time : largest VM ram / (bandwidth / 16)
Group 2: migration_intervals   : ceil(time / scheduling interval)
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Sequence

import pytest

from consolidation.overload.migration import max_vm_migration_time, migration_intervals
from consolidation.shared.errors import InvalidConfigurationError
from consolidation.shared.models import HostSnapshot, VmSnapshot


def _make_host(rams: Sequence[float] = (), bandwidth: float = 1024.0) -> HostSnapshot:
    return HostSnapshot(
        host_id="host-mig",
        vms=[VmSnapshot(vm_id=f"vm-{i}", ram=ram) for i, ram in enumerate(rams)],
        bandwidth=bandwidth,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Group 1: max_vm_migration_time
# ─────────────────────────────────────────────────────────────────────────────

class TestMaxVmMigrationTime:

    def test_single_vm_reference_value(self) -> None:
        """2048 / (1024 / 16) = 32."""
        assert max_vm_migration_time(_make_host([2048.0])) == pytest.approx(32.0)

    def test_largest_vm_bounds_the_time(self) -> None:
        host = _make_host([512.0, 4096.0, 1024.0])
        assert max_vm_migration_time(host) == pytest.approx(4096.0 / 64.0)

    def test_no_vms_means_zero(self) -> None:
        assert max_vm_migration_time(_make_host([])) == 0.0

    def test_doubling_bandwidth_halves_time(self) -> None:
        slow = max_vm_migration_time(_make_host([3000.0], bandwidth=1000.0))
        fast = max_vm_migration_time(_make_host([3000.0], bandwidth=2000.0))
        assert fast == pytest.approx(slow / 2.0)

    def test_custom_bandwidth_divisor(self) -> None:
        host = _make_host([2048.0])
        assert max_vm_migration_time(host, bandwidth_divisor=8.0) == pytest.approx(16.0)

    @pytest.mark.parametrize("bandwidth", [0.0, -1024.0])
    def test_non_positive_bandwidth_raises(self, bandwidth: float) -> None:
        with pytest.raises(InvalidConfigurationError):
            max_vm_migration_time(_make_host([2048.0], bandwidth=bandwidth))

    def test_non_positive_bandwidth_raises_even_without_vms(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            max_vm_migration_time(_make_host([], bandwidth=0.0))

    def test_invalid_divisor_raises(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            max_vm_migration_time(_make_host([2048.0]), bandwidth_divisor=0.0)

    def test_accepts_duck_typed_host(self) -> None:
        """Any object with vms[].ram and bandwidth works, not only a HostSnapshot."""
        host = SimpleNamespace(
            host_id="sim-host",
            vms=[SimpleNamespace(ram=640.0)],
            bandwidth=160.0,
        )
        assert max_vm_migration_time(host) == pytest.approx(64.0)


# ─────────────────────────────────────────────────────────────────────────────
# Group 2: migration_intervals
# ─────────────────────────────────────────────────────────────────────────────

class TestMigrationIntervals:

    @pytest.mark.parametrize(
        "migration_time, interval, expected",
        [
            (0.0, 300.0, 0),
            (32.0, 300.0, 1),
            (300.0, 300.0, 1),
            (600.0, 300.0, 2),
            (601.0, 300.0, 3),
        ],
    )
    def test_rounds_up(self, migration_time: float, interval: float, expected: int) -> None:
        assert migration_intervals(migration_time, interval) == expected

    def test_returns_int(self) -> None:
        assert isinstance(migration_intervals(32.0, 300.0), int)

    @pytest.mark.parametrize("interval", [0.0, -300.0])
    def test_non_positive_interval_raises(self, interval: float) -> None:
        with pytest.raises(InvalidConfigurationError):
            migration_intervals(32.0, interval)

    def test_negative_migration_time_raises(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            migration_intervals(-1.0, 300.0)

    def test_nan_migration_time_raises(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            migration_intervals(float("nan"), 300.0)

    def test_interval_count_overflowing_to_infinity_raises(self) -> None:
        """1.6e11 s over a 1e-300 s interval overflows a float; no OverflowError leaks out."""
        with pytest.raises(InvalidConfigurationError):
            migration_intervals(1e10 * 16.0, 1e-300)


# ─────────────────────────────────────────────────────────────────────────────
# Group 3: non-finite inputs
# ─────────────────────────────────────────────────────────────────────────────

class TestNonFiniteMigration:

    def test_infinite_vm_ram_on_duck_typed_host_raises(self) -> None:
        host = SimpleNamespace(
            host_id="sim-host",
            vms=[SimpleNamespace(ram=float("inf"))],
            bandwidth=1024.0,
        )
        with pytest.raises(InvalidConfigurationError):
            max_vm_migration_time(host)

    def test_infinite_time_never_reaches_interval_rounding(self) -> None:
        host = SimpleNamespace(
            host_id="sim-host",
            vms=[SimpleNamespace(ram=1e308)],
            bandwidth=1e-10,
        )
        with pytest.raises(InvalidConfigurationError):
            migration_intervals(max_vm_migration_time(host), 300.0)
