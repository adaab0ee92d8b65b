"""
tests/test_history.py
──────────────────────
Test suite for consolidation/shared: models, history and config.

Group 1: HostSnapshot / VmSnapshot
Group 2: UtilizationHistory
Group 3: LocalRegressionConfig / build_config
"""

from __future__ import annotations

from types import SimpleNamespace

import pydantic
import pytest

from consolidation.shared.config import (
    MAX_HISTORY_SAMPLES,
    MIGRATION_BANDWIDTH_DIVISOR,
    WINDOW,
    LocalRegressionConfig,
    build_config,
)
from consolidation.shared.errors import (
    InsufficientHistoryError,
    InvalidConfigurationError,
    OverloadDetectionError,
)
from consolidation.shared.history import UtilizationHistory, UtilizationSample, recent_window
from consolidation.shared.models import HostSnapshot, HostView, VmSnapshot, latest_utilization


# ─────────────────────────────────────────────────────────────────────────────
# Group 1: HostSnapshot / VmSnapshot
# ─────────────────────────────────────────────────────────────────────────────

class TestSnapshots:

    def test_snapshot_satisfies_host_view(self) -> None:
        host = HostSnapshot(host_id="h", bandwidth=1.0)
        assert isinstance(host, HostView)

    def test_snapshot_is_frozen(self) -> None:
        host = HostSnapshot(host_id="h", bandwidth=1.0)
        with pytest.raises(pydantic.ValidationError):
            host.bandwidth = 2.0

    def test_latest_utilization(self) -> None:
        assert latest_utilization(HostSnapshot(host_id="h", bandwidth=1.0)) is None
        host = HostSnapshot(host_id="h", bandwidth=1.0, utilization_history=[0.2, 0.4])
        assert latest_utilization(host) == 0.4

    def test_latest_utilization_of_duck_typed_host(self) -> None:
        host = SimpleNamespace(host_id="sim", utilization_history=(0.1, 0.9))
        assert latest_utilization(host) == 0.9

    @pytest.mark.parametrize("ram", [float("inf"), float("nan")])
    def test_non_finite_vm_ram_rejected(self, ram: float) -> None:
        with pytest.raises(pydantic.ValidationError):
            VmSnapshot(vm_id="vm", ram=ram)

    def test_negative_vm_ram_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            VmSnapshot(vm_id="vm", ram=-1.0)


# ─────────────────────────────────────────────────────────────────────────────
# Group 2: UtilizationHistory
# ─────────────────────────────────────────────────────────────────────────────

class TestUtilizationHistory:

    def test_values_are_oldest_first(self) -> None:
        history = UtilizationHistory(host_id="h")
        history.extend([0.1, 0.2, 0.3])
        assert history.values == [0.1, 0.2, 0.3]

    def test_cap_drops_oldest(self) -> None:
        history = UtilizationHistory(host_id="h")
        history.extend([i / 100 for i in range(MAX_HISTORY_SAMPLES + 5)])

        assert len(history.samples) == MAX_HISTORY_SAMPLES
        assert history.sample_count == MAX_HISTORY_SAMPLES + 5
        assert history.values[0] == pytest.approx(0.05)

    def test_has_enough_data(self) -> None:
        history = UtilizationHistory(host_id="h")
        history.extend([0.5] * (WINDOW - 1))
        assert history.has_enough_data() is False
        history.add_sample(UtilizationSample(utilization=0.5))
        assert history.has_enough_data() is True

    def test_recent_returns_last_window(self) -> None:
        history = UtilizationHistory(host_id="h")
        history.extend([i / 100 for i in range(15)])
        assert history.recent() == pytest.approx([i / 100 for i in range(5, 15)])

    def test_recent_raises_when_short(self) -> None:
        history = UtilizationHistory(host_id="h")
        history.extend([0.5, 0.6])
        with pytest.raises(InsufficientHistoryError) as excinfo:
            history.recent()
        assert excinfo.value.available == 2
        assert excinfo.value.required == WINDOW
        assert isinstance(excinfo.value, OverloadDetectionError)

    def test_recent_window_helper(self) -> None:
        assert recent_window([1, 2, 3, 4], window=3) == [2.0, 3.0, 4.0]

    def test_recent_window_only_reads_the_suffix(self) -> None:
        """Samples older than the window are never converted or inspected."""
        history = ["not-a-sample"] * 1000 + [0.5 + 0.01 * i for i in range(WINDOW)]
        assert recent_window(history) == pytest.approx([0.5 + 0.01 * i for i in range(WINDOW)])

    def test_recent_window_accepts_tuples(self) -> None:
        assert recent_window((0.1, 0.2, 0.3), window=2) == [0.2, 0.3]

    def test_negative_sample_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            UtilizationSample(utilization=-0.1)

    def test_to_snapshot(self) -> None:
        history = UtilizationHistory(host_id="h-9")
        history.extend([0.3, 0.4])
        snapshot = history.to_snapshot([VmSnapshot(vm_id="vm", ram=512.0)], bandwidth=1000.0)

        assert snapshot.host_id == "h-9"
        assert snapshot.utilization_history == [0.3, 0.4]
        assert snapshot.vms[0].ram == 512.0
        assert snapshot.bandwidth == 1000.0

        history.extend([0.9])
        assert snapshot.utilization_history == [0.3, 0.4]


# ─────────────────────────────────────────────────────────────────────────────
# Group 3: LocalRegressionConfig / build_config
# ─────────────────────────────────────────────────────────────────────────────

class TestConfig:

    def test_defaults(self) -> None:
        config = build_config()
        assert config.window == WINDOW
        assert config.bandwidth_divisor == MIGRATION_BANDWIDTH_DIVISOR

    def test_values_kept(self) -> None:
        config = build_config(safety_parameter=1.5, scheduling_interval=60.0)
        assert isinstance(config, LocalRegressionConfig)
        assert config.safety_parameter == 1.5
        assert config.scheduling_interval == 60.0

    @pytest.mark.parametrize(
        "settings",
        [
            {"safety_parameter": 0.0},
            {"scheduling_interval": -5.0},
            {"bandwidth_divisor": 0.0},
            {"window": 1},
        ],
    )
    def test_invalid_settings_raise_invalid_configuration(self, settings: dict) -> None:
        with pytest.raises(InvalidConfigurationError) as excinfo:
            build_config(**settings)
        assert isinstance(excinfo.value, ValueError)
        assert next(iter(settings)) in excinfo.value.reason
