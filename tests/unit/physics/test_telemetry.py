# tests/unit/physics/test_telemetry.py
"""Unit tests for the per-tick telemetry step."""

import random

import pytest

from components.devices.base_device import initial_devices
from components.physics.telemetry import TelemetryParameters, TelemetrySimulator


@pytest.fixture
def devices():
    return initial_devices()


class TestGenerators:
    """Generators redraw output every tick."""

    def test_power_stays_negative(self, telemetry, devices):
        for _ in range(100):
            devices = telemetry.step(devices)
            for gen in ("gen1", "gen2"):
                assert -700.0 <= devices[gen].power_kw < -600.0

    def test_current_derived_from_power(self, telemetry, devices):
        devices = telemetry.step(devices)
        gen = devices["gen1"]
        assert gen.current_a == pytest.approx(gen.power_kw / 4.16)

    def test_voltage_near_nominal(self, telemetry, devices):
        for _ in range(100):
            devices = telemetry.step(devices)
            assert abs(devices["gen2"].voltage_v - 4160.0) <= 25.0


class TestLoads:
    """Mains and feeders random-walk."""

    def test_single_step_bounded(self, telemetry, devices):
        stepped = telemetry.step(devices)
        for device_id, width in (("main1", 200.0), ("feeder1", 50.0)):
            before, after = devices[device_id], stepped[device_id]
            assert abs(after.voltage_v - before.voltage_v) <= width / 2
            assert abs(after.current_a - before.current_a) <= 5.0
            assert abs(after.power_kw - before.power_kw) <= 25.0

    def test_is_a_random_walk(self, telemetry, devices):
        """Jitter accumulates on the previous reading, not on nominal."""
        devices = telemetry.step(devices)
        previous = devices["feeder4"].power_kw
        devices = telemetry.step(devices)
        assert abs(devices["feeder4"].power_kw - previous) <= 25.0

    def test_voltage_recenter(self, devices):
        sim = TelemetrySimulator(
            TelemetryParameters(voltage_recenter=True), rng=random.Random(7)
        )
        for _ in range(200):
            devices = sim.step(devices)
            assert abs(devices["main1"].voltage_v - 13800.0) <= 100.0
            assert abs(devices["feeder5"].voltage_v - 4160.0) <= 25.0


class TestUntouched:
    """Open devices and the tie are carried over."""

    def test_tie_not_perturbed(self, telemetry, switchgear, devices):
        devices["tie"] = switchgear.toggle(devices["tie"])
        tie = devices["tie"]

        for _ in range(10):
            devices = telemetry.step(devices)

        assert devices["tie"] == tie

    def test_open_devices_stay_zero(self, telemetry, devices):
        devices["feeder2"] = devices["feeder2"].opened()
        devices["gen1"] = devices["gen1"].opened()

        for _ in range(10):
            devices = telemetry.step(devices)

        for device_id in ("feeder2", "gen1", "tie"):
            d = devices[device_id]
            assert (d.voltage_v, d.current_a, d.power_kw) == (0.0, 0.0, 0.0)

    def test_input_mapping_unchanged(self, telemetry, devices):
        before = dict(devices)
        result = telemetry.step(devices)

        assert devices == before
        assert result is not devices

    def test_reproducible_with_seed(self, devices):
        a = TelemetrySimulator(rng=random.Random(42)).step(devices)
        b = TelemetrySimulator(rng=random.Random(42)).step(devices)
        assert a == b
