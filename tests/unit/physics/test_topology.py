# tests/unit/physics/test_topology.py
"""Unit tests for bus energization."""

import itertools
from dataclasses import replace

import pytest

from components.devices.base_device import InvalidDeviceId, initial_devices
from components.physics.topology import (
    BUS_A,
    BUS_B,
    MAIN_BUS,
    is_load_energized,
    resolve_buses,
    upstream_bus,
)

SOURCES = ("main1", "main2", "tie", "gen1", "gen2")


def _board(**closed):
    devices = initial_devices()
    for device_id, is_closed in closed.items():
        devices[device_id] = replace(devices[device_id], closed=is_closed)
    return devices


def _all_source_combinations():
    for flags in itertools.product([False, True], repeat=len(SOURCES)):
        yield dict(zip(SOURCES, flags))


# ================================================================
# BUS RULE TESTS
# ================================================================
class TestBusRules:
    """Exhaustive checks over every source combination."""

    @pytest.mark.parametrize("flags", list(_all_source_combinations()))
    def test_main_bus_rule(self, flags):
        buses = resolve_buses(_board(**flags))
        assert buses.main_bus == (flags["main1"] or flags["main2"])

    @pytest.mark.parametrize("flags", list(_all_source_combinations()))
    def test_bus_rules(self, flags):
        m1, m2, tie = flags["main1"], flags["main2"], flags["tie"]
        g1, g2 = flags["gen1"], flags["gen2"]

        buses = resolve_buses(_board(**flags))

        assert buses.bus_a == (m1 or (tie and m2) or g1 or (tie and g2))
        assert buses.bus_b == (m2 or (tie and m1) or g2 or (tie and g1))

    def test_feeders_do_not_affect_buses(self):
        buses = resolve_buses(
            _board(main1=False, main2=False, gen1=False, gen2=False, feeder1=True)
        )
        assert (buses.bus_a, buses.bus_b) == (False, False)


# ================================================================
# SCENARIO TESTS
# ================================================================
class TestScenarios:
    def test_initial_state_both_buses_live(self):
        buses = resolve_buses(initial_devices())
        assert buses.main_bus is True
        assert buses.bus_a is True
        assert buses.bus_b is True

    def test_bus_a_held_by_own_generator(self):
        buses = resolve_buses(_board(main1=False))
        assert buses.bus_a is True

    def test_all_sources_open(self):
        buses = resolve_buses(
            _board(main1=False, main2=False, gen1=False, gen2=False)
        )
        assert (buses.bus_a, buses.bus_b) == (False, False)
        assert buses.main_bus is False

    def test_bus_a_fed_through_tie(self):
        buses = resolve_buses(_board(main1=False, gen1=False, tie=True))
        assert buses.bus_a is True

    def test_bus_a_dead_without_tie(self):
        buses = resolve_buses(_board(main1=False, gen1=False))
        assert buses.bus_a is False
        assert buses.bus_b is True

    def test_generator_backfeeds_across_tie(self):
        buses = resolve_buses(
            _board(main1=False, main2=False, gen2=False, tie=True)
        )
        assert buses.bus_b is True

    def test_recomputed_from_current_state(self):
        devices = initial_devices()
        assert resolve_buses(devices).main_bus is True

        devices["main1"] = devices["main1"].opened()
        devices["main2"] = devices["main2"].opened()
        assert resolve_buses(devices).main_bus is False

    def test_to_dict(self):
        assert resolve_buses(initial_devices()).to_dict() == {
            MAIN_BUS: True,
            BUS_A: True,
            BUS_B: True,
        }


# ================================================================
# LOAD ENERGIZATION TESTS
# ================================================================
class TestLoadEnergization:
    @pytest.mark.parametrize(
        "device_id, bus",
        [
            ("feeder1", BUS_A),
            ("feeder2", BUS_A),
            ("gen1", BUS_A),
            ("feeder4", BUS_A),
            ("feeder5", BUS_B),
            ("gen2", BUS_B),
            ("feeder7", BUS_B),
            ("main1", MAIN_BUS),
        ],
    )
    def test_upstream_bus(self, device_id, bus):
        assert upstream_bus(device_id) == bus

    def test_closed_feeder_on_live_bus_runs(self):
        assert is_load_energized(initial_devices(), "feeder1") is True

    def test_closed_feeder_on_dead_bus_does_not_run(self):
        devices = _board(main1=False, gen1=False)
        assert devices["feeder1"].closed is True
        assert is_load_energized(devices, "feeder1") is False
        assert is_load_energized(devices, "feeder5") is True

    def test_open_feeder_does_not_run(self):
        devices = _board(feeder7=False)
        assert is_load_energized(devices, "feeder7") is False

    def test_generator_runs_when_closed(self):
        devices = _board(main1=False, main2=False)
        assert is_load_energized(devices, "gen1") is True

    def test_unknown_device(self):
        with pytest.raises(InvalidDeviceId):
            is_load_energized(initial_devices(), "feeder3")

    def test_tie_has_no_single_upstream_bus(self):
        assert upstream_bus("tie") is None

    def test_closed_tie_live_when_fed_from_main2(self):
        devices = _board(tie=True, main1=False, gen1=False, gen2=False)
        assert is_load_energized(devices, "tie") is True

    def test_closed_tie_dead_when_no_source(self):
        devices = _board(tie=True, main1=False, main2=False, gen1=False, gen2=False)
        assert is_load_energized(devices, "tie") is False

    def test_open_tie_not_live(self):
        assert is_load_energized(initial_devices(), "tie") is False
