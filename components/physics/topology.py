# components/physics/topology.py
"""
Bus energization from breaker positions.

Models the single-line diagram:
- Main bus fed by either utility main
- Bus A fed by main1, gen1, or across the tie from main2/gen2
- Bus B fed by main2, gen2, or across the tie from main1/gen1

Everything here is a pure function of the closed flags. Nothing is cached;
callers resolve against the snapshot they are holding.
"""

from dataclasses import dataclass
from typing import Mapping

from components.devices.base_device import Device, DeviceRole, role_of

MAIN_BUS = "main_bus"
BUS_A = "bus_a"
BUS_B = "bus_b"

# Which bus each breaker's load side hangs off. The tie joins bus A and bus B
# and has no single upstream bus.
UPSTREAM_BUS: dict[str, str] = {
    "main1": MAIN_BUS,
    "main2": MAIN_BUS,
    "feeder1": BUS_A,
    "feeder2": BUS_A,
    "gen1": BUS_A,
    "feeder4": BUS_A,
    "feeder5": BUS_B,
    "gen2": BUS_B,
    "feeder7": BUS_B,
}


@dataclass(frozen=True)
class BusEnergization:
    main_bus: bool
    bus_a: bool
    bus_b: bool

    def is_energized(self, bus: str) -> bool:
        return getattr(self, bus)

    def to_dict(self) -> dict[str, bool]:
        return {MAIN_BUS: self.main_bus, BUS_A: self.bus_a, BUS_B: self.bus_b}


def resolve_buses(devices: Mapping[str, Device]) -> BusEnergization:
    """Derive which buses are live."""
    main1 = devices["main1"].closed
    main2 = devices["main2"].closed
    tie = devices["tie"].closed
    gen1 = devices["gen1"].closed
    gen2 = devices["gen2"].closed

    return BusEnergization(
        main_bus=main1 or main2,
        bus_a=main1 or (tie and main2) or gen1 or (tie and gen2),
        bus_b=main2 or (tie and main1) or gen2 or (tie and gen1),
    )


def upstream_bus(device_id: str) -> str | None:
    """Bus feeding a breaker, or None for the tie."""
    role_of(device_id)
    return UPSTREAM_BUS.get(device_id)


def is_load_energized(devices: Mapping[str, Device], device_id: str) -> bool:
    """
    Whether the equipment below a breaker is running.

    A motor turns only when its feeder is closed and the feeding bus is
    live; closing a feeder onto a dead bus does nothing. A generator runs
    whenever its own breaker is closed. A closed tie is live when either
    bus it joins is live.
    """
    role = role_of(device_id)
    device = devices[device_id]
    if not device.closed:
        return False
    if role is DeviceRole.GENERATOR:
        return True
    buses = resolve_buses(devices)
    if role is DeviceRole.TIE:
        return buses.bus_a or buses.bus_b
    return buses.is_energized(upstream_bus(device_id))
