# components/devices/base_device.py
"""
Switchgear device records.

A device is any breaker on the single-line diagram: utility mains, the
bus-tie, feeder breakers and generator breakers. Records are immutable;
every transition produces a new record.
"""

from dataclasses import dataclass, replace
from enum import Enum


class DeviceRole(Enum):
    MAIN = "main"
    TIE = "tie"
    FEEDER = "feeder"
    GENERATOR = "generator"


MAIN_VOLTAGE_V = 13800.0
DISTRIBUTION_VOLTAGE_V = 4160.0

# Fixed line-up, in single-line diagram order
DEVICE_ROLES: dict[str, DeviceRole] = {
    "main1": DeviceRole.MAIN,
    "main2": DeviceRole.MAIN,
    "tie": DeviceRole.TIE,
    "feeder1": DeviceRole.FEEDER,
    "feeder2": DeviceRole.FEEDER,
    "gen1": DeviceRole.GENERATOR,
    "feeder4": DeviceRole.FEEDER,
    "feeder5": DeviceRole.FEEDER,
    "gen2": DeviceRole.GENERATOR,
    "feeder7": DeviceRole.FEEDER,
}

DEVICE_IDS: tuple[str, ...] = tuple(DEVICE_ROLES)


class InvalidDeviceId(ValueError):
    """Raised when a command names a device that is not on the diagram."""

    def __init__(self, device_id):
        super().__init__(f"Unknown device id: {device_id!r}")
        self.device_id = device_id


def role_of(device_id: str) -> DeviceRole:
    """Look up the role of a device, rejecting unknown ids."""
    try:
        return DEVICE_ROLES[device_id]
    except (KeyError, TypeError):
        raise InvalidDeviceId(device_id) from None


def nominal_voltage(role: DeviceRole) -> float:
    return MAIN_VOLTAGE_V if role is DeviceRole.MAIN else DISTRIBUTION_VOLTAGE_V


@dataclass(frozen=True)
class Device:
    """State of a single breaker and the readings across it."""

    device_id: str
    role: DeviceRole
    closed: bool = False
    voltage_v: float = 0.0
    current_a: float = 0.0
    power_kw: float = 0.0  # Negative = supplying, positive = consuming

    @property
    def nominal_voltage_v(self) -> float:
        return nominal_voltage(self.role)

    @property
    def is_generator(self) -> bool:
        return self.role is DeviceRole.GENERATOR

    def opened(self) -> "Device":
        """Return this device open with all readings zeroed."""
        return replace(
            self, closed=False, voltage_v=0.0, current_a=0.0, power_kw=0.0
        )

    def with_readings(
        self, voltage_v: float, current_a: float, power_kw: float
    ) -> "Device":
        return replace(
            self, voltage_v=voltage_v, current_a=current_a, power_kw=power_kw
        )

    def to_dict(self) -> dict:
        return {
            "device_id": self.device_id,
            "role": self.role.value,
            "closed": self.closed,
            "voltage_v": self.voltage_v,
            "current_a": self.current_a,
            "power_kw": self.power_kw,
        }


# Nameplate readings the board starts with: (closed, V, A, kW)
INITIAL_READINGS: dict[str, tuple[bool, float, float, float]] = {
    "main1": (True, 13800.0, 245.0, 5850.0),
    "main2": (True, 13800.0, 238.0, 5680.0),
    "tie": (False, 0.0, 0.0, 0.0),
    "feeder1": (True, 4160.0, 145.0, 1040.0),
    "feeder2": (True, 4160.0, 132.0, 950.0),
    "gen1": (True, 4160.0, -85.0, -610.0),
    "feeder4": (True, 4160.0, 156.0, 1120.0),
    "feeder5": (True, 4160.0, 168.0, 1210.0),
    "gen2": (True, 4160.0, -92.0, -660.0),
    "feeder7": (True, 4160.0, 138.0, 990.0),
}


def initial_devices() -> dict[str, Device]:
    """Build the initial line-up: everything closed except the tie."""
    devices = {}
    for device_id, role in DEVICE_ROLES.items():
        closed, voltage, current, power = INITIAL_READINGS[device_id]
        devices[device_id] = Device(
            device_id=device_id,
            role=role,
            closed=closed,
            voltage_v=voltage,
            current_a=current,
            power_kw=power,
        )
    return devices
