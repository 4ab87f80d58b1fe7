"""Switchgear device models."""

from components.devices.base_device import (
    DEVICE_IDS,
    Device,
    DeviceRole,
    InvalidDeviceId,
    initial_devices,
)
from components.devices.historian import Historian, HistorySample
from components.devices.switchgear import BreakerSwitchgear, ClosingParameters

__all__ = [
    "DEVICE_IDS",
    "Device",
    "DeviceRole",
    "InvalidDeviceId",
    "initial_devices",
    "Historian",
    "HistorySample",
    "BreakerSwitchgear",
    "ClosingParameters",
]
