# components/devices/switchgear.py
"""
Breaker switchgear model.

Open/close transitions for the breakers on the board. Closing restores
plausible nominal readings straight away so consumers never see a closed
breaker with zero readings; opening zeroes everything.

No interlocks: any combination of closures is accepted, including
paralleling both mains through the tie.
"""

import logging
import random
from dataclasses import dataclass, replace

from components.devices.base_device import (
    DISTRIBUTION_VOLTAGE_V,
    MAIN_VOLTAGE_V,
    Device,
    DeviceRole,
)

logger = logging.getLogger(__name__)


@dataclass
class ClosingParameters:
    """Readings restored when a breaker closes, per role."""

    main_current_a: float = 240.0
    main_power_kw: float = 5700.0
    tie_current_a: tuple[float, float] = (50.0, 70.0)
    tie_power_kw: tuple[float, float] = (300.0, 400.0)
    feeder_current_a: tuple[float, float] = (140.0, 170.0)
    feeder_power_kw: tuple[float, float] = (1000.0, 1200.0)
    generator_current_a: tuple[float, float] = (-100.0, -80.0)
    generator_power_kw: tuple[float, float] = (-700.0, -600.0)


class BreakerSwitchgear:
    """
    Applies operator commands to device records.

    Stateless apart from the random source; callers own the records.
    """

    def __init__(
        self,
        params: ClosingParameters | None = None,
        rng: random.Random | None = None,
    ):
        self.params = params or ClosingParameters()
        self.rng = rng or random.Random()

    # ----------------------------------------------------------------
    # Commands
    # ----------------------------------------------------------------

    def toggle(self, device: Device) -> Device:
        """Flip the breaker position."""
        if device.closed:
            result = device.opened()
        else:
            result = self._close(device)

        logger.info(
            "%s %s (%.0f V, %.1f A, %.0f kW)",
            device.device_id,
            "closed" if result.closed else "opened",
            result.voltage_v,
            result.current_a,
            result.power_kw,
        )
        return result

    def set_position(self, device: Device, closed: bool) -> Device:
        """Drive the breaker to a position; no-op if already there."""
        if device.closed == closed:
            return device
        return self.toggle(device)

    # ----------------------------------------------------------------
    # Closing policy
    # ----------------------------------------------------------------

    def _uniform(self, bounds: tuple[float, float]) -> float:
        low, high = bounds
        return low + self.rng.random() * (high - low)

    def _close(self, device: Device) -> Device:
        p = self.params

        if device.role is DeviceRole.GENERATOR:
            voltage = DISTRIBUTION_VOLTAGE_V
            current = self._uniform(p.generator_current_a)
            power = self._uniform(p.generator_power_kw)
        elif device.role is DeviceRole.MAIN:
            voltage = MAIN_VOLTAGE_V
            current = p.main_current_a
            power = p.main_power_kw
        elif device.role is DeviceRole.TIE:
            voltage = DISTRIBUTION_VOLTAGE_V
            current = self._uniform(p.tie_current_a)
            power = self._uniform(p.tie_power_kw)
        else:
            voltage = DISTRIBUTION_VOLTAGE_V
            current = self._uniform(p.feeder_current_a)
            power = self._uniform(p.feeder_power_kw)

        return replace(
            device, closed=True, voltage_v=voltage, current_a=current, power_kw=power
        )
