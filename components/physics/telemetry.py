# components/physics/telemetry.py
"""
Breaker telemetry simulation.

Models per-tick reading changes for closed breakers:
- Generators redraw their output and derive current from it
- Mains and feeders wander by small additive jitter
- The tie holds whatever it was given when it closed

Mains and feeders follow a random walk with no mean reversion, so power
can drift without bound over a long run. Set ``voltage_recenter`` to keep
voltage centred on nominal instead.
"""

import logging
import random
from dataclasses import dataclass
from typing import Mapping

from components.devices.base_device import Device, DeviceRole

logger = logging.getLogger(__name__)


@dataclass
class TelemetryParameters:
    """Jitter amplitudes (full width of the uniform band)."""

    main_voltage_jitter_v: float = 200.0
    voltage_jitter_v: float = 50.0
    current_jitter_a: float = 10.0
    power_jitter_kw: float = 50.0
    generator_power_kw: tuple[float, float] = (-700.0, -600.0)
    voltage_recenter: bool = False


class TelemetrySimulator:
    """Computes the next snapshot of readings from the previous one."""

    def __init__(
        self,
        params: TelemetryParameters | None = None,
        rng: random.Random | None = None,
    ):
        self.params = params or TelemetryParameters()
        self.rng = rng or random.Random()

    def _jitter(self, width: float) -> float:
        return (self.rng.random() - 0.5) * width

    def step(self, devices: Mapping[str, Device]) -> dict[str, Device]:
        """
        Return a new mapping with one tick of jitter applied.

        ``devices`` is not modified. Open breakers and the tie are carried
        over as-is.
        """
        updated = dict(devices)
        stepped = 0
        for device_id, device in devices.items():
            if not device.closed:
                continue
            if device.role is DeviceRole.GENERATOR:
                updated[device_id] = self._step_generator(device)
            elif device.role is not DeviceRole.TIE:
                updated[device_id] = self._step_load(device)
            else:
                continue
            stepped += 1

        logger.debug("Telemetry step applied to %d devices", stepped)
        return updated

    def _step_generator(self, device: Device) -> Device:
        low, high = self.params.generator_power_kw
        power = low + self.rng.random() * (high - low)
        nominal = device.nominal_voltage_v
        return device.with_readings(
            voltage_v=nominal + self._jitter(self.params.voltage_jitter_v),
            current_a=power / (nominal / 1000.0),
            power_kw=power,
        )

    def _step_load(self, device: Device) -> Device:
        p = self.params
        width = (
            p.main_voltage_jitter_v
            if device.role is DeviceRole.MAIN
            else p.voltage_jitter_v
        )
        if p.voltage_recenter:
            base_voltage = device.nominal_voltage_v
        else:
            base_voltage = device.voltage_v
        return device.with_readings(
            voltage_v=base_voltage + self._jitter(width),
            current_a=device.current_a + self._jitter(p.current_jitter_a),
            power_kw=device.power_kw + self._jitter(p.power_jitter_kw),
        )
