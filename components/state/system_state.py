# components/state/system_state.py
"""
Centralized state for the switchgear simulation.

Owns the breaker line-up and power history. All writes (telemetry ticks
and operator toggles) go through one lock, and every change is published
to subscribers as an immutable snapshot.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable

from components.devices.base_device import (
    DEVICE_IDS,
    Device,
    DeviceRole,
    initial_devices,
    role_of,
)
from components.devices.historian import Historian, HistorySample
from components.devices.switchgear import BreakerSwitchgear
from components.physics.telemetry import TelemetrySimulator
from components.physics.topology import (
    BusEnergization,
    is_load_energized,
    resolve_buses,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateSnapshot:
    """Consistent view of the board for rendering."""

    devices: dict[str, Device]
    buses: BusEnergization
    history: list[HistorySample]
    taken_at: datetime = field(default_factory=datetime.now)

    @property
    def total_power_kw(self) -> float:
        return total_power_kw(self.devices)

    @property
    def total_generation_kw(self) -> float:
        return total_generation_kw(self.devices)

    @property
    def closed_count(self) -> int:
        return closed_count(self.devices)


Subscriber = Callable[[StateSnapshot], Awaitable[None] | None]


# ----------------------------------------------------------------
# Aggregates
# ----------------------------------------------------------------


def total_power_kw(devices: dict[str, Device]) -> float:
    """Net signed power over closed breakers."""
    return sum(d.power_kw for d in devices.values() if d.closed)


def total_generation_kw(devices: dict[str, Device]) -> float:
    """Generator output magnitude over closed generator breakers."""
    return sum(
        abs(d.power_kw)
        for d in devices.values()
        if d.closed and d.role is DeviceRole.GENERATOR
    )


def closed_count(devices: dict[str, Device]) -> int:
    return sum(1 for d in devices.values() if d.closed)


class SystemState:
    """
    Single-writer owner of the switchgear line-up.

    Device records are immutable, so readers get a shallow copy of the
    mapping and can never observe a half-applied tick.
    """

    def __init__(
        self,
        switchgear: BreakerSwitchgear | None = None,
        telemetry: TelemetrySimulator | None = None,
        historian: Historian | None = None,
    ):
        self.switchgear = switchgear or BreakerSwitchgear()
        self.telemetry = telemetry or TelemetrySimulator()
        self.historian = historian or Historian()
        self._devices: dict[str, Device] = initial_devices()
        self._subscribers: list[Subscriber] = []
        self._lock = asyncio.Lock()

    # ----------------------------------------------------------------
    # Subscriptions
    # ----------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register for snapshots. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def _publish(self, snapshot: StateSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                result = callback(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber %r failed", callback)

    def _snapshot(self) -> StateSnapshot:
        devices = dict(self._devices)
        return StateSnapshot(
            devices=devices,
            buses=resolve_buses(devices),
            history=self.historian.samples(),
        )

    # ----------------------------------------------------------------
    # State updates
    # ----------------------------------------------------------------

    async def tick(self) -> HistorySample:
        """
        Advance telemetry one period.

        The history sample is taken from the state as it stood before this
        tick's jitter, so the trend lags the readings by one tick.
        """
        async with self._lock:
            previous = self._devices
            sample = self.historian.record(previous)
            self._devices = self.telemetry.step(previous)
            snapshot = self._snapshot()

        logger.debug(
            "Tick: net %.0f kW, generation %.0f kW",
            snapshot.total_power_kw,
            snapshot.total_generation_kw,
        )
        await self._publish(snapshot)
        return sample

    async def toggle(self, device_id: str) -> Device:
        """Flip one breaker. Unknown ids raise before anything changes."""
        role_of(device_id)
        async with self._lock:
            device = self.switchgear.toggle(self._devices[device_id])
            self._devices = {**self._devices, device_id: device}
            snapshot = self._snapshot()

        await self._publish(snapshot)
        return device

    async def set_position(self, device_id: str, closed: bool) -> Device:
        """Open or close one breaker; no change if already there."""
        role_of(device_id)
        async with self._lock:
            current = self._devices[device_id]
            device = self.switchgear.set_position(current, closed)
            if device is current:
                return device
            self._devices = {**self._devices, device_id: device}
            snapshot = self._snapshot()

        await self._publish(snapshot)
        return device

    async def reset(self) -> None:
        """Restore the initial line-up and clear history."""
        async with self._lock:
            self._devices = initial_devices()
            self.historian.clear()
            snapshot = self._snapshot()

        await self._publish(snapshot)

    # ----------------------------------------------------------------
    # State queries
    # ----------------------------------------------------------------

    async def get_device(self, device_id: str) -> Device:
        role_of(device_id)
        async with self._lock:
            return self._devices[device_id]

    async def get_all_devices(self) -> dict[str, Device]:
        async with self._lock:
            return dict(self._devices)

    async def get_buses(self) -> BusEnergization:
        async with self._lock:
            return resolve_buses(self._devices)

    async def get_history(self) -> list[HistorySample]:
        async with self._lock:
            return self.historian.samples()

    async def get_snapshot(self) -> StateSnapshot:
        async with self._lock:
            return self._snapshot()

    # ----------------------------------------------------------------
    # Status reporting
    # ----------------------------------------------------------------

    async def get_summary(self) -> dict[str, Any]:
        """High-level view of the board for a presentation layer."""
        snapshot = await self.get_snapshot()
        devices = snapshot.devices
        return {
            "devices": {
                device_id: {
                    **devices[device_id].to_dict(),
                    "load_energized": is_load_energized(devices, device_id),
                }
                for device_id in DEVICE_IDS
            },
            "buses": snapshot.buses.to_dict(),
            "totals": {
                "net_power_kw": snapshot.total_power_kw,
                "generation_kw": snapshot.total_generation_kw,
                "closed": snapshot.closed_count,
                "total": len(devices),
            },
            "history": [sample.to_dict() for sample in snapshot.history],
        }
