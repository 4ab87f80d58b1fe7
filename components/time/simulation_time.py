import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None] | None]


# ----------------------------------------------------------------
# Time modes
# ----------------------------------------------------------------
class TimeMode(Enum):
    REALTIME = "realtime"
    STEPPED = "stepped"
    PAUSED = "paused"


@dataclass
class TimeState:
    simulation_time: float = 0.0
    wall_time_start: float = 0.0
    wall_time_elapsed: float = 0.0
    mode: TimeMode = TimeMode.REALTIME
    paused: bool = False
    tick_interval: float = 2.0
    tick_count: int = 0


# ----------------------------------------------------------------
# Periodic tick source
# ----------------------------------------------------------------
class SimulationTime:
    """
    Drives the telemetry tick.

    In REALTIME mode a background task fires ``on_tick`` every
    ``tick_interval`` seconds. STEPPED mode has no task; callers advance
    with ``step()``. PAUSED starts a realtime loop that skips ticks until
    ``resume()``.

    Use as an async context manager to guarantee the task is torn down.
    """

    def __init__(
        self,
        on_tick: TickCallback,
        tick_interval: float = 2.0,
        mode: TimeMode = TimeMode.REALTIME,
    ):
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")

        self.state = TimeState(tick_interval=tick_interval, mode=mode)
        self._on_tick = on_tick
        self._lock = asyncio.Lock()
        self._running = False
        self._update_task: asyncio.Task | None = None

    # ----------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------
    async def start(self):
        if self._running:
            return

        async with self._lock:
            self.state.wall_time_start = time.time()
            self.state.simulation_time = 0.0
            self.state.wall_time_elapsed = 0.0
            self.state.paused = self.state.mode == TimeMode.PAUSED

        self._running = True

        if self.state.mode in [TimeMode.REALTIME, TimeMode.PAUSED]:
            self._update_task = asyncio.create_task(self._time_loop())

        logger.info(
            "Tick source started (%s, every %.2fs)",
            self.state.mode.value,
            self.state.tick_interval,
        )

    async def stop(self):
        self._running = False
        if self._update_task:
            self._update_task.cancel()
            try:
                await self._update_task
            except asyncio.CancelledError:
                pass
            self._update_task = None
            logger.info("Tick source stopped after %d ticks", self.state.tick_count)

    async def __aenter__(self) -> "SimulationTime":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._running

    # ----------------------------------------------------------------
    # Time queries
    # ----------------------------------------------------------------
    def now(self) -> float:
        return self.state.simulation_time

    def ticks(self) -> int:
        return self.state.tick_count

    def is_paused(self) -> bool:
        return self.state.paused

    # ----------------------------------------------------------------
    # Time control
    # ----------------------------------------------------------------
    async def pause(self):
        async with self._lock:
            self.state.paused = True

    async def resume(self):
        async with self._lock:
            self.state.paused = False

    async def set_interval(self, tick_interval: float):
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        async with self._lock:
            self.state.tick_interval = tick_interval

    async def step(self, count: int = 1):
        """Fire ``count`` ticks immediately."""
        if self.state.mode != TimeMode.STEPPED:
            raise RuntimeError("step() only valid in STEPPED mode")
        for _ in range(count):
            await self._fire()

    # ----------------------------------------------------------------
    # Internal tick loop
    # ----------------------------------------------------------------
    async def _fire(self):
        async with self._lock:
            self.state.simulation_time += self.state.tick_interval
            self.state.tick_count += 1
            self.state.wall_time_elapsed = time.time() - self.state.wall_time_start

        result = self._on_tick()
        if inspect.isawaitable(result):
            await result

    async def _time_loop(self):
        while self._running:
            await asyncio.sleep(self.state.tick_interval)
            if self.state.paused:
                continue
            try:
                await self._fire()
            except Exception:
                logger.exception("Tick %d failed", self.state.tick_count)

    # ----------------------------------------------------------------
    # Status
    # ----------------------------------------------------------------
    async def get_status(self) -> dict:
        async with self._lock:
            return {
                "simulation_time": self.state.simulation_time,
                "wall_time_elapsed": self.state.wall_time_elapsed,
                "mode": self.state.mode.value,
                "tick_interval": self.state.tick_interval,
                "tick_count": self.state.tick_count,
                "paused": self.state.paused,
            }
