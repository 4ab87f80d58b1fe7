#!/usr/bin/env python3
"""
Async switchgear simulator manager.

Runs the telemetry tick, prints the board after every change, and reads
operator commands from stdin:

    toggle <device>   flip a breaker
    open <device>     open a breaker
    close <device>    close a breaker
    status            print the board now
    step [n]          fire n ticks (stepped mode only)
    pause             stop ticking until resumed
    resume            continue ticking after a pause
    reset             restore the initial line-up
    quit              stop the simulator
"""

import asyncio
import logging
import os
import random
import sys
import threading

from components.devices.base_device import DEVICE_IDS, InvalidDeviceId
from components.devices.historian import Historian
from components.devices.switchgear import BreakerSwitchgear
from components.physics.telemetry import TelemetryParameters, TelemetrySimulator
from components.state.system_state import StateSnapshot, SystemState
from components.time.simulation_time import SimulationTime
from config.config_loader import SimulationConfig


def build_state(config: SimulationConfig) -> SystemState:
    """Wire a SystemState from configuration."""
    rng = random.Random(config.seed)
    return SystemState(
        switchgear=BreakerSwitchgear(rng=rng),
        telemetry=TelemetrySimulator(
            TelemetryParameters(voltage_recenter=config.voltage_recenter), rng=rng
        ),
        historian=Historian(max_samples=config.max_samples),
    )


def format_snapshot(snapshot: StateSnapshot) -> str:
    buses = snapshot.buses
    lines = [
        f"Main bus: {'ENERGIZED' if buses.main_bus else 'DE-ENERGIZED'}  "
        f"Bus A: {'ENERGIZED' if buses.bus_a else 'DE-ENERGIZED'}  "
        f"Bus B: {'ENERGIZED' if buses.bus_b else 'DE-ENERGIZED'}",
        f"Closed: {snapshot.closed_count}/{len(snapshot.devices)}  "
        f"Net: {snapshot.total_power_kw:.0f} kW  "
        f"Generation: {snapshot.total_generation_kw:.0f} kW",
    ]
    for device_id in DEVICE_IDS:
        d = snapshot.devices[device_id]
        lines.append(
            f"  {device_id:<8} {'CLOSED' if d.closed else 'OPEN':<6} "
            f"{d.voltage_v:>8.0f} V {d.current_a:>7.1f} A {d.power_kw:>7.0f} kW"
        )
    return "\n".join(lines)


class AsyncSimulatorManager:
    """Owns the state and tick source for one console session."""

    def __init__(self, config: SimulationConfig | None = None, quiet: bool = False):
        self.config = config or SimulationConfig.load()
        self.state = build_state(self.config)
        self.clock = SimulationTime(
            on_tick=self.state.tick,
            tick_interval=self.config.tick_interval,
            mode=self.config.mode,
        )
        self.running = False
        if not quiet:
            self.state.subscribe(self._print_snapshot)

    @staticmethod
    def _print_snapshot(snapshot: StateSnapshot) -> None:
        print(format_snapshot(snapshot))
        print()

    async def start_all(self) -> None:
        self.running = True
        await self.clock.start()
        print(
            f"[INFO] Simulator started ({self.config.mode.value}, "
            f"tick every {self.config.tick_interval:.1f}s)"
        )

    async def stop_all(self) -> None:
        self.running = False
        await self.clock.stop()
        print("[INFO] Simulator stopped")

    async def handle_command(self, line: str) -> bool:
        """Apply one command line. Returns False when the session should end."""
        parts = line.split()
        if not parts:
            return True

        command, args = parts[0].lower(), parts[1:]

        if command in ("quit", "exit"):
            return False
        if command == "status":
            self._print_snapshot(await self.state.get_snapshot())
            return True
        if command == "reset":
            await self.state.reset()
            print("[INFO] Board reset")
            return True
        if command == "step":
            try:
                await self.clock.step(int(args[0]) if args else 1)
            except (RuntimeError, ValueError) as e:
                print(f"[ERROR] {e}")
            return True
        if command == "pause":
            await self.clock.pause()
            print("[INFO] Ticks paused")
            return True
        if command == "resume":
            await self.clock.resume()
            print("[INFO] Ticks resumed")
            return True

        if command not in ("toggle", "open", "close") or len(args) != 1:
            print(f"[WARN] Unrecognised command: {line.strip()!r}")
            return True

        try:
            if command == "toggle":
                await self.state.toggle(args[0])
            else:
                await self.state.set_position(args[0], closed=command == "close")
        except InvalidDeviceId as e:
            print(f"[ERROR] {e}")
        return True

    @staticmethod
    def _start_stdin_reader(loop: asyncio.AbstractEventLoop) -> asyncio.Queue:
        """
        Feed stdin lines into a queue from a daemon thread.

        The thread may stay blocked in a read after shutdown; being a daemon
        it never holds up interpreter exit. It reads the raw descriptor so no
        buffered-stream lock is held while blocked. An empty string marks EOF.
        """
        queue: asyncio.Queue[str] = asyncio.Queue()

        def deliver(line: str) -> bool:
            try:
                loop.call_soon_threadsafe(queue.put_nowait, line)
            except RuntimeError:
                # Loop already closed
                return False
            return True

        def pump() -> None:
            fd = sys.stdin.fileno()
            pending = b""
            while True:
                chunk = os.read(fd, 4096)
                if not chunk:
                    break
                *complete, pending = (pending + chunk).split(b"\n")
                for raw in complete:
                    if not deliver(raw.decode(errors="replace") + "\n"):
                        return
            if pending and not deliver(pending.decode(errors="replace")):
                return
            deliver("")

        threading.Thread(target=pump, name="stdin-reader", daemon=True).start()
        return queue

    async def run(self) -> None:
        """Run until stdin closes or a quit command arrives."""
        lines = self._start_stdin_reader(asyncio.get_running_loop())
        await self.start_all()

        try:
            while self.running:
                line = await lines.get()
                if not line:
                    break
                if not await self.handle_command(line):
                    break
        finally:
            await self.stop_all()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    try:
        asyncio.run(AsyncSimulatorManager().run())
    except KeyboardInterrupt:
        print("[INFO] KeyboardInterrupt received, shutting down...")
