# tests/conftest.py
import random

import pytest

from components.devices.historian import Historian
from components.devices.switchgear import BreakerSwitchgear
from components.physics.telemetry import TelemetrySimulator
from components.state.system_state import SystemState


@pytest.fixture
def rng():
    """Seeded random source so jitter is reproducible."""
    return random.Random(1234)


@pytest.fixture
def switchgear(rng):
    return BreakerSwitchgear(rng=rng)


@pytest.fixture
def telemetry(rng):
    return TelemetrySimulator(rng=rng)


@pytest.fixture
def state(switchgear, telemetry):
    """Fresh board with a deterministic history clock."""
    counter = iter(range(10_000))
    historian = Historian(clock=lambda: f"t{next(counter)}")
    return SystemState(switchgear=switchgear, telemetry=telemetry, historian=historian)
