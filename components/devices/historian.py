# components/devices/historian.py
"""Rolling power history for trend display."""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping

from components.devices.base_device import Device

DEFAULT_MAX_SAMPLES = 15


@dataclass(frozen=True)
class HistorySample:
    """Aggregate power at one tick. Generator output is stored as magnitude."""

    time: str
    main1_kw: float
    main2_kw: float
    gen1_kw: float
    gen2_kw: float

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "main1": self.main1_kw,
            "main2": self.main2_kw,
            "gen1": self.gen1_kw,
            "gen2": self.gen2_kw,
        }


def _time_label() -> str:
    return datetime.now().strftime("%H:%M:%S")


class Historian:
    """FIFO window over the most recent samples."""

    def __init__(
        self,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        clock: Callable[[], str] = _time_label,
    ):
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {max_samples}")
        self.max_samples = max_samples
        self._clock = clock
        self._samples: deque[HistorySample] = deque(maxlen=max_samples)

    def record(self, devices: Mapping[str, Device]) -> HistorySample:
        """Append a sample taken from ``devices`` and return it."""

        def power(device_id: str) -> float:
            device = devices[device_id]
            return device.power_kw if device.closed else 0.0

        sample = HistorySample(
            time=self._clock(),
            main1_kw=power("main1"),
            main2_kw=power("main2"),
            gen1_kw=abs(power("gen1")),
            gen2_kw=abs(power("gen2")),
        )
        self._samples.append(sample)
        return sample

    def samples(self) -> list[HistorySample]:
        return list(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)
