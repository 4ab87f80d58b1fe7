# config/config_loader.py
"""
YAML configuration loading.

Every ``*.yml`` / ``*.yaml`` file in the config directory is read and merged
into one dict (later files win on key clashes, nested mappings are merged).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from components.time.simulation_time import TimeMode

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent


def _deep_merge(base: dict, overlay: dict) -> dict:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

    def config_files(self) -> list[Path]:
        if not self.config_dir.is_dir():
            return []
        files = list(self.config_dir.glob("*.yml")) + list(
            self.config_dir.glob("*.yaml")
        )
        return sorted(files)

    def load_file(self, path: str | Path) -> dict[str, Any]:
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: top level must be a mapping")
        return data

    def load_all(self) -> dict[str, Any]:
        config: dict[str, Any] = {}
        for path in self.config_files():
            config = _deep_merge(config, self.load_file(path))
        return config


@dataclass
class SimulationConfig:
    """Typed view of the ``simulation`` section."""

    tick_interval: float = 2.0
    mode: TimeMode = TimeMode.REALTIME
    max_samples: int = 15
    seed: int | None = None
    voltage_recenter: bool = False

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "SimulationConfig":
        sim_cfg = config.get("simulation") or {}
        runtime_cfg = sim_cfg.get("runtime") or {}
        history_cfg = sim_cfg.get("history") or {}
        telemetry_cfg = sim_cfg.get("telemetry") or {}

        tick_interval = float(runtime_cfg.get("tick_interval", cls.tick_interval))
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")

        mode_name = runtime_cfg.get("mode", cls.mode.value)
        try:
            mode = TimeMode(mode_name)
        except ValueError:
            raise ValueError(f"Unknown time mode: {mode_name!r}") from None

        max_samples = int(history_cfg.get("max_samples", cls.max_samples))
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {max_samples}")

        seed = telemetry_cfg.get("seed")

        return cls(
            tick_interval=tick_interval,
            mode=mode,
            max_samples=max_samples,
            seed=int(seed) if seed is not None else None,
            voltage_recenter=bool(telemetry_cfg.get("voltage_recenter", False)),
        )

    @classmethod
    def load(cls, config_dir: str | Path | None = None) -> "SimulationConfig":
        return cls.from_dict(ConfigLoader(config_dir).load_all())
