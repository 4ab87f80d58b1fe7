"""Configuration loading for the switchgear simulator."""

from config.config_loader import ConfigLoader, SimulationConfig

__all__ = ["ConfigLoader", "SimulationConfig"]
