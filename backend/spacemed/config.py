"""Configuration management for the space medical monitoring backend.

Environment variables allow tuning the simulation without code changes.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    return int(raw) if raw not in (None, "") else None


@dataclass
class SimulationConfig:
    """Timer intervals and probabilities for the synthetic telemetry."""

    clock_interval: float = float(os.environ.get("SIM_CLOCK_INTERVAL", 1.0))
    cycle_interval: float = float(os.environ.get("SIM_CYCLE_INTERVAL", 2.0))
    connectivity_interval: float = float(os.environ.get("SIM_CONNECTIVITY_INTERVAL", 10.0))
    reconnect_delay: float = float(os.environ.get("SIM_RECONNECT_DELAY", 5.0))
    critical_probability: float = float(os.environ.get("SIM_CRITICAL_PROBABILITY", 0.05))
    disconnect_probability: float = float(os.environ.get("SIM_DISCONNECT_PROBABILITY", 0.02))
    seed: Optional[int] = _optional_int("SIM_SEED")
    enabled: bool = os.environ.get("ENABLE_SIMULATION", "true").lower() == "true"


@dataclass
class DisplayConfig:
    clock_format: str = os.environ.get("DISPLAY_CLOCK_FORMAT", "%H:%M:%S")
    time_format: str = os.environ.get("DISPLAY_TIME_FORMAT", "%H:%M:%S")


simulation_config = SimulationConfig()
display_config = DisplayConfig()
