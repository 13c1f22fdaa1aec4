"""Synthetic telemetry used when no real sensor node is feeding the backend."""
from __future__ import annotations

import logging
import math
import random
from typing import Optional, Tuple

from .schemas import MetricKind, Snapshot

logger = logging.getLogger(__name__)

# Out-of-band values injected now and then so the alert path gets exercised.
CRITICAL_OVERRIDES: Tuple[Tuple[MetricKind, float], ...] = (
    (MetricKind.BODY_TEMPERATURE, 38.8),
    (MetricKind.BODY_TEMPERATURE, 35.2),
    (MetricKind.JOINT_MOBILITY, 25.0),
    (MetricKind.CABIN_TEMPERATURE, 16.0),
    (MetricKind.HUMIDITY, 85.0),
)


class TelemetrySynthesizer:
    """Produce slowly drifting readings with uniform jitter on top."""

    def __init__(self, rng: Optional[random.Random] = None, critical_probability: float = 0.05) -> None:
        self._rng = rng or random.Random()
        self.critical_probability = critical_probability

    def synthesize(self, now: float) -> Snapshot:
        """Return a full snapshot for wall-clock time ``now`` (epoch seconds)."""

        values = {
            MetricKind.BODY_TEMPERATURE: self._wave(now, 36.5, 0.3, 0.1, 0.1),
            MetricKind.JOINT_MOBILITY: _clamp(self._wave(now, 75, 15, 0.05, 5), 0, 100),
            MetricKind.CABIN_TEMPERATURE: self._wave(now, 22, 2, 0.02, 0.5),
            MetricKind.HUMIDITY: _clamp(self._wave(now, 50, 10, 0.03, 2.5), 0, 100),
            MetricKind.FLEX_SENSOR_RAW: _clamp(self._wave(now, 600, 100, 0.08, 25), 0, 4095),
        }

        if self._rng.random() < self.critical_probability:
            metric, value = self._rng.choice(CRITICAL_OVERRIDES)
            logger.debug("Injecting critical reading %s=%s", metric.value, value)
            values[metric] = value

        return Snapshot(**{metric.value: value for metric, value in values.items()})

    def _wave(self, now: float, base: float, amplitude: float, frequency: float, jitter: float) -> float:
        return base + amplitude * math.sin(now * frequency) + self._rng.uniform(-jitter, jitter)


class ConnectivitySimulator:
    """Decide when the fake link to the sensor node drops."""

    def __init__(self, rng: Optional[random.Random] = None, disconnect_probability: float = 0.02) -> None:
        self._rng = rng or random.Random()
        self.disconnect_probability = disconnect_probability

    def should_disconnect(self, connected: bool) -> bool:
        if not connected:
            return False
        return self._rng.random() < self.disconnect_probability


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))
