"""Tests for the telemetry synthesizer and the connectivity simulator."""

import random

import pytest

from spacemed.schemas import MetricKind
from spacemed.simulator import CRITICAL_OVERRIDES, ConnectivitySimulator, TelemetrySynthesizer


class StubRandom:
    """Random source with fixed draws."""

    def __init__(self, draw: float = 0.5, jitter: float = 0.0, pick: int = 0):
        self.draw = draw
        self.jitter = jitter
        self.pick = pick

    def random(self) -> float:
        return self.draw

    def uniform(self, a: float, b: float) -> float:
        return self.jitter

    def choice(self, seq):
        return seq[self.pick]


# =============================================================================
# SYNTHESIZER
# =============================================================================

class TestTelemetrySynthesizer:

    def test_baseline_at_time_zero(self):
        synthesizer = TelemetrySynthesizer(StubRandom(draw=0.99), critical_probability=0.05)
        snapshot = synthesizer.synthesize(0.0)

        assert snapshot.body_temperature == pytest.approx(36.5)
        assert snapshot.joint_mobility == pytest.approx(75)
        assert snapshot.cabin_temperature == pytest.approx(22)
        assert snapshot.humidity == pytest.approx(50)
        assert snapshot.flex_sensor_raw == pytest.approx(600)

    def test_every_metric_is_filled(self):
        snapshot = TelemetrySynthesizer(random.Random(3)).synthesize(1_700_000_000.0)
        for metric in MetricKind:
            assert snapshot.value_of(metric) is not None

    @pytest.mark.parametrize("seed", range(5))
    def test_clamped_fields_stay_in_range(self, seed):
        synthesizer = TelemetrySynthesizer(random.Random(seed), critical_probability=0.5)
        for step in range(400):
            snapshot = synthesizer.synthesize(1_700_000_000.0 + step * 2)
            assert 0 <= snapshot.joint_mobility <= 100
            assert 0 <= snapshot.humidity <= 100
            assert 0 <= snapshot.flex_sensor_raw <= 4095

    @pytest.mark.parametrize("index", range(len(CRITICAL_OVERRIDES)))
    def test_override_replaces_exactly_one_metric(self, index):
        metric, value = CRITICAL_OVERRIDES[index]
        plain = TelemetrySynthesizer(StubRandom(draw=0.99)).synthesize(0.0)
        forced = TelemetrySynthesizer(StubRandom(draw=0.0, pick=index)).synthesize(0.0)

        assert forced.value_of(metric) == value
        changed = [m for m in MetricKind if forced.value_of(m) != plain.value_of(m)]
        assert changed == [metric]

    def test_zero_probability_never_overrides(self):
        synthesizer = TelemetrySynthesizer(StubRandom(draw=0.0), critical_probability=0.0)
        snapshot = synthesizer.synthesize(0.0)
        assert snapshot.body_temperature == pytest.approx(36.5)

    def test_seeded_sources_repeat(self):
        first = TelemetrySynthesizer(random.Random(42)).synthesize(100.0)
        second = TelemetrySynthesizer(random.Random(42)).synthesize(100.0)
        assert first == second


# =============================================================================
# CONNECTIVITY
# =============================================================================

class TestConnectivitySimulator:

    def test_drops_when_draw_below_probability(self):
        simulator = ConnectivitySimulator(StubRandom(draw=0.01), disconnect_probability=0.02)
        assert simulator.should_disconnect(connected=True) is True

    def test_stays_up_otherwise(self):
        simulator = ConnectivitySimulator(StubRandom(draw=0.5), disconnect_probability=0.02)
        assert simulator.should_disconnect(connected=True) is False

    def test_no_drop_while_already_disconnected(self):
        simulator = ConnectivitySimulator(StubRandom(draw=0.0), disconnect_probability=1.0)
        assert simulator.should_disconnect(connected=False) is False
