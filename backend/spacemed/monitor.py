"""Controller that owns the monitor state and drives the periodic updates."""
from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .config import SimulationConfig, display_config, simulation_config
from .rules import evaluate_alerts
from .schemas import DashboardView, Snapshot
from .scheduler import Scheduler
from .simulator import ConnectivitySimulator, TelemetrySynthesizer
from .store import MonitorState, StateStore
from .views import render_dashboard

logger = logging.getLogger(__name__)

CLOCK_TASK = "clock"
SYNTHESIS_TASK = "synthesis"
CONNECTIVITY_TASK = "connectivity"
RECONNECT_CALL = "reconnect"


class TelemetryMonitor:
    """Synthesize, classify and publish telemetry on a fixed cadence.

    ``start`` and ``stop`` must be called from the event loop thread. Readings
    pushed through ``receive_readings`` are merged and evaluated immediately.
    """

    def __init__(
        self,
        config: SimulationConfig = simulation_config,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
        store: Optional[StateStore] = None,
    ) -> None:
        self.config = config
        self._rng = rng or random.Random(config.seed)
        self._clock = clock
        self.store = store or StateStore()
        self.synthesizer = TelemetrySynthesizer(self._rng, config.critical_probability)
        self.connectivity = ConnectivitySimulator(self._rng, config.disconnect_probability)

        self.scheduler = Scheduler()
        self.scheduler.every(CLOCK_TASK, config.clock_interval, self.tick_clock, run_immediately=True)
        self.scheduler.every(SYNTHESIS_TASK, config.cycle_interval, self.run_cycle, run_immediately=True)
        self.scheduler.every(CONNECTIVITY_TASK, config.connectivity_interval, self.check_connectivity)

    @property
    def simulation_running(self) -> bool:
        return self.scheduler.is_running(SYNTHESIS_TASK)

    def start(self) -> None:
        self.scheduler.start(CLOCK_TASK)
        self.scheduler.start(CONNECTIVITY_TASK)
        if self.config.enabled:
            self.scheduler.start(SYNTHESIS_TASK)
        logger.info("Telemetry monitor started (simulation %s)", "on" if self.config.enabled else "off")

    def stop(self) -> None:
        self.scheduler.cancel()
        # The pending reconnect died with the scheduler, so restore the link here.
        if self.store.set_connected(True):
            logger.info("Sensor link restored on stop")
        logger.info("Telemetry monitor stopped")

    def start_simulation(self) -> None:
        if self.simulation_running:
            return
        self.scheduler.start(SYNTHESIS_TASK)
        logger.info("Telemetry simulation resumed")

    def stop_simulation(self) -> None:
        if not self.simulation_running:
            return
        self.scheduler.cancel(SYNTHESIS_TASK)
        logger.info("Telemetry simulation halted")

    def run_cycle(self) -> MonitorState:
        snapshot = self.synthesizer.synthesize(self._clock())
        return self._publish(snapshot, cycle=True)

    def receive_readings(self, update: Snapshot) -> DashboardView:
        """Merge externally supplied readings into the current snapshot."""
        if not update.model_fields_set:
            logger.warning("Received a readings update without any metric")
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        state = self.store.merge(update, lambda snapshot: evaluate_alerts(snapshot, now), now)
        logger.debug("Merged readings with %d active alert(s)", len(state.alerts))
        return render_dashboard(state, self.simulation_running)

    def tick_clock(self) -> None:
        self.store.set_clock(datetime.fromtimestamp(self._clock()).strftime(display_config.clock_format))

    def check_connectivity(self) -> None:
        if not self.connectivity.should_disconnect(self.store.state().connected):
            return
        logger.info("Sensor link dropped, reconnecting in %.0fs", self.config.reconnect_delay)
        self.store.set_connected(False)
        self.scheduler.call_later(RECONNECT_CALL, self.config.reconnect_delay, self._reconnect)

    def state(self) -> MonitorState:
        return self.store.state()

    def dashboard(self) -> DashboardView:
        return render_dashboard(self.store.state(), self.simulation_running)

    def _reconnect(self) -> None:
        self.store.set_connected(True)
        logger.info("Sensor link restored")

    def _publish(self, snapshot: Snapshot, cycle: bool = False) -> MonitorState:
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        alerts = evaluate_alerts(snapshot, now)
        logger.debug("Evaluated snapshot with %d active alert(s)", len(alerts))
        return self.store.publish(snapshot, alerts, now, cycle=cycle)
