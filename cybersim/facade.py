"""
Public entry point of the cybersim warfare engine.

``SimulationFacade`` is the only object a dashboard, CLI or test needs.
It exposes a small command surface (start, stop, reset, configure, step,
run) and a read surface (snapshot, subscribe). Each facade owns its own
engine and random source, so any number of simulations can coexist.

Configuration problems are returned, not raised: a rejected
``configure()`` hands back the ``ConfigurationError`` and keeps the
previous settings.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from cybersim.config import RESET_ONLY_FIELDS, SimulationConfig
from cybersim.engine.event_bus import EventBus
from cybersim.engine.models import AlertSeverity, SimulationSnapshot
from cybersim.engine.simulation_engine import SimulationEngine
from cybersim.errors import ConfigurationError, InvariantViolation

logger = logging.getLogger(__name__)

TickCallback = Callable[[SimulationSnapshot], None]


class SimulationFacade:
    """
    Owns one simulation and drives it tick by tick.

    Ticking only happens while the facade is running. ``step()`` runs a
    single tick; ``run()`` is the cooperative loop that keeps stepping
    until ``stop()`` is called or a tick budget is used up.
    """

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self._config = (config if config is not None else SimulationConfig()).validated()
        self._engine = SimulationEngine(self._config)
        self._bus = EventBus()
        self._running = False
        self._started = False
        self._snapshot = self._engine.snapshot(running=False)

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self, config: dict[str, Any] | None = None) -> ConfigurationError | None:
        """
        Begin ticking, optionally applying a partial config first.

        Starting an already running simulation does nothing and keeps state.
        """
        if self._bus.closed:
            raise RuntimeError("Cannot start a closed simulation")

        if config:
            error = self.configure(**config)
            if error is not None:
                return error

        if self._running:
            return None

        self._running = True
        self._started = True
        self._refresh_snapshot()
        logger.info("simulation started at tick %d", self._engine.clock.tick_count())
        return None

    def stop(self) -> None:
        """
        Stop ticking. The current state is kept for inspection or resume.
        """
        if not self._running:
            return
        self._running = False
        self._refresh_snapshot()
        logger.info("simulation stopped at tick %d", self._engine.clock.tick_count())

    def close(self) -> None:
        """
        Stop for good and release every subscriber.

        A closed facade still answers ``snapshot()`` but can not be
        started or subscribed to again.
        """
        self.stop()
        self._bus.close()
        logger.debug("simulation closed")

    def reset(self) -> bool:
        """
        Rebuild the simulation from its configured topology and seed.

        Does nothing (and returns False) if the simulation was never
        started. Leaves the simulation stopped.
        """
        if not self._started:
            logger.debug("reset ignored: simulation never started")
            return False

        self._running = False
        self._engine.rebuild()
        self._refresh_snapshot()
        logger.info("simulation reset (seed=%s)", self._config.seed)
        return True

    def configure(self, **options: Any) -> ConfigurationError | None:
        """
        Update configuration.

        Rates and weights apply from the next tick; ``seed`` and
        ``topology`` only on the next ``reset()``.

        Returns:
            None on success, otherwise the ConfigurationError describing
            every rejected option. The previous configuration is retained.
        """
        try:
            updated = self._config.updated(**options)
        except ConfigurationError as exc:
            logger.warning("configuration rejected: %s", exc)
            return exc

        self._config = updated
        self._engine.apply_config(updated)

        deferred = sorted(RESET_ONLY_FIELDS.intersection(options))
        if deferred:
            logger.info("%s will apply on next reset", ", ".join(deferred))
        return None

    def step(self) -> SimulationSnapshot | None:
        """
        Run one tick if running, publish the snapshot and return it.

        Returns None when stopped. A tick that raises is rolled back and
        skipped; the failure is logged and recorded as a DIAGNOSTIC alert.
        With ``debug`` enabled an InvariantViolation is re-raised instead.
        """
        if not self._running:
            return None

        try:
            self._engine.tick()
        except InvariantViolation:
            if self._config.debug:
                raise
            self._record_skipped_tick()
        except Exception:
            self._record_skipped_tick()

        self._refresh_snapshot()
        self._bus.publish(self._snapshot)
        return self._snapshot

    def run(self, max_ticks: int | None = None, realtime: bool = False) -> int:
        """
        Keep stepping until stopped or ``max_ticks`` ticks have run.

        Starts the simulation if needed. With ``realtime`` the loop sleeps
        one tick period between ticks; otherwise it runs as fast as it can.

        Returns:
            Number of ticks executed.
        """
        if not self._running:
            self.start()

        executed = 0
        while self._running and (max_ticks is None or executed < max_ticks):
            self.step()
            executed += 1
            if realtime and self._running:
                time.sleep(self._config.tick_period_ms / 1000)
        return executed

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    def snapshot(self) -> SimulationSnapshot:
        return self._snapshot

    def subscribe(self, callback: TickCallback) -> Callable[[], None]:
        """
        Call ``callback`` with every new snapshot, once per tick.

        Returns a callable that removes the subscription.
        """
        return self._bus.subscribe(callback)

    def unsubscribe(self, callback: TickCallback) -> bool:
        return self._bus.unsubscribe(callback)

    # ------------------------------------------------------------------

    def _refresh_snapshot(self) -> None:
        self._snapshot = self._engine.snapshot(running=self._running)

    def _record_skipped_tick(self) -> None:
        logger.exception("tick %d skipped", self._engine.clock.tick_count() + 1)
        self._engine.registry.alert_log.append(
            f"Engine skipped tick {self._engine.clock.tick_count() + 1}",
            AlertSeverity.DIAGNOSTIC,
            self._engine.clock.now_ms(),
        )
