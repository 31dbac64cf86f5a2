"""
Simulation engine for the cybersim warfare engine.

The engine owns one complete simulation: random source, clock, registry
and the metrics of the last tick. ``tick()`` runs the fixed pipeline:

1. spawn new attacks/defenses (using last tick's intensity)
2. advance attack progress
3. decay defenses and apply their incremental restore
4. resolve completed attacks, drop expired defenses
5. evict expired effects and alerts
6. check invariants and recompute metrics

A tick is all-or-nothing. State is checkpointed before the pipeline runs
and put back if any step raises, so a caller never sees half a tick.
"""

from __future__ import annotations

import copy
import logging

from cybersim.config import SimulationConfig
from cybersim.engine.alert_log import AlertLog
from cybersim.engine.clock import SimulationClock
from cybersim.engine.event_generator import EventGenerator
from cybersim.engine.models import Metrics, SimulationSnapshot
from cybersim.engine.random_source import RandomEventSource
from cybersim.engine.registry import EntityRegistry
from cybersim.engine.scoring import ScoringWeights, compute_metrics

logger = logging.getLogger(__name__)


class SimulationEngine:
    """Runs ticks against a single simulation state."""

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self.config = config if config is not None else SimulationConfig()
        self.generator = EventGenerator(self.config)
        self.rebuild()

    def rebuild(self) -> None:
        """
        Recreate every piece of state from the current config.

        This is the only point where ``seed`` and ``topology`` are read.
        """
        config = self.config
        previous = getattr(self, "registry", None)
        sequence = previous.alert_log.last_sequence if previous is not None else 0

        self.rng = RandomEventSource(config.seed)
        self.clock = SimulationClock(config.tick_period_ms)
        self.registry = EntityRegistry.from_topology(
            config.topology,
            alert_log=AlertLog(config.alert_capacity, config.alert_max_age_ms, sequence),
            shield_absorption=config.shield_absorption,
            damage_factor=config.damage_factor,
            restore_factor=config.restore_factor,
            effect_ttl_ms=config.effect_ttl_ms,
        )
        self.metrics = Metrics()

    def apply_config(self, config: SimulationConfig) -> None:
        """
        Switch to ``config`` for rates and weights without touching state.

        A new tick period rescales live attacks and defenses so they keep
        their per-second rates. Attacks moving at a fixed ``attack_speed``
        are per-tick by definition and keep their speed.
        """
        factor = config.tick_period_ms / self.clock.tick_period_ms
        self.config = config
        self.generator.config = config
        if factor != 1:
            self.registry.rescale_rates(factor, attacks=config.attack_speed is None)
        self.clock.set_tick_period(config.tick_period_ms)
        self.registry.shield_absorption = config.shield_absorption
        self.registry.damage_factor = config.damage_factor
        self.registry.restore_factor = config.restore_factor
        self.registry.effect_ttl_ms = config.effect_ttl_ms
        self.registry.alert_log.configure(config.alert_capacity, config.alert_max_age_ms)

    @property
    def weights(self) -> ScoringWeights:
        return ScoringWeights(
            active_attack=self.config.score_weight_active,
            critical_attack=self.config.score_weight_critical,
            compromised_node=self.config.score_weight_compromised,
            destroyed_node=self.config.score_weight_destroyed,
        )

    def tick(self) -> Metrics:
        """
        Run one full tick and return the new metrics.

        On any exception the engine is restored to its state before the
        tick and the exception is re-raised.
        """
        saved = copy.deepcopy((self.rng, self.clock, self.registry, self.metrics))
        try:
            self._run_tick()
        except Exception:
            self.rng, self.clock, self.registry, self.metrics = saved
            raise
        return self.metrics

    def _run_tick(self) -> None:
        tick = self.clock.advance()
        now_ms = self.clock.now_ms()
        intensity = self.metrics.intensity
        registry = self.registry

        self.generator.maybe_spawn(registry, self.rng, intensity, tick, now_ms)

        registry.advance_attacks(self.config.blocked_factor)

        registry.decay_defenses()
        registry.restore_from_defenses()

        registry.resolve_completed(intensity, now_ms)

        registry.evict_expired(now_ms)

        registry.check_invariants(strict=self.config.debug)
        self.metrics = compute_metrics(
            registry.nodes, registry.attacks, self.weights, self.config.max_intensity
        )
        logger.debug(
            "tick %d: score=%.1f attacks=%d defenses=%d",
            tick, self.metrics.security_score, len(registry.attacks), len(registry.defenses),
        )

    def snapshot(self, running: bool = False) -> SimulationSnapshot:
        return self.registry.get_snapshot(
            metrics=self.metrics,
            tick=self.clock.tick_count(),
            elapsed_ms=self.clock.now_ms(),
            running=running,
        )
