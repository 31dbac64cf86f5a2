"""
Attack and defense spawner.

On every tick the generator may launch one attack and one defense. It
draws exactly two "should I spawn" samples per tick whatever happens, so
the random stream stays aligned between two runs with the same seed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cybersim.engine.models import (
    HIGH_SEVERITY,
    AlertSeverity,
    AttackEvent,
    AttackKind,
    DefenseEvent,
    EffectKind,
    NodeStatus,
    Severity,
)
from cybersim.engine.random_source import RandomEventSource
from cybersim.engine.registry import EntityRegistry

if TYPE_CHECKING:
    from cybersim.config import SimulationConfig

logger = logging.getLogger(__name__)


class EventGenerator:
    """
    Produces attack and defense events against a registry.

    Simulates a live network under fire:
    - attackers pick random targets, more often and harder as intensity grows
    - defenders reinforce nodes that are already hurting
    """

    def __init__(self, config: SimulationConfig):
        """
        Args:
            config: Spawn rates, allowed kinds and tick length.
        """
        self.config = config

    def attack_probability(self, intensity: float) -> float:
        return min(self.config.attack_spawn_chance * intensity, self.config.attack_spawn_cap)

    def maybe_spawn(
        self,
        registry: EntityRegistry,
        rng: RandomEventSource,
        intensity: float,
        tick: int = 0,
        now_ms: float = 0.0,
    ) -> list[AttackEvent | DefenseEvent]:
        """
        Possibly spawn one attack and one defense.

        Args:
            registry: Registry to spawn into.
            rng: The simulation's random source.
            intensity: Intensity computed at the end of the previous tick.
            tick: Tick number stamped on new events.
            now_ms: Simulated time for alerts and effects.

        Returns:
            The events that were spawned, attack first.
        """
        spawned: list[AttackEvent | DefenseEvent] = []

        attack_roll = rng.uniform()
        defense_roll = rng.uniform()

        if attack_roll < self.attack_probability(intensity):
            attack = self._spawn_attack(registry, rng, intensity, tick, now_ms)
            if attack is not None:
                spawned.append(attack)

        if defense_roll < self.config.defense_spawn_chance:
            defense = self._spawn_defense(registry, rng, tick, now_ms)
            if defense is not None:
                spawned.append(defense)

        return spawned

    def _spawn_attack(
        self,
        registry: EntityRegistry,
        rng: RandomEventSource,
        intensity: float,
        tick: int,
        now_ms: float,
    ) -> AttackEvent | None:
        sources = registry.attackers()
        if not sources:
            return None

        source = rng.choice(sources)
        targets = [n for n in registry.targets() if n.id != source.id]
        if not targets:
            return None

        target = rng.choice(targets)
        kind = self._pick_attack_kind(rng, intensity)

        if self.config.attack_speed is not None:
            speed = self.config.attack_speed
        else:
            speed = kind.profile.speed * self.config.tick_period_ms / 1000

        attack = AttackEvent(
            id=registry.next_id("attack"),
            source_id=source.id,
            target_id=target.id,
            kind=kind,
            speed=speed,
            created_tick=tick,
        )
        registry.add_attack(attack)
        logger.debug("spawned %s %s -> %s", kind.value, source.id, target.id)

        if kind.severity is Severity.CRITICAL:
            registry.alert_log.append(
                f"CRITICAL THREAT: {kind.profile.label} launched against {target.name}",
                AlertSeverity.CRITICAL,
                now_ms,
            )
        if kind.profile.reconnaissance:
            registry.add_effect(target.id, EffectKind.SCAN, now_ms)
            registry.refresh_scanning()

        return attack

    def _pick_attack_kind(self, rng: RandomEventSource, intensity: float) -> AttackKind:
        kinds = list(self.config.attack_kinds)

        # Escalate towards the nastier attacks once the network is struggling
        if intensity > self.config.escalation_threshold:
            severe = [k for k in kinds if k.severity in HIGH_SEVERITY]
            if severe and rng.chance(self.config.escalation_chance):
                return rng.choice(severe)

        return rng.choice(kinds)

    def _spawn_defense(
        self,
        registry: EntityRegistry,
        rng: RandomEventSource,
        tick: int,
        now_ms: float,
    ) -> DefenseEvent | None:
        candidates = registry.targets()
        if not candidates:
            return None

        # Uniform among the hurting nodes, never "lowest health first"
        hurting = [n for n in candidates if n.status is not NodeStatus.SECURE]
        target = rng.choice(hurting or candidates)

        kind = rng.choice(list(self.config.defense_kinds))
        profile = kind.profile
        defense = DefenseEvent(
            id=registry.next_id("defense"),
            target_id=target.id,
            kind=kind,
            decay_rate=profile.decay_rate * self.config.tick_period_ms / 1000,
            created_tick=tick,
        )
        registry.add_defense(defense)
        registry.add_effect(target.id, EffectKind.SHIELD, now_ms)

        blocked = registry.block_attacks_on(target.id, rng, self.config.block_chance)
        logger.debug("spawned %s on %s, blocked %d attack(s)", kind.value, target.id, blocked)

        if profile.strength > 90:
            registry.alert_log.append(
                f"{profile.label} activated on {target.name}",
                AlertSeverity.WARNING,
                now_ms,
            )

        return defense
