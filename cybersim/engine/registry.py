"""
Entity registry for the cybersim warfare engine.

The registry owns every node, every live attack and defense, every
ephemeral effect and the alert log of one simulation. It is the only
place simulation state is changed, and it changes it only in response
to event resolution:

- an attack that completes deals its damage in one lump sum and can only
  make a node's status worse;
- a live defense restores a little health every tick and can only make a
  node's status better;
- a destroyed node is terminal. Nothing changes it again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from cybersim.engine.alert_log import AlertLog
from cybersim.engine.models import (
    AlertSeverity,
    AttackEvent,
    DefenseEvent,
    EffectKind,
    EphemeralEffect,
    Metrics,
    Node,
    NodeStatus,
    SimulationSnapshot,
    health_band,
)
from cybersim.engine.random_source import RandomEventSource
from cybersim.errors import InvariantViolation

if TYPE_CHECKING:
    from cybersim.config import NodeSpec

logger = logging.getLogger(__name__)


class EntityRegistry:
    """
    Holds the fixed node topology plus all transient events.

    Nodes and events are frozen dataclasses; every change replaces the
    stored object, so objects already handed out in a snapshot never move.
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        alert_log: AlertLog | None = None,
        *,
        shield_absorption: float = 0.5,
        damage_factor: float = 1.0,
        restore_factor: float = 0.05,
        effect_ttl_ms: float = 2000,
    ) -> None:
        self._nodes: dict[str, Node] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise ValueError(f"Duplicate node id '{node.id}'")
            self._nodes[node.id] = node

        self._attacks: dict[str, AttackEvent] = {}
        self._defenses: dict[str, DefenseEvent] = {}
        self._effects: list[EphemeralEffect] = []
        self.alert_log = alert_log if alert_log is not None else AlertLog()

        self.shield_absorption = shield_absorption
        self.damage_factor = damage_factor
        self.restore_factor = restore_factor
        self.effect_ttl_ms = effect_ttl_ms

        self._sequence = 0

    @classmethod
    def from_topology(cls, topology: Iterable[NodeSpec], **kwargs) -> EntityRegistry:
        nodes = [
            Node(
                id=spec.id,
                name=spec.name,
                role=spec.role,
                status=health_band(spec.health),
                health=float(spec.health),
                shield=float(spec.shield),
                connections=frozenset(spec.connections),
            )
            for spec in topology
        ]
        return cls(nodes, **kwargs)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def node(self, node_id: str) -> Node:
        return self._nodes[node_id]

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def attacks(self) -> tuple[AttackEvent, ...]:
        return tuple(self._attacks.values())

    @property
    def defenses(self) -> tuple[DefenseEvent, ...]:
        return tuple(self._defenses.values())

    @property
    def effects(self) -> tuple[EphemeralEffect, ...]:
        return tuple(self._effects)

    def attackers(self) -> list[Node]:
        """Nodes that may launch attacks."""
        return [n for n in self._nodes.values() if n.is_attacker and not n.is_destroyed]

    def targets(self) -> list[Node]:
        """Nodes that may be attacked or defended."""
        return [n for n in self._nodes.values() if not n.is_attacker and not n.is_destroyed]

    def next_id(self, prefix: str) -> str:
        self._sequence += 1
        return f"{prefix}-{self._sequence}"

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def add_attack(self, attack: AttackEvent) -> None:
        if attack.target_id not in self._nodes or attack.source_id not in self._nodes:
            raise KeyError(f"Attack {attack.id} references an unknown node")
        if attack.source_id == attack.target_id:
            raise ValueError("A node cannot attack itself")
        self._attacks[attack.id] = attack

    def add_defense(self, defense: DefenseEvent) -> None:
        if defense.target_id not in self._nodes:
            raise KeyError(f"Defense {defense.id} targets unknown node '{defense.target_id}'")
        self._defenses[defense.id] = defense

    def add_effect(self, node_id: str, kind: EffectKind, now_ms: float) -> EphemeralEffect:
        effect = EphemeralEffect(
            id=self.next_id("effect"),
            node_id=node_id,
            kind=kind,
            created_at=now_ms,
            ttl_ms=self.effect_ttl_ms,
        )
        self._effects.append(effect)
        return effect

    def block_attacks_on(self, node_id: str, rng: RandomEventSource, chance: float) -> int:
        """
        Give every live, unblocked attack on ``node_id`` a chance to be blocked.

        One sample is drawn per candidate attack, in spawn order.
        """
        blocked = 0
        for attack in list(self._attacks.values()):
            if attack.target_id != node_id or attack.blocked:
                continue
            if rng.chance(chance):
                self._attacks[attack.id] = replace(attack, blocked=True)
                blocked += 1
        return blocked

    # ------------------------------------------------------------------
    # Per-tick progress
    # ------------------------------------------------------------------

    def advance_attacks(self, blocked_factor: float) -> None:
        for attack in list(self._attacks.values()):
            step = attack.speed * (blocked_factor if attack.blocked else 1.0)
            progress = min(100.0, attack.progress + max(0.0, step))
            self._attacks[attack.id] = replace(attack, progress=progress)

    def rescale_rates(self, factor: float, attacks: bool = True) -> None:
        """
        Multiply per-tick attack speed and defense decay by ``factor``.

        Used when the tick period changes, so live events keep their
        per-second rates. ``attacks=False`` leaves attack speeds alone.
        """
        if attacks:
            for attack in list(self._attacks.values()):
                self._attacks[attack.id] = replace(attack, speed=attack.speed * factor)
        for defense in list(self._defenses.values()):
            self._defenses[defense.id] = replace(defense, decay_rate=defense.decay_rate * factor)

    def decay_defenses(self) -> None:
        for defense in list(self._defenses.values()):
            effectiveness = max(0.0, defense.effectiveness - max(0.0, defense.decay_rate))
            self._defenses[defense.id] = replace(defense, effectiveness=effectiveness)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def apply_attack_resolution(
        self, attack: AttackEvent, intensity: float = 1.0, now_ms: float = 0.0
    ) -> Node:
        """
        Deal a completed attack's damage to its target.

        Damage is ``base_damage * severity_multiplier * intensity``, scaled
        by ``damage_factor`` and reduced by the target's shield. An
        unblocked attack leaves the node BREACHED unless it was destroyed.
        Destroyed targets are left as they are.
        """
        node = self._nodes[attack.target_id]
        if node.is_destroyed:
            return node

        profile = attack.kind.profile
        damage = (
            profile.base_damage
            * profile.severity.multiplier
            * intensity
            * self.damage_factor
            * (1 - node.shield / 100 * self.shield_absorption)
        )
        health = max(0.0, node.health - max(0.0, damage))

        status = node.status.worse(health_band(health))
        if not attack.blocked and status is not NodeStatus.DESTROYED:
            status = NodeStatus.BREACHED

        updated = replace(node, health=health, status=status)
        self._nodes[node.id] = updated

        if status is NodeStatus.DESTROYED:
            message = f"{node.name} DESTROYED by {profile.label}"
            severity = AlertSeverity.BREACH
            effect = EffectKind.EXPLOSION
        elif status is NodeStatus.BREACHED:
            message = f"{profile.label} breached {node.name} ({health:.0f}% health)"
            severity = AlertSeverity.BREACH
            effect = EffectKind.BREACH
        else:
            message = f"Blocked {profile.label} still hit {node.name} ({health:.0f}% health)"
            severity = AlertSeverity.INFO
            effect = EffectKind.BREACH

        self.alert_log.append(message, severity, now_ms)
        self.add_effect(node.id, effect, now_ms)
        logger.debug(
            "attack %s resolved on %s: damage=%.2f health=%.2f status=%s",
            attack.id, node.id, damage, health, status.value,
        )
        return updated

    def apply_defense_resolution(self, defense: DefenseEvent) -> Node:
        """
        Restore health from a live defense, scaled by its current effectiveness.

        Called once per tick for every live defense. Status can only
        improve, and a destroyed node cannot be revived.
        """
        node = self._nodes[defense.target_id]
        if node.is_destroyed:
            return node

        restored = defense.kind.profile.strength * (defense.effectiveness / 100) * self.restore_factor
        health = min(100.0, node.health + max(0.0, restored))
        status = node.status.better(health_band(health))

        updated = replace(node, health=health, status=status)
        self._nodes[node.id] = updated
        return updated

    def restore_from_defenses(self) -> None:
        for defense in list(self._defenses.values()):
            self.apply_defense_resolution(defense)

    def resolve_completed(self, intensity: float, now_ms: float) -> list[AttackEvent]:
        """
        Resolve each completed attack exactly once, then drop it and any
        expired defense.
        """
        resolved = [a for a in self._attacks.values() if a.is_complete]
        for attack in resolved:
            del self._attacks[attack.id]
            self.apply_attack_resolution(attack, intensity, now_ms)

        for defense in [d for d in self._defenses.values() if d.is_expired]:
            del self._defenses[defense.id]

        self.refresh_scanning()
        return resolved

    def refresh_scanning(self) -> None:
        """
        Keep the SCANNING overlay in step with live reconnaissance attacks.
        """
        scanned = {
            a.target_id for a in self._attacks.values() if a.kind.profile.reconnaissance
        }
        for node in list(self._nodes.values()):
            if node.status is NodeStatus.SECURE and node.id in scanned:
                self._nodes[node.id] = replace(node, status=NodeStatus.SCANNING)
            elif node.status is NodeStatus.SCANNING and node.id not in scanned:
                self._nodes[node.id] = replace(node, status=health_band(node.health))

    def evict_expired(self, now_ms: float) -> None:
        self._effects = [e for e in self._effects if not e.is_expired(now_ms)]
        self.alert_log.evict_expired(now_ms)

    # ------------------------------------------------------------------
    # Invariants and snapshots
    # ------------------------------------------------------------------

    def check_invariants(self, strict: bool = False) -> list[str]:
        """
        Verify every bounded value.

        With ``strict`` the first problem raises InvariantViolation;
        otherwise out-of-range values are clamped and the problems returned.
        """
        problems: list[str] = []

        for node in list(self._nodes.values()):
            fixed = node
            if not 0 <= node.health <= 100:
                problems.append(f"node {node.id} health {node.health}")
                fixed = replace(fixed, health=min(100.0, max(0.0, node.health)))
            if (fixed.health == 0) != (fixed.status is NodeStatus.DESTROYED):
                problems.append(f"node {node.id} status {fixed.status.value} at health {fixed.health}")
                fixed = replace(fixed, status=health_band(fixed.health))
            self._nodes[node.id] = fixed

        for attack in list(self._attacks.values()):
            if not 0 <= attack.progress <= 100:
                problems.append(f"attack {attack.id} progress {attack.progress}")
                self._attacks[attack.id] = replace(
                    attack, progress=min(100.0, max(0.0, attack.progress))
                )

        for defense in list(self._defenses.values()):
            if not 0 <= defense.effectiveness <= 100:
                problems.append(f"defense {defense.id} effectiveness {defense.effectiveness}")
                self._defenses[defense.id] = replace(
                    defense, effectiveness=min(100.0, max(0.0, defense.effectiveness))
                )

        if problems:
            if strict:
                raise InvariantViolation("; ".join(problems))
            logger.debug("clamped out-of-range values: %s", problems)
        return problems

    def get_snapshot(
        self,
        metrics: Metrics | None = None,
        tick: int = 0,
        elapsed_ms: float = 0.0,
        running: bool = False,
    ) -> SimulationSnapshot:
        return SimulationSnapshot(
            tick=tick,
            elapsed_ms=elapsed_ms,
            running=running,
            nodes=self.nodes,
            attacks=self.attacks,
            defenses=self.defenses,
            effects=self.effects,
            alerts=self.alert_log.entries(),
            metrics=metrics if metrics is not None else Metrics(),
        )
