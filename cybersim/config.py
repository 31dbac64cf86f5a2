"""
Configuration for the cybersim warfare engine.

Every tunable lives on one frozen ``SimulationConfig``. All fields have
defaults, so an empty mapping is a valid configuration. Configuration can
be built in code, updated partially through ``SimulationConfig.updated``
(which is what ``SimulationFacade.configure`` uses), or loaded from a YAML
file with ``load_config``.

Validation collects every problem before raising, so a caller fixing a
config file sees all of its mistakes at once.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from cybersim.engine.models import AttackKind, DefenseKind, NodeRole
from cybersim.errors import ConfigurationError


@dataclass(frozen=True)
class NodeSpec:
    """Initial state of one node in the fixed topology."""

    id: str
    name: str
    role: NodeRole
    shield: float = 0.0
    health: float = 100.0
    connections: tuple[str, ...] = ()


def _spec(node_id, name, role, shield, *connections) -> NodeSpec:
    return NodeSpec(node_id, name, role, shield=shield, connections=tuple(connections))


DEFAULT_TOPOLOGY: tuple[NodeSpec, ...] = (
    # Attackers
    _spec("nation_hacker", "Nation State Cell", NodeRole.ATTACKER, 0, "quantum_shield"),
    _spec("ai_botnet", "AI Botnet", NodeRole.ATTACKER, 0, "firewall1"),
    _spec("quantum_hacker", "Quantum Hacker", NodeRole.ATTACKER, 0, "ai_defense"),
    _spec("insider", "Insider Threat", NodeRole.ATTACKER, 0, "honeypot1"),
    # Defensive perimeter
    _spec("quantum_shield", "Quantum Shield", NodeRole.QUANTUM_SHIELD, 95, "satellite"),
    _spec("firewall1", "Edge Firewall", NodeRole.FIREWALL, 70, "server1"),
    _spec("ai_defense", "AI Defense Grid", NodeRole.AI_DEFENSE, 85, "server2"),
    _spec("honeypot1", "Honeypot", NodeRole.HONEYPOT, 60, "server3"),
    # Infrastructure
    _spec("satellite", "Uplink Satellite", NodeRole.SATELLITE, 80, "power_grid"),
    _spec("server1", "Web Server", NodeRole.SERVER, 50, "target1"),
    _spec("server2", "Application Server", NodeRole.SERVER, 50, "target2"),
    _spec("server3", "Mail Server", NodeRole.SERVER, 50, "target3"),
    # High value targets
    _spec("power_grid", "Power Grid Control", NodeRole.CRITICAL_FACILITY, 100),
    _spec("target1", "Customer Database", NodeRole.TARGET, 30),
    _spec("target2", "Payment Gateway", NodeRole.TARGET, 30),
    _spec("target3", "Backup Vault", NodeRole.TARGET, 30),
)

# Fields that only take effect when the simulation is rebuilt
RESET_ONLY_FIELDS = frozenset({"seed", "topology"})

_PROBABILITY_FIELDS = (
    "attack_spawn_chance",
    "attack_spawn_cap",
    "defense_spawn_chance",
    "escalation_chance",
    "block_chance",
    "shield_absorption",
)

_NON_NEGATIVE_FIELDS = (
    "escalation_threshold",
    "damage_factor",
    "restore_factor",
    "score_weight_active",
    "score_weight_critical",
    "score_weight_compromised",
    "score_weight_destroyed",
    "alert_max_age_ms",
    "effect_ttl_ms",
)


@dataclass(frozen=True)
class SimulationConfig:
    tick_period_ms: float = 800

    # Spawning
    attack_spawn_chance: float = 0.3
    attack_spawn_cap: float = 0.9
    defense_spawn_chance: float = 0.4
    escalation_threshold: float = 3.0
    escalation_chance: float = 0.4
    block_chance: float = 0.75
    attack_kinds: tuple[AttackKind, ...] = tuple(AttackKind)
    defense_kinds: tuple[DefenseKind, ...] = tuple(DefenseKind)

    # Progress and damage
    blocked_factor: float = 0.2
    attack_speed: float | None = None
    damage_factor: float = 1.0
    restore_factor: float = 0.05
    shield_absorption: float = 0.5

    # Scoring
    score_weight_active: float = 10
    score_weight_critical: float = 15
    score_weight_compromised: float = 20
    score_weight_destroyed: float = 30
    max_intensity: float = 5.0

    # Logs and effects
    alert_capacity: int = 5
    alert_max_age_ms: float = 8000
    effect_ttl_ms: float = 2000

    seed: int | None = 42
    topology: tuple[NodeSpec, ...] = field(default=DEFAULT_TOPOLOGY)
    debug: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """
        Build a config from plain data (e.g. parsed YAML) on top of the defaults.
        """
        return cls().updated(**data)

    def updated(self, **options: Any) -> SimulationConfig:
        """
        Return a copy with ``options`` applied.

        Raises:
            ConfigurationError: listing every unknown or invalid option.
                The receiver is left untouched.
        """
        known = {f.name for f in fields(self)}
        problems = [f"Unknown option '{name}'" for name in options if name not in known]
        if problems:
            raise ConfigurationError(problems)

        coerced: dict[str, Any] = {}
        for name, value in options.items():
            try:
                coerced[name] = _coerce(name, value)
            except (TypeError, ValueError, KeyError) as exc:
                problems.append(f"{name}: {exc}")
        if problems:
            raise ConfigurationError(problems)

        return replace(self, **coerced).validated()

    def validated(self) -> SimulationConfig:
        """
        Check every field and return self if the config is usable.
        """
        problems: list[str] = []

        if not _is_number(self.tick_period_ms) or self.tick_period_ms <= 0:
            problems.append("tick_period_ms must be a positive number")

        for name in _PROBABILITY_FIELDS:
            value = getattr(self, name)
            if not _is_number(value) or not 0 <= value <= 1:
                problems.append(f"{name} must be a number between 0 and 1")

        for name in _NON_NEGATIVE_FIELDS:
            value = getattr(self, name)
            if not _is_number(value) or value < 0:
                problems.append(f"{name} must be a non-negative number")

        if not _is_number(self.blocked_factor) or not 0 <= self.blocked_factor < 1:
            problems.append("blocked_factor must be at least 0 and below 1")

        if self.attack_speed is not None and (
            not _is_number(self.attack_speed) or self.attack_speed <= 0
        ):
            problems.append("attack_speed must be a positive number or null")

        if not _is_number(self.max_intensity) or self.max_intensity < 1:
            problems.append("max_intensity must be a number of at least 1")

        if isinstance(self.alert_capacity, bool) or not isinstance(self.alert_capacity, int) \
                or self.alert_capacity < 0:
            problems.append("alert_capacity must be a non-negative integer")

        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            problems.append("seed must be an integer or null")

        if not self.attack_kinds:
            problems.append("attack_kinds must name at least one attack kind")
        if not self.defense_kinds:
            problems.append("defense_kinds must name at least one defense kind")

        problems.extend(_topology_problems(self.topology))

        if problems:
            raise ConfigurationError(problems)
        return self


def load_config(path: Path) -> SimulationConfig:
    """
    Load a YAML configuration file.

    Raises:
        ConfigurationError: when the file is not a mapping or holds
            invalid values.
    """
    with Path(path).open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        return SimulationConfig()

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must be a YAML mapping (dict)")

    return SimulationConfig.from_mapping(data)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _coerce(name: str, value: Any) -> Any:
    if name == "attack_kinds":
        return tuple(v if isinstance(v, AttackKind) else AttackKind(v) for v in value)
    if name == "defense_kinds":
        return tuple(v if isinstance(v, DefenseKind) else DefenseKind(v) for v in value)
    if name == "topology":
        return tuple(_node_spec(item) for item in value)
    return value


def _node_spec(item: NodeSpec | Mapping[str, Any]) -> NodeSpec:
    if isinstance(item, NodeSpec):
        return item
    if not isinstance(item, Mapping):
        raise TypeError("topology entries must be mappings")
    if "id" not in item or "role" not in item:
        raise ValueError("topology entries need at least 'id' and 'role'")

    role = item["role"]
    return NodeSpec(
        id=str(item["id"]),
        name=str(item.get("name", item["id"])),
        role=role if isinstance(role, NodeRole) else NodeRole(role),
        shield=item.get("shield", 0.0),
        health=item.get("health", 100.0),
        connections=tuple(str(c) for c in item.get("connections", ())),
    )


def _topology_problems(topology: tuple[NodeSpec, ...]) -> list[str]:
    problems: list[str] = []
    if not topology:
        return ["topology must contain at least one node"]

    ids = [spec.id for spec in topology]
    duplicates = sorted({node_id for node_id in ids if ids.count(node_id) > 1})
    if duplicates:
        problems.append(f"topology has duplicate node ids: {', '.join(duplicates)}")

    known = set(ids)
    for spec in topology:
        if not _is_number(spec.health) or not 0 <= spec.health <= 100:
            problems.append(f"node '{spec.id}': health must be between 0 and 100")
        if not _is_number(spec.shield) or not 0 <= spec.shield <= 100:
            problems.append(f"node '{spec.id}': shield must be between 0 and 100")
        unknown = [c for c in spec.connections if c not in known or c == spec.id]
        if unknown:
            problems.append(f"node '{spec.id}': invalid connections {unknown}")
    return problems
