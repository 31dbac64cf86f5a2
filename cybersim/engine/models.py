"""
Data model for the cybersim warfare engine.

Every object that can appear in a snapshot is a frozen dataclass. The
registry never mutates one in place; it swaps in a modified copy via
``dataclasses.replace``. That is what lets a snapshot be a plain tuple of
the registry's current objects while staying immutable for the renderer.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class NodeStatus(Enum):
    """Node status, declared from best to worst."""

    SECURE = "secure"
    SCANNING = "scanning"
    UNDER_ATTACK = "under_attack"
    COMPROMISED = "compromised"
    BREACHED = "breached"
    DESTROYED = "destroyed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def worse(self, other: NodeStatus) -> NodeStatus:
        return self if self.rank >= other.rank else other

    def better(self, other: NodeStatus) -> NodeStatus:
        return self if self.rank <= other.rank else other


_STATUS_ORDER = list(NodeStatus)


class NodeRole(Enum):
    ATTACKER = "attacker"
    FIREWALL = "firewall"
    HONEYPOT = "honeypot"
    AI_DEFENSE = "ai_defense"
    QUANTUM_SHIELD = "quantum_shield"
    SATELLITE = "satellite"
    SERVER = "server"
    TARGET = "target"
    CRITICAL_FACILITY = "critical_facility"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def multiplier(self) -> float:
        return SEVERITY_MULTIPLIERS[self]


SEVERITY_MULTIPLIERS = {
    Severity.LOW: 0.75,
    Severity.MEDIUM: 1.0,
    Severity.HIGH: 1.25,
    Severity.CRITICAL: 1.5,
}


class ThreatLevel(Enum):
    SECURE = "secure"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"
    EXTREME = "extreme"


class AlertSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    BREACH = "breach"
    # Engine self-reports, never produced by simulated activity
    DIAGNOSTIC = "diagnostic"


class EffectKind(Enum):
    SCAN = "scan"
    BREACH = "breach"
    EXPLOSION = "explosion"
    SHIELD = "shield"


# ---------------------------------------------------------------------------
# Attack / defense kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttackProfile:
    label: str
    base_damage: float
    severity: Severity
    speed: float  # progress per simulated second
    reconnaissance: bool = False


@dataclass(frozen=True)
class DefenseProfile:
    label: str
    strength: float
    decay_rate: float  # effectiveness lost per simulated second


class AttackKind(Enum):
    RECONNAISSANCE = "reconnaissance"
    PHISHING = "phishing"
    DDOS = "ddos"
    SQL_INJECTION = "sql_injection"
    MALWARE = "malware"
    ZERO_DAY = "zero_day"
    SATELLITE_HIJACK = "satellite_hijack"

    @property
    def profile(self) -> AttackProfile:
        return ATTACK_PROFILES[self]

    @property
    def severity(self) -> Severity:
        return ATTACK_PROFILES[self].severity


class DefenseKind(Enum):
    FIREWALL_BLOCK = "firewall_block"
    INTRUSION_DETECTION = "intrusion_detection"
    HONEYPOT_TRAP = "honeypot_trap"
    AI_ANALYSIS = "ai_analysis"
    QUANTUM_ENCRYPTION = "quantum_encryption"
    NEURAL_DEFENSE = "neural_defense"

    @property
    def profile(self) -> DefenseProfile:
        return DEFENSE_PROFILES[self]


ATTACK_PROFILES: dict[AttackKind, AttackProfile] = {
    AttackKind.RECONNAISSANCE: AttackProfile("Network Scan", 5, Severity.LOW, 30, reconnaissance=True),
    AttackKind.PHISHING: AttackProfile("Social Engineering", 20, Severity.LOW, 25),
    AttackKind.DDOS: AttackProfile("DDoS Storm", 30, Severity.MEDIUM, 25),
    AttackKind.SQL_INJECTION: AttackProfile("Database Breach", 40, Severity.MEDIUM, 20),
    AttackKind.MALWARE: AttackProfile("AI Malware", 50, Severity.HIGH, 20),
    AttackKind.ZERO_DAY: AttackProfile("Zero-Day Exploit", 80, Severity.CRITICAL, 15),
    AttackKind.SATELLITE_HIJACK: AttackProfile("Satellite Takeover", 85, Severity.CRITICAL, 12.5),
}

DEFENSE_PROFILES: dict[DefenseKind, DefenseProfile] = {
    DefenseKind.FIREWALL_BLOCK: DefenseProfile("Firewall Shield", 70, 10),
    DefenseKind.INTRUSION_DETECTION: DefenseProfile("AI Threat Detection", 60, 10),
    DefenseKind.HONEYPOT_TRAP: DefenseProfile("Quantum Honeypot", 90, 12.5),
    DefenseKind.AI_ANALYSIS: DefenseProfile("Neural Analysis", 85, 10),
    DefenseKind.QUANTUM_ENCRYPTION: DefenseProfile("Quantum Encryption", 95, 7.5),
    DefenseKind.NEURAL_DEFENSE: DefenseProfile("Neural Firewall", 92, 7.5),
}

HIGH_SEVERITY = frozenset({Severity.HIGH, Severity.CRITICAL})


def health_band(health: float) -> NodeStatus:
    """Map a health value onto the status it implies on its own."""
    if health <= 0:
        return NodeStatus.DESTROYED
    if health < 30:
        return NodeStatus.COMPROMISED
    if health < 70:
        return NodeStatus.UNDER_ATTACK
    return NodeStatus.SECURE


# ---------------------------------------------------------------------------
# Entities and events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Node:
    """A simulated asset. Never removed; a destroyed node stays at health 0."""

    id: str
    name: str
    role: NodeRole
    status: NodeStatus = NodeStatus.SECURE
    health: float = 100.0
    shield: float = 0.0
    connections: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_attacker(self) -> bool:
        return self.role is NodeRole.ATTACKER

    @property
    def is_destroyed(self) -> bool:
        return self.status is NodeStatus.DESTROYED


@dataclass(frozen=True)
class AttackEvent:
    id: str
    source_id: str
    target_id: str
    kind: AttackKind
    speed: float
    progress: float = 0.0
    blocked: bool = False
    created_tick: int = 0

    @property
    def severity(self) -> Severity:
        return self.kind.severity

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100


@dataclass(frozen=True)
class DefenseEvent:
    id: str
    target_id: str
    kind: DefenseKind
    decay_rate: float
    effectiveness: float = 100.0
    created_tick: int = 0

    @property
    def is_expired(self) -> bool:
        return self.effectiveness <= 0


@dataclass(frozen=True)
class EphemeralEffect:
    """Display-only marker. Nothing in the engine reads it back."""

    id: str
    node_id: str
    kind: EffectKind
    created_at: float
    ttl_ms: float

    def is_expired(self, now_ms: float) -> bool:
        return now_ms - self.created_at > self.ttl_ms


@dataclass(frozen=True)
class AlertLogEntry:
    message: str
    severity: AlertSeverity
    created_at: float
    # Position in the log since the simulation was created; survives reset
    sequence: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Metrics:
    security_score: float = 100.0
    threat_level: ThreatLevel = ThreatLevel.SECURE
    intensity: float = 1.0
    active_attacks: int = 0
    critical_attacks: int = 0
    compromised_nodes: int = 0
    destroyed_nodes: int = 0


@dataclass(frozen=True)
class SimulationSnapshot:
    """Point-in-time view of a simulation. Safe to hand to a renderer."""

    tick: int
    elapsed_ms: float
    running: bool
    nodes: tuple[Node, ...]
    attacks: tuple[AttackEvent, ...]
    defenses: tuple[DefenseEvent, ...]
    effects: tuple[EphemeralEffect, ...]
    alerts: tuple[AlertLogEntry, ...]
    metrics: Metrics

    def node(self, node_id: str) -> Node:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation with enums flattened to their values."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(item) for item in value)
    return value
