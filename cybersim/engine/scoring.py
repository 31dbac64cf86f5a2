"""
Aggregate scoring for the cybersim warfare engine.

``compute_metrics`` is a pure function of registry state: it never
mutates anything and keeps no history. The intensity it returns is fed
back into the event generator on the *next* tick only.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cybersim.engine.models import (
    HIGH_SEVERITY,
    AttackEvent,
    Metrics,
    Node,
    NodeStatus,
    ThreatLevel,
)

_COMPROMISED = frozenset({NodeStatus.COMPROMISED, NodeStatus.BREACHED})

# (exclusive lower bound, level), checked top down
THREAT_THRESHOLDS: tuple[tuple[float, ThreatLevel], ...] = (
    (90, ThreatLevel.SECURE),
    (75, ThreatLevel.ELEVATED),
    (50, ThreatLevel.HIGH),
    (25, ThreatLevel.CRITICAL),
)


@dataclass(frozen=True)
class ScoringWeights:
    active_attack: float = 10
    critical_attack: float = 15
    compromised_node: float = 20
    destroyed_node: float = 30


def threat_level(score: float) -> ThreatLevel:
    for bound, level in THREAT_THRESHOLDS:
        if score > bound:
            return level
    return ThreatLevel.EXTREME


def compute_metrics(
    nodes: Iterable[Node],
    attacks: Iterable[AttackEvent],
    weights: ScoringWeights = ScoringWeights(),
    max_intensity: float = 5.0,
) -> Metrics:
    attacks = list(attacks)
    nodes = list(nodes)

    active = sum(1 for a in attacks if not a.blocked)
    critical = sum(1 for a in attacks if a.severity in HIGH_SEVERITY)
    compromised = sum(1 for n in nodes if n.status in _COMPROMISED)
    destroyed = sum(1 for n in nodes if n.status is NodeStatus.DESTROYED)

    raw = (
        100
        - active * weights.active_attack
        - critical * weights.critical_attack
        - compromised * weights.compromised_node
        - destroyed * weights.destroyed_node
    )
    score = float(min(100, max(0, raw)))

    return Metrics(
        security_score=score,
        threat_level=threat_level(score),
        intensity=1 + (100 - score) / 100 * (max_intensity - 1),
        active_attacks=active,
        critical_attacks=critical,
        compromised_nodes=compromised,
        destroyed_nodes=destroyed,
    )
