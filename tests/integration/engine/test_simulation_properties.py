"""
Integration tests for long simulation runs.
Each test drives a real SimulationFacade and checks properties that must
hold at every tick boundary.
"""

import pytest

from cybersim.config import SimulationConfig
from cybersim.engine.models import (
    AlertSeverity,
    DefenseKind,
    NodeRole,
    NodeStatus,
)
from cybersim.engine.scoring import compute_metrics, threat_level
from cybersim.facade import SimulationFacade

SEEDS = [1, 42, 2024]


def record(facade: SimulationFacade, ticks: int) -> list:
    snapshots = []
    facade.subscribe(snapshots.append)
    facade.run(max_ticks=ticks)
    return snapshots


@pytest.fixture(scope="module", params=SEEDS)
def long_run(request):
    """300 ticks of the default network under a given seed."""
    config = SimulationConfig(seed=request.param)
    return config, record(SimulationFacade(config), 300)


class TestTickBoundaryProperties:
    """Properties checked on every snapshot of a long run."""

    def test_scores_bounded(self, long_run):
        _, snapshots = long_run
        for snapshot in snapshots:
            metrics = snapshot.metrics
            assert 0 <= metrics.security_score <= 100
            assert metrics.threat_level is threat_level(metrics.security_score)
            assert 1 <= metrics.intensity <= 5

    def test_metrics_match_state(self, long_run):
        _, snapshots = long_run
        for snapshot in snapshots:
            assert snapshot.metrics == compute_metrics(snapshot.nodes, snapshot.attacks)

    def test_health_bounded_and_destroyed_means_zero(self, long_run):
        _, snapshots = long_run
        for snapshot in snapshots:
            for node in snapshot.nodes:
                assert 0 <= node.health <= 100
                assert (node.health == 0) == (node.status is NodeStatus.DESTROYED)

    def test_destroyed_is_terminal(self, long_run):
        _, snapshots = long_run
        destroyed = set()
        for snapshot in snapshots:
            for node in snapshot.nodes:
                if node.id in destroyed:
                    assert node.status is NodeStatus.DESTROYED
                    assert node.health == 0
                elif node.is_destroyed:
                    destroyed.add(node.id)

    def test_attack_progress_never_decreases(self, long_run):
        _, snapshots = long_run
        for before, after in zip(snapshots, snapshots[1:]):
            previous = {a.id: a.progress for a in before.attacks}
            for attack in after.attacks:
                if attack.id in previous:
                    assert attack.progress >= previous[attack.id]
                assert 0 <= attack.progress < 100

    def test_defense_effectiveness_never_increases(self, long_run):
        _, snapshots = long_run
        for before, after in zip(snapshots, snapshots[1:]):
            previous = {d.id: d.effectiveness for d in before.defenses}
            for defense in after.defenses:
                if defense.id in previous:
                    assert defense.effectiveness < previous[defense.id]
                assert 0 < defense.effectiveness <= 100

    def test_attackers_never_targeted(self, long_run):
        config, snapshots = long_run
        attackers = {spec.id for spec in config.topology if spec.role is NodeRole.ATTACKER}
        for snapshot in snapshots:
            for attack in snapshot.attacks:
                assert attack.source_id in attackers
                assert attack.target_id not in attackers
            for defense in snapshot.defenses:
                assert defense.target_id not in attackers

    def test_logs_bounded_by_size_and_age(self, long_run):
        config, snapshots = long_run
        for snapshot in snapshots:
            assert len(snapshot.alerts) <= config.alert_capacity
            for alert in snapshot.alerts:
                assert snapshot.elapsed_ms - alert.created_at <= config.alert_max_age_ms
            for effect in snapshot.effects:
                assert snapshot.elapsed_ms - effect.created_at <= effect.ttl_ms

    def test_no_skipped_ticks(self, long_run):
        _, snapshots = long_run
        assert [s.tick for s in snapshots] == list(range(1, 301))
        for snapshot in snapshots:
            assert all(a.severity is not AlertSeverity.DIAGNOSTIC for a in snapshot.alerts)


# ---------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------


def test_same_seed_replays_identically():
    first = record(SimulationFacade(SimulationConfig(seed=99)), 150)
    second = record(SimulationFacade(SimulationConfig(seed=99)), 150)
    assert first == second


def test_reset_replays_identically():
    facade = SimulationFacade(SimulationConfig(seed=3))
    first = list(record(facade, 100))

    facade.reset()
    second = record(facade, 100)

    assert second == first


# ---------------------------------------------------------------------
# Scripted scenarios
# ---------------------------------------------------------------------


def test_nothing_changes_without_spawns(quiet_config):
    facade = SimulationFacade(quiet_config)
    initial = facade.snapshot()

    snapshots = record(facade, 50)

    for snapshot in snapshots:
        assert snapshot.nodes == initial.nodes
        assert snapshot.attacks == snapshot.defenses == ()
        assert snapshot.metrics.security_score == 100


def test_forced_attack_until_destroyed(kill_config):
    facade = SimulationFacade(kill_config)
    snapshots = record(facade, 4)

    health = [s.node("blue").health for s in snapshots]
    status = [s.node("blue").status for s in snapshots]

    assert health == pytest.approx([70.0, 16.0, 0.0, 0.0])
    assert status == [
        NodeStatus.BREACHED,
        NodeStatus.BREACHED,
        NodeStatus.DESTROYED,
        NodeStatus.DESTROYED,
    ]
    assert [len(s.alerts) for s in snapshots] == [1, 2, 3, 3]
    assert snapshots[2].alerts[-1].message == "Blue Server DESTROYED by DDoS Storm"

    # Nothing left to attack
    assert snapshots[3].attacks == ()
    assert snapshots[3].metrics.destroyed_nodes == 1
    assert snapshots[3].metrics.security_score == 70


def test_defenses_cannot_revive_destroyed_node(kill_config):
    facade = SimulationFacade(kill_config)
    facade.run(max_ticks=3)

    facade.configure(attack_spawn_chance=0, defense_spawn_chance=1.0)
    snapshots = record(facade, 20)

    assert all(s.node("blue").status is NodeStatus.DESTROYED for s in snapshots)
    assert all(s.defenses == () for s in snapshots)


def test_alert_eviction_by_age(kill_config):
    facade = SimulationFacade(kill_config.updated(alert_max_age_ms=0))

    facade.run(max_ticks=1)
    first = facade.snapshot()
    assert len(first.alerts) == 1

    facade.configure(attack_spawn_chance=0)
    second = facade.step()
    assert second.alerts == ()


def test_alert_eviction_by_capacity(kill_config):
    facade = SimulationFacade(kill_config.updated(alert_capacity=2))
    snapshots = record(facade, 3)

    assert len(snapshots[-1].alerts) == 2
    assert snapshots[-1].alerts[-1].message == "Blue Server DESTROYED by DDoS Storm"


def test_defense_decays_away(duel_topology):
    config = SimulationConfig(
        topology=duel_topology,
        attack_spawn_chance=0,
        defense_spawn_chance=1.0,
        defense_kinds=(DefenseKind.FIREWALL_BLOCK,),
    )
    facade = SimulationFacade(config)
    facade.run(max_ticks=1)
    facade.configure(defense_spawn_chance=0)

    snapshots = record(facade, 12)
    effectiveness = [s.defenses[0].effectiveness for s in snapshots[:11]]

    # 10 per second over 800 ms ticks, starting from 92 after tick 1
    assert effectiveness == pytest.approx([100 - 8 * n for n in range(2, 13)])
    assert snapshots[-1].defenses == ()
    assert snapshots[-1].node("blue").health == 100
