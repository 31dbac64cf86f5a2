"""Test configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cybersim.config import NodeSpec, SimulationConfig  # noqa: E402
from cybersim.engine.alert_log import AlertLog  # noqa: E402
from cybersim.engine.models import AttackKind, NodeRole  # noqa: E402
from cybersim.engine.random_source import RandomEventSource  # noqa: E402
from cybersim.engine.registry import EntityRegistry  # noqa: E402


@pytest.fixture
def duel_topology() -> tuple[NodeSpec, ...]:
    """One attacker facing one unshielded server."""
    return (
        NodeSpec("red", "Red Team", NodeRole.ATTACKER, connections=("blue",)),
        NodeSpec("blue", "Blue Server", NodeRole.SERVER),
    )


@pytest.fixture
def lab_topology() -> tuple[NodeSpec, ...]:
    """Two attackers and three defended nodes."""
    return (
        NodeSpec("red1", "Red One", NodeRole.ATTACKER, connections=("gw",)),
        NodeSpec("red2", "Red Two", NodeRole.ATTACKER, connections=("gw",)),
        NodeSpec("gw", "Gateway", NodeRole.FIREWALL, shield=40, connections=("app",)),
        NodeSpec("app", "App Server", NodeRole.SERVER, shield=20, connections=("db",)),
        NodeSpec("db", "Database", NodeRole.TARGET),
    )


@pytest.fixture
def quiet_config() -> SimulationConfig:
    """Nothing ever spawns."""
    return SimulationConfig(attack_spawn_chance=0, defense_spawn_chance=0)


@pytest.fixture
def kill_config(duel_topology) -> SimulationConfig:
    """A DDoS is forced every tick and completes in the tick it spawns."""
    return SimulationConfig(
        topology=duel_topology,
        attack_spawn_chance=1.0,
        attack_spawn_cap=1.0,
        defense_spawn_chance=0,
        attack_speed=100,
        attack_kinds=(AttackKind.DDOS,),
    )


@pytest.fixture
def rng() -> RandomEventSource:
    return RandomEventSource(seed=1234)


@pytest.fixture
def duel_registry(duel_topology) -> EntityRegistry:
    return EntityRegistry.from_topology(duel_topology, alert_log=AlertLog())


@pytest.fixture
def lab_registry(lab_topology) -> EntityRegistry:
    return EntityRegistry.from_topology(lab_topology, alert_log=AlertLog(capacity=50))


@pytest.fixture
def mock_facade(monkeypatch):
    """Mock SimulationFacade for CLI tests."""
    facade = Mock()
    monkeypatch.setattr("cybersim.cli.SimulationFacade", lambda config: facade)
    return facade
