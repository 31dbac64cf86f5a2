"""
Cyber warfare simulation core.

This package contains the discrete-tick engine behind the animated
network-attack panel. The engine provides:
- SimulationFacade, the start/stop/reset/configure/snapshot surface
- SimulationConfig and load_config
- SimulationSnapshot, the immutable view handed to renderers

Nothing here draws anything. Renderers subscribe to the facade and read
snapshots.
"""

from cybersim.config import SimulationConfig, load_config
from cybersim.engine.models import SimulationSnapshot
from cybersim.errors import ConfigurationError, CybersimError, InvariantViolation

# Expose core engine components
from cybersim.facade import SimulationFacade

__all__ = [
    "SimulationFacade",
    "SimulationConfig",
    "SimulationSnapshot",
    "load_config",
    "CybersimError",
    "ConfigurationError",
    "InvariantViolation",
]
