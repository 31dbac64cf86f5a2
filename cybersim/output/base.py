# cybersim/output/base.py
from __future__ import annotations
from typing import Iterable

from cybersim.engine.models import SimulationSnapshot


class Adapter:
    """Base adapter for transforming tick snapshots into log lines."""

    def transform(self, snapshot: SimulationSnapshot) -> Iterable[str]:
        """Override in subclasses."""
        return []
