from __future__ import annotations

from collections.abc import Iterable

from cybersim.engine.models import SimulationSnapshot

from .alert_adapter import format_elapsed
from .base import Adapter


class MetricsAdapter(Adapter):
    """One summary line per tick. A tick seen twice in a row is not repeated."""

    def __init__(self) -> None:
        self._last_tick: int | None = None

    def transform(self, snapshot: SimulationSnapshot) -> Iterable[str]:
        if snapshot.tick == self._last_tick:
            return []
        self._last_tick = snapshot.tick

        m = snapshot.metrics
        return [
            f"{format_elapsed(snapshot.elapsed_ms)} tick={snapshot.tick} "
            f"score={m.security_score:.1f} threat={m.threat_level.value} "
            f"intensity={m.intensity:.2f} attacks={len(snapshot.attacks)} "
            f"active={m.active_attacks} defenses={len(snapshot.defenses)} "
            f"compromised={m.compromised_nodes} destroyed={m.destroyed_nodes}"
        ]
