from __future__ import annotations

from collections.abc import Iterable

from cybersim.engine.models import AlertSeverity, SimulationSnapshot

from .base import Adapter


class AlertAdapter(Adapter):
    """
    Render alerts as syslog-style lines, each one exactly once.

    The adapter remembers the highest alert sequence number it has
    rendered. A repeated snapshot (such as the one published for a
    skipped tick) only yields the alerts added since.
    """

    FACILITY = 4  # security/authorization

    SEVERITY_MAP = {
        AlertSeverity.BREACH: 1,
        AlertSeverity.CRITICAL: 2,
        AlertSeverity.WARNING: 4,
        AlertSeverity.INFO: 6,
        AlertSeverity.DIAGNOSTIC: 7,
    }

    def __init__(self) -> None:
        self._last_sequence = 0

    def transform(self, snapshot: SimulationSnapshot) -> Iterable[str]:
        lines: list[str] = []
        ts_str = format_elapsed(snapshot.elapsed_ms)

        for alert in snapshot.alerts:
            if alert.sequence <= self._last_sequence:
                continue
            pri = self.FACILITY * 8 + self.SEVERITY_MAP.get(alert.severity, 6)
            lines.append(f"<{pri}>{ts_str} cybersim[{alert.severity.value}]: {alert.message}")
            self._last_sequence = alert.sequence

        return lines


def format_elapsed(elapsed_ms: float) -> str:
    return f"T+{elapsed_ms / 1000:08.1f}s"
