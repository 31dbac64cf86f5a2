# cybersim/output/adapter.py
from typing import Iterable

from cybersim.engine.models import SimulationSnapshot

from .alert_adapter import AlertAdapter
from .metrics_adapter import MetricsAdapter


class SnapshotAdapter:
    """Run a snapshot through every enabled adapter, alerts first."""

    def __init__(self, include_metrics: bool = True):
        self.adapters = [AlertAdapter()]
        if include_metrics:
            self.adapters.append(MetricsAdapter())

    def transform(self, snapshot: SimulationSnapshot) -> list[str]:
        lines: list[str] = []
        for adapter in self.adapters:
            lines.extend(adapter.transform(snapshot))
        return lines


def write_snapshot_logs(snapshots: Iterable[SimulationSnapshot], output_file_path: str) -> None:
    from pathlib import Path
    adapter = SnapshotAdapter()
    output_file = Path(output_file_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with output_file.open("w", encoding="utf-8") as f:
        for snapshot in snapshots:
            for line in adapter.transform(snapshot):
                if line:
                    f.write(line + "\n")
