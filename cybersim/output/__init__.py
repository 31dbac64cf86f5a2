# cybersim/output/__init__.py
from .base import Adapter
from .adapter import SnapshotAdapter, write_snapshot_logs
from .alert_adapter import AlertAdapter
from .metrics_adapter import MetricsAdapter

__all__ = [
    "Adapter",
    "SnapshotAdapter",
    "write_snapshot_logs",
    "AlertAdapter",
    "MetricsAdapter",
]
