"""
Host Status Agent - Telemetry Package

Reads pseudo-files and diagnostic command output into status records.
"""

from .collectors import COLLECTORS
from .snapshot import SnapshotAggregator, collect_snapshot

__all__ = ["COLLECTORS", "SnapshotAggregator", "collect_snapshot"]
