"""
Host Status Agent - Snapshot Aggregator

Composes the configured collectors into one SystemSnapshot.

Policy is all-or-nothing: collectors run one after another and the first
CollectorError aborts the snapshot. Clients that want whatever is available
query the per-subsystem endpoints instead.
"""

from typing import Dict, List, Optional

import structlog

from status_agent.config import Settings
from status_agent.errors import CollectorError

from .collectors import COLLECTORS, Collector
from .models import SystemSnapshot

logger = structlog.get_logger(__name__)


class SnapshotAggregator:
    """Collects a full status snapshot on demand."""

    def __init__(self, settings: Settings, collectors: Optional[Dict[str, Collector]] = None):
        self.settings = settings
        self._collectors = collectors if collectors is not None else COLLECTORS
        self._fields = settings.snapshot_fields_list

    @property
    def fields(self) -> List[str]:
        return list(self._fields)

    async def collect(self) -> SystemSnapshot:
        """Run every configured collector and assemble the snapshot."""
        values = {}
        for name in self._fields:
            collector = self._collectors[name]
            try:
                values[name] = await collector(self.settings)
            except CollectorError as e:
                logger.error("Snapshot aborted", field=name, source=e.source, kind=e.kind, error=str(e))
                raise

        logger.debug("Snapshot collected", fields=self._fields)
        return SystemSnapshot(**values)


async def collect_snapshot(
    settings: Settings,
    collectors: Optional[Dict[str, Collector]] = None,
) -> SystemSnapshot:
    return await SnapshotAggregator(settings, collectors).collect()
