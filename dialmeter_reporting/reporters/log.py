"""
Log Reporter
============

Writes every snapshot (flush and forced) to the structured log as the
familiar one-line summary.
"""

from .base import BaseReporter
from ..logging import LogEvent
from ..schemas import Snapshot, SnapshotKind


class LogReporter(BaseReporter):
    """
    Reporter that only logs.

    Example:
        >>> reporter = LogReporter(logger=create_logger("reporter"))
        >>> reporter.report(snapshot)
        True
    """

    def write(self, snapshot: Snapshot) -> bool:
        event = (
            LogEvent.SNAPSHOT_FLUSHED
            if snapshot.kind == SnapshotKind.FLUSH
            else LogEvent.SNAPSHOT_FORCED
        )
        self.logger.info(
            event=event,
            message=f"{snapshot.time_str} - {snapshot.summary()}",
            metadata=snapshot.to_dict()
        )
        return True
