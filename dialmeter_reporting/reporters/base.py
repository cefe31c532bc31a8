"""
Base Snapshot Reporter
======================

Bounded Context: Persistence boundary

Abstract base class for snapshot reporters.

Design:
- Called synchronously by the accumulator, once per snapshot
- Never raises for persistence failures: logs and returns False
- Never retries (the next flush rewrites the full current state)

Architecture:
    SnapshotReporter (protocol)
        ↓
    BaseReporter (abstract)
        ↓
    LogReporter, TotalFileReporter, RrdUpdateReporter (concrete)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Protocol, Set

from ..logging import StructuredLogger, LogEvent
from ..schemas import Snapshot, SnapshotKind


class SnapshotReporter(Protocol):
    """Protocol for anything the accumulator can hand snapshots to."""

    def report(self, snapshot: Snapshot) -> bool:
        """
        Persist or forward a snapshot.

        Returns:
            True when the snapshot was handled successfully
        """
        ...


class BaseReporter(ABC):
    """
    Abstract base class for reporters.

    Subclasses implement write(); report() filters by snapshot kind,
    keeps counters and turns unexpected errors into a logged False.

    Attributes:
        logger: Structured logger instance
        kinds: Snapshot kinds this reporter handles (others are skipped)
    """

    kinds: Set[SnapshotKind] = {SnapshotKind.FLUSH, SnapshotKind.FORCED}

    def __init__(self, logger: StructuredLogger):
        self.logger = logger
        self._report_count = 0
        self._failure_count = 0

    def handles(self, snapshot: Snapshot) -> bool:
        """Check whether this reporter acts on the snapshot's kind."""
        return snapshot.kind in self.kinds

    @abstractmethod
    def write(self, snapshot: Snapshot) -> bool:
        """
        Persist one snapshot.

        Subclasses catch their own expected failures (OSError, ...)
        and return False after logging them.
        """
        raise NotImplementedError("Subclasses must implement write()")

    def report(self, snapshot: Snapshot) -> bool:
        """
        Hand a snapshot to this reporter.

        Returns:
            True if handled (or skipped by kind), False on failure
        """
        if not self.handles(snapshot):
            return True

        try:
            ok = self.write(snapshot)
        except Exception as e:
            self.logger.error(
                event=LogEvent.REPORTER_ERROR,
                message=f"{type(self).__name__} failed",
                exc_info=e,
                metadata={'kind': snapshot.kind.value, 'timestamp': snapshot.timestamp}
            )
            ok = False

        if ok:
            self._report_count += 1
        else:
            self._failure_count += 1
        return ok

    def get_stats(self) -> Dict[str, Any]:
        """Reporter counters."""
        return {
            'reporter': type(self).__name__,
            'report_count': self._report_count,
            'failure_count': self._failure_count,
        }
