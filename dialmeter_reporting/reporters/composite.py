"""
Composite Reporter
==================

Fans one snapshot out to several reporters, in order.
"""

from typing import Any, Dict, List, Sequence

from .base import SnapshotReporter
from ..schemas import Snapshot


class CompositeReporter:
    """
    Reporter made of other reporters.

    Every reporter sees every snapshot; one failing does not skip the rest.

    Example:
        >>> reporter = CompositeReporter([
        ...     LogReporter(logger),
        ...     TotalFileReporter("~/water/total.log", logger),
        ...     RrdUpdateReporter("~/water/water.rrd", logger),
        ... ])
    """

    def __init__(self, reporters: Sequence[SnapshotReporter]):
        self.reporters: List[SnapshotReporter] = list(reporters)

    def report(self, snapshot: Snapshot) -> bool:
        results = [reporter.report(snapshot) for reporter in self.reporters]
        return all(results)

    def get_stats(self) -> List[Dict[str, Any]]:
        return [
            reporter.get_stats()
            for reporter in self.reporters
            if hasattr(reporter, "get_stats")
        ]

    def __len__(self) -> int:
        return len(self.reporters)
