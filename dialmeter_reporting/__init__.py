"""
Dialmeter Reporting Package
===========================

Bounded Context: Snapshot persistence and observability

Architecture:
- schemas/: Immutable Snapshot record
- reporters/: Persistence boundary (log, total file, rrdtool)
- logging/: Structured JSON logging

Example:
    >>> from dialmeter_reporting import (
    ...     CompositeReporter, LogReporter, TotalFileReporter, create_logger
    ... )
    >>> logger = create_logger("reporter")
    >>> reporter = CompositeReporter([
    ...     LogReporter(logger),
    ...     TotalFileReporter("/home/pi/water/water-meter-total.log", logger),
    ... ])
    >>> reporter.report(snapshot)
"""

__version__ = "1.0.0"

from .schemas import Snapshot, SnapshotKind

from .reporters import (
    SnapshotReporter,
    BaseReporter,
    LogReporter,
    TotalFileReporter,
    RrdUpdateReporter,
    CompositeReporter,
    resolve_base_offset,
)

from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    # Schemas
    'Snapshot',
    'SnapshotKind',
    # Reporters
    'SnapshotReporter',
    'BaseReporter',
    'LogReporter',
    'TotalFileReporter',
    'RrdUpdateReporter',
    'CompositeReporter',
    'resolve_base_offset',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
