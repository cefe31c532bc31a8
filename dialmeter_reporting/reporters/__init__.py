"""
Snapshot Reporters
==================

Bounded Context: Persistence boundary

Public API
----------
    SnapshotReporter: Protocol the accumulator depends on
    BaseReporter: Abstract reporter (for custom reporters)
    LogReporter: Summary line to the structured log
    TotalFileReporter: Displayed total to a text file
    RrdUpdateReporter: Displayed total to an RRD via rrdtool
    CompositeReporter: Several reporters behind one
    resolve_base_offset: Startup seeding of the base offset
"""

from .base import SnapshotReporter, BaseReporter
from .log import LogReporter
from .total_file import TotalFileReporter, resolve_base_offset
from .rrd import RrdUpdateReporter
from .composite import CompositeReporter

__all__ = [
    'SnapshotReporter',
    'BaseReporter',
    'LogReporter',
    'TotalFileReporter',
    'RrdUpdateReporter',
    'CompositeReporter',
    'resolve_base_offset',
]
