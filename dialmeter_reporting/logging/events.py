"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging.

Event Naming Convention:
    <component>.<category>.<action>

Example Log Query (Loki):
    {app="dialmeter"} | json | event = "persist.file.failed"
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - meter.*: Dial tracking and accumulation
    - snapshot.*: Snapshot emission
    - persist.*: Persistence boundary (total file, rrdtool)
    - control.*: Out-of-band requests
    - error.*: Error conditions
    """

    # ========== Meter Events ==========
    METER_TRACKING_STARTED = "meter.tracking.started"
    """First zone hit seen; volume deltas start with the next hit."""

    METER_ZONE_ADVANCED = "meter.zone.advanced"
    """Marker moved to a new zone; volume added."""

    METER_WINDOW_RESET = "meter.window.reset"
    """10-minute window reset."""

    METER_DRAIN_RESET = "meter.drain.reset"
    """Idle minute observed; drain counter cleared."""

    # ========== Snapshot Events ==========
    SNAPSHOT_FLUSHED = "snapshot.flushed"
    """Minute-boundary snapshot emitted."""

    SNAPSHOT_FORCED = "snapshot.forced"
    """Snapshot emitted on request."""

    # ========== Persistence Events ==========
    PERSIST_FILE_WRITTEN = "persist.file.written"
    """Total value file overwritten."""

    PERSIST_FILE_FAILED = "persist.file.failed"
    """Total value file could not be written."""

    PERSIST_RRD_UPDATED = "persist.rrd.updated"
    """Time-series update command succeeded."""

    PERSIST_RRD_FAILED = "persist.rrd.failed"
    """Time-series update command failed or timed out."""

    PERSIST_BASE_LOADED = "persist.base.loaded"
    """Base offset resolved at startup."""

    # ========== Control Events ==========
    CONTROL_SNAPSHOT_REQUESTED = "control.snapshot.requested"
    """Forced snapshot requested out of band."""

    # ========== Error Events ==========
    ACQUISITION_ERROR = "error.acquisition"
    """Frame source failed to deliver a frame."""

    REPORTER_ERROR = "error.reporter"
    """Unexpected error inside a reporter."""


METER_EVENTS = {
    LogEvent.METER_TRACKING_STARTED,
    LogEvent.METER_ZONE_ADVANCED,
    LogEvent.METER_WINDOW_RESET,
    LogEvent.METER_DRAIN_RESET,
}

SNAPSHOT_EVENTS = {
    LogEvent.SNAPSHOT_FLUSHED,
    LogEvent.SNAPSHOT_FORCED,
}

PERSIST_EVENTS = {
    LogEvent.PERSIST_FILE_WRITTEN,
    LogEvent.PERSIST_FILE_FAILED,
    LogEvent.PERSIST_RRD_UPDATED,
    LogEvent.PERSIST_RRD_FAILED,
    LogEvent.PERSIST_BASE_LOADED,
}

ERROR_EVENTS = {
    LogEvent.ACQUISITION_ERROR,
    LogEvent.REPORTER_ERROR,
}

CONTROL_EVENTS = {
    LogEvent.CONTROL_SNAPSHOT_REQUESTED,
}
