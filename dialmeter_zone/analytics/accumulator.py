"""
Consumption Accumulator Module
==============================

Stateful accumulator turning zone observations into volume.

Design:
- Mutable state (AccumulatorState) owned by one loop thread
- Immutable outputs (Snapshot)
- Time is injected (now), never read from the clock here
- Window counters change only after their snapshot exists

Precondition:
    The frame rate must be high relative to the dial speed: the marker may
    not travel a full revolution, or return to the same zone, between two
    consecutive observations. A repeated zone is always "no motion".
"""

from dataclasses import dataclass
from typing import Optional

from dialmeter_reporting.logging import LogEvent, StructuredLogger, create_logger
from dialmeter_reporting.reporters import SnapshotReporter
from dialmeter_reporting.schemas import Snapshot, SnapshotKind

MINUTE_SECONDS = 60.0
TEN_MINUTE_SECONDS = 600.0


def elapsed_zones(last_zone: int, new_zone: int, zone_count: int) -> int:
    """
    Zones advanced from last_zone to new_zone, with wraparound.

    Only defined for distinct zones; the result is in [1, zone_count - 1].
    """
    if last_zone == new_zone:
        raise ValueError("elapsed_zones is undefined for a repeated zone")
    return (new_zone - last_zone + zone_count) % zone_count


def volume_delta(elapsed: int, zone_count: int) -> float:
    """Volume for `elapsed` zones; a full revolution is 1.0."""
    return elapsed / zone_count


@dataclass
class AccumulatorState:
    """
    Mutable accumulator state.

    Attributes:
        base_offset: Calibration added to the displayed total only
        last_zone: Last zone hit, None until the first hit
        total_volume: Volume since process start (excludes base_offset)
        window_minute: Volume since the last minute flush
        window_10minute: Volume since the last 10-minute reset
        drain: Volume over the current run of non-idle minutes
        last_minute_flush: Epoch seconds of the last minute flush
        last_10minute_flush: Epoch seconds of the last 10-minute reset
        frame_counter: Frames ingested since the last minute flush
    """

    base_offset: float = 0.0
    last_zone: Optional[int] = None
    total_volume: float = 0.0
    window_minute: float = 0.0
    window_10minute: float = 0.0
    drain: float = 0.0
    last_minute_flush: Optional[float] = None
    last_10minute_flush: Optional[float] = None
    frame_counter: int = 0

    @property
    def displayed_total(self) -> float:
        return self.total_volume + self.base_offset


class ConsumptionAccumulator:
    """
    Derives volume from consecutive zone hits and decides flush timing.

    Design:
    - One ingest() per frame
    - Minute flush emits a Snapshot to the reporter, exactly once
    - 10-minute reset is silent and independent of the minute flush
    - force_snapshot() reports without touching any state

    Usage:
        accumulator = ConsumptionAccumulator(zone_count=8, reporter=reporter)

        # Each frame
        snapshot = accumulator.ingest(ZoneHitDetector.detect(frame, layout), time.time())

        # Out-of-band request
        accumulator.force_snapshot(time.time())
    """

    def __init__(
        self,
        zone_count: int,
        reporter: Optional[SnapshotReporter] = None,
        base_offset: float = 0.0,
        started_at: Optional[float] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Initialize accumulator.

        Args:
            zone_count: Number of zones on the dial (N)
            reporter: Receives every snapshot (optional)
            base_offset: Calibration constant for the displayed total
            started_at: Epoch seconds the windows start from; defaults to
                the first ingest() time
            logger: Structured logger (default: "accumulator" component)
        """
        if zone_count < 2:
            raise ValueError(f"zone_count must be >= 2, got {zone_count}")

        self.zone_count = zone_count
        self.reporter = reporter
        self.logger = logger or create_logger("accumulator")
        self._state = AccumulatorState(
            base_offset=float(base_offset),
            last_minute_flush=started_at,
            last_10minute_flush=started_at,
        )

    @property
    def state(self) -> AccumulatorState:
        """Live state (read it, do not mutate it)."""
        return self._state

    @property
    def base_offset(self) -> float:
        return self._state.base_offset

    def ingest(
        self,
        observation: Optional[int],
        now: float,
        force: bool = False,
    ) -> Optional[Snapshot]:
        """
        Ingest one frame's observation.

        Args:
            observation: Zone index in [0, zone_count) or None
            now: Epoch seconds of the frame
            force: Also report a forced snapshot, after any minute flush
                and before the 10-minute reset

        Returns:
            The flush Snapshot if a minute boundary was crossed, else None

        Raises:
            ValueError: If observation is outside [0, zone_count)
        """
        if observation is not None and not 0 <= observation < self.zone_count:
            raise ValueError(
                f"Observation must be in [0, {self.zone_count}), got {observation}"
            )

        state = self._state
        if state.last_minute_flush is None:
            state.last_minute_flush = now
        if state.last_10minute_flush is None:
            state.last_10minute_flush = now

        if observation is not None:
            self._advance(observation)

        snapshot = None
        if now >= state.last_minute_flush + MINUTE_SECONDS:
            snapshot = self._flush_minute(now)

        if force:
            self.force_snapshot(now)

        if now >= state.last_10minute_flush + TEN_MINUTE_SECONDS:
            self.logger.debug(
                event=LogEvent.METER_WINDOW_RESET,
                message="10-minute window reset",
                metadata={'window_10minute': state.window_10minute}
            )
            state.window_10minute = 0.0
            state.last_10minute_flush = now

        if observation is not None:
            state.last_zone = observation
        state.frame_counter += 1

        return snapshot

    def force_snapshot(self, now: float) -> Snapshot:
        """
        Report the current windows immediately.

        Nothing is reset and no flush timestamp moves.
        """
        snapshot = self._build_snapshot(SnapshotKind.FORCED, now)
        self._report(snapshot)
        return snapshot

    def _advance(self, new_zone: int) -> None:
        """Apply the volume delta for a hit (no-op for the first or a repeated hit)."""
        state = self._state

        if state.last_zone is None:
            self.logger.info(
                event=LogEvent.METER_TRACKING_STARTED,
                message=f"First hit on zone {new_zone}",
                metadata={'zone': new_zone}
            )
            return

        if new_zone == state.last_zone:
            return

        elapsed = elapsed_zones(state.last_zone, new_zone, self.zone_count)
        delta = volume_delta(elapsed, self.zone_count)

        state.total_volume += delta
        state.window_minute += delta
        state.window_10minute += delta
        state.drain += delta

        self.logger.debug(
            event=LogEvent.METER_ZONE_ADVANCED,
            message=f"Hit zone {new_zone} [ +{delta:.3f} ]",
            metadata={
                'from_zone': state.last_zone,
                'to_zone': new_zone,
                'elapsed': elapsed,
                'delta': delta,
            }
        )

    def _flush_minute(self, now: float) -> Snapshot:
        state = self._state
        snapshot = self._build_snapshot(SnapshotKind.FLUSH, now)
        self._report(snapshot)

        if state.window_minute == 0.0:
            if state.drain != 0.0:
                self.logger.debug(
                    event=LogEvent.METER_DRAIN_RESET,
                    message="Idle minute, drain cleared",
                    metadata={'drain': state.drain}
                )
            state.drain = 0.0
        state.window_minute = 0.0
        state.last_minute_flush = now
        state.frame_counter = 0

        return snapshot

    def _build_snapshot(self, kind: SnapshotKind, now: float) -> Snapshot:
        state = self._state
        frame_rate = None
        if kind == SnapshotKind.FLUSH:
            frame_rate = state.frame_counter / MINUTE_SECONDS

        return Snapshot(
            kind=kind,
            timestamp=now,
            window_minute=state.window_minute,
            window_10minute=state.window_10minute,
            drain=state.drain,
            total=state.displayed_total,
            frame_rate=frame_rate,
        )

    def _report(self, snapshot: Snapshot) -> None:
        if self.reporter is not None:
            self.reporter.report(snapshot)

    def __repr__(self) -> str:
        state = self._state
        return (
            f"ConsumptionAccumulator(zones={self.zone_count}, "
            f"last_zone={state.last_zone}, total={state.displayed_total:.3f})"
        )
