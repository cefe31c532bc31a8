"""
Test Consumption Accumulation
=============================

Drives ConsumptionAccumulator with synthetic observations and timestamps
(no camera, no clock).

Usage:
    pytest test_consumption.py
"""

import dataclasses

import numpy as np
import pytest

from dialmeter_reporting import SnapshotKind
from dialmeter_zone import (
    ConsumptionAccumulator,
    PipelineBuilder,
    ZoneLayout,
    elapsed_zones,
    volume_delta,
)
from dialmeter_zone.analytics.accumulator import AccumulatorState
from dialmeter_zone.pipeline import DialMeterPipeline, PipelineConfig


class RecordingReporter:
    """Keeps every snapshot handed to it."""

    def __init__(self):
        self.snapshots = []

    def report(self, snapshot):
        self.snapshots.append(snapshot)
        return True


def make_accumulator(zone_count=8, base_offset=0.0, started_at=0.0):
    reporter = RecordingReporter()
    accumulator = ConsumptionAccumulator(
        zone_count=zone_count,
        reporter=reporter,
        base_offset=base_offset,
        started_at=started_at,
    )
    return accumulator, reporter


def feed(accumulator, observations, start=1.0, step=1.0):
    """Ingest observations one per `step` seconds."""
    snapshots = []
    for i, observation in enumerate(observations):
        snapshot = accumulator.ingest(observation, start + i * step)
        if snapshot is not None:
            snapshots.append(snapshot)
    return snapshots


# ─────────────────────────────────────────────────────────────────────────────
# Volume math
# ─────────────────────────────────────────────────────────────────────────────

def test_elapsed_zones_wraps_forward():
    assert elapsed_zones(0, 1, 8) == 1
    assert elapsed_zones(7, 0, 8) == 1
    assert elapsed_zones(0, 7, 8) == 7
    assert elapsed_zones(5, 2, 8) == 5


def test_elapsed_zones_rejects_same_zone():
    with pytest.raises(ValueError):
        elapsed_zones(3, 3, 8)


def test_volume_delta_is_fraction_of_revolution():
    assert volume_delta(1, 8) == 0.125
    assert volume_delta(7, 8) == 0.875


def test_full_revolution_is_one_unit_from_any_start():
    for start in range(8):
        accumulator, _ = make_accumulator()
        sequence = [start] + [(start + k) % 8 for k in range(1, 9)]
        feed(accumulator, sequence)

        assert accumulator.state.total_volume == pytest.approx(1.0)
        assert accumulator.state.last_zone == start


def test_full_revolution_with_skipped_zones():
    accumulator, _ = make_accumulator()
    feed(accumulator, [0, 0, 1, 3, 7, 0])

    # 1/8 + 2/8 + 4/8 + 1/8
    assert accumulator.state.total_volume == pytest.approx(1.0)


def test_first_and_repeated_hits_add_nothing():
    accumulator, _ = make_accumulator()
    feed(accumulator, [4, 4, None, 4])

    assert accumulator.state.total_volume == 0.0
    assert accumulator.state.last_zone == 4


def test_no_observation_keeps_last_zone():
    accumulator, _ = make_accumulator()
    feed(accumulator, [2, None, None, 3])

    assert accumulator.state.total_volume == pytest.approx(0.125)


def test_out_of_range_observation_raises():
    accumulator, _ = make_accumulator()
    with pytest.raises(ValueError):
        accumulator.ingest(8, 1.0)
    with pytest.raises(ValueError):
        accumulator.ingest(-1, 1.0)


def test_accumulator_needs_two_zones():
    with pytest.raises(ValueError):
        ConsumptionAccumulator(zone_count=1)


# ─────────────────────────────────────────────────────────────────────────────
# Windows and flushes
# ─────────────────────────────────────────────────────────────────────────────

def test_displayed_total_includes_base_offset():
    accumulator, reporter = make_accumulator(base_offset=510.234)
    accumulator.ingest(None, 1.0)
    snapshot = accumulator.ingest(None, 60.0)

    assert snapshot is not None
    assert snapshot.kind == SnapshotKind.FLUSH
    assert snapshot.displayed_total == "510.23"
    assert accumulator.state.total_volume == 0.0
    assert reporter.snapshots == [snapshot]


def test_minute_flush_reports_then_resets_window():
    accumulator, reporter = make_accumulator()
    feed(accumulator, [0, 1, 2])  # t = 1, 2, 3

    snapshot = accumulator.ingest(3, 60.0)

    # The flushing frame's delta is counted before the flush
    assert snapshot.window_minute == pytest.approx(0.375)
    assert snapshot.window_10minute == pytest.approx(0.375)
    assert snapshot.drain == pytest.approx(0.375)
    assert accumulator.state.window_minute == 0.0
    assert accumulator.state.window_10minute == pytest.approx(0.375)
    assert accumulator.state.last_minute_flush == 60.0
    assert len(reporter.snapshots) == 1


def test_reporter_called_once_per_flush():
    accumulator, reporter = make_accumulator()
    feed(accumulator, [None] * 180)  # t = 1 .. 180

    assert [s.timestamp for s in reporter.snapshots] == [60.0, 120.0, 180.0]


def test_frame_rate_counts_frames_since_last_flush():
    accumulator, reporter = make_accumulator()
    feed(accumulator, [None] * 120)  # t = 1 .. 120

    first, second = reporter.snapshots
    # Frames t=1..59 precede the first flush; t=60..119 the second
    assert first.frame_rate == pytest.approx(59 / 60)
    assert second.frame_rate == pytest.approx(1.0)
    assert accumulator.state.frame_counter == 1


def test_drain_cleared_after_idle_minute():
    accumulator, reporter = make_accumulator()
    accumulator.ingest(0, 1.0)
    accumulator.ingest(1, 2.0)
    accumulator.ingest(None, 60.0)     # busy minute
    assert accumulator.state.drain == pytest.approx(0.125)

    idle = accumulator.ingest(None, 120.0)

    # Reported with the old drain, cleared afterwards
    assert idle.window_minute == 0.0
    assert idle.drain == pytest.approx(0.125)
    assert accumulator.state.drain == 0.0


def test_drain_spans_consecutive_busy_minutes():
    accumulator, _ = make_accumulator()
    accumulator.ingest(0, 1.0)
    accumulator.ingest(1, 2.0)
    accumulator.ingest(None, 60.0)
    accumulator.ingest(2, 61.0)
    snapshot = accumulator.ingest(None, 120.0)

    assert snapshot.window_minute == pytest.approx(0.125)
    assert snapshot.drain == pytest.approx(0.25)


def test_ten_minute_reset_is_silent_and_independent():
    accumulator, reporter = make_accumulator()
    accumulator.ingest(0, 1.0)
    accumulator.ingest(1, 2.0)
    accumulator.ingest(None, 599.0)    # minute flush, last_minute_flush = 599
    assert len(reporter.snapshots) == 1

    snapshot = accumulator.ingest(None, 600.0)

    assert snapshot is None
    assert len(reporter.snapshots) == 1
    assert accumulator.state.window_10minute == 0.0
    assert accumulator.state.last_10minute_flush == 600.0
    assert accumulator.state.last_minute_flush == 599.0
    assert accumulator.state.total_volume == pytest.approx(0.125)


def test_windows_start_at_first_ingest_when_unset():
    accumulator, reporter = make_accumulator(started_at=None)

    assert accumulator.ingest(None, 1000.0) is None
    assert accumulator.ingest(None, 1059.0) is None
    assert accumulator.ingest(None, 1060.0) is not None
    assert len(reporter.snapshots) == 1


def test_windows_never_negative():
    accumulator, reporter = make_accumulator()
    sequence = [i % 8 for i in range(300)]
    feed(accumulator, sequence, step=2.0)

    state = accumulator.state
    assert min(state.window_minute, state.window_10minute, state.drain) >= 0.0
    assert state.total_volume >= state.window_10minute
    assert all(s.window_minute >= 0 for s in reporter.snapshots)


# ─────────────────────────────────────────────────────────────────────────────
# Forced snapshots
# ─────────────────────────────────────────────────────────────────────────────

def test_forced_snapshot_leaves_state_untouched():
    accumulator, reporter = make_accumulator(base_offset=10.0)
    feed(accumulator, [0, 1, 2, 3])
    before = dataclasses.asdict(accumulator.state)

    snapshot = accumulator.force_snapshot(30.0)

    assert dataclasses.asdict(accumulator.state) == before
    assert snapshot.kind == SnapshotKind.FORCED
    assert snapshot.frame_rate is None
    assert snapshot.window_minute == pytest.approx(0.375)
    assert snapshot.total == pytest.approx(10.375)
    assert reporter.snapshots == [snapshot]


def test_forced_snapshot_does_not_delay_flush():
    accumulator, reporter = make_accumulator()
    accumulator.ingest(None, 1.0)
    accumulator.force_snapshot(59.0)
    flushed = accumulator.ingest(None, 60.0)

    assert flushed is not None
    assert [s.kind for s in reporter.snapshots] == [SnapshotKind.FORCED, SnapshotKind.FLUSH]


def test_forced_snapshot_comes_before_ten_minute_reset():
    accumulator, reporter = make_accumulator()
    accumulator.ingest(0, 1.0)
    accumulator.ingest(1, 2.0)

    accumulator.ingest(None, 600.0, force=True)

    assert [s.kind for s in reporter.snapshots] == [SnapshotKind.FLUSH, SnapshotKind.FORCED]
    forced = reporter.snapshots[-1]
    assert forced.window_10minute == pytest.approx(0.125)
    assert forced.window_minute == 0.0
    assert accumulator.state.window_10minute == 0.0


def test_accumulator_state_defaults():
    state = AccumulatorState(base_offset=2.5)
    assert state.last_zone is None
    assert state.displayed_total == 2.5


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline
# ─────────────────────────────────────────────────────────────────────────────

def test_pipeline_turns_frames_into_volume():
    reporter = RecordingReporter()
    pipeline = (
        PipelineBuilder()
        .with_reference_layout()
        .with_reporter(reporter)
        .with_base_offset(100.0)
        .with_start_time(0.0)
        .build()
    )
    layout = pipeline.layout

    for t, zone_index in enumerate([0, 1, 2, 3, 4, 5, 6, 7, 0], start=1):
        frame = np.full((144, 176, 3), 255, dtype=np.uint8)
        zone = layout[zone_index]
        frame[zone.y:zone.y + zone.height, zone.x:zone.x + zone.width] = 0
        result = pipeline.process_frame(frame, float(t))
        assert result.observation == zone_index
        assert result.annotated is None

    result = pipeline.process_frame(np.full((144, 176, 3), 255, dtype=np.uint8), 60.0)

    assert result.observation is None
    assert result.snapshot.displayed_total == "101.00"
    assert reporter.snapshots == [result.snapshot]


def test_pipeline_rejects_mismatched_zone_count():
    layout = ZoneLayout.from_xywh([(0, 0, 5, 5), (10, 10, 5, 5)], (176, 144))
    with pytest.raises(ValueError):
        DialMeterPipeline(PipelineConfig(
            layout=layout,
            accumulator=ConsumptionAccumulator(zone_count=8),
        ))


def test_builder_requires_layout_and_valid_offset():
    with pytest.raises(ValueError):
        PipelineBuilder().build()
    with pytest.raises(ValueError):
        PipelineBuilder().with_reference_layout().with_base_offset(-1.0).build()
