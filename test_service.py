"""
Test Meter Service Loop
=======================

Runs MeterService against a scripted frame source, a fake clock and a
fake control plane.

Usage:
    pytest test_service.py
"""

import numpy as np
import pytest

from dialmeter_control import CommandRegistry
from dialmeter_processor import FrameAcquisitionError, MeterService
from dialmeter_reporting import SnapshotKind
from dialmeter_zone import PipelineBuilder, ZoneVisualizer


class RecordingReporter:
    def __init__(self):
        self.snapshots = []

    def report(self, snapshot):
        self.snapshots.append(snapshot)
        return True


class ScriptedFrameSource:
    """
    Yields the scripted zone hits as frames, then fails.

    on_read(index) runs before frame `index` is returned (signals, commands).
    """

    frame_resolution_wh = (176, 144)

    def __init__(self, layout, hits, on_read=None):
        self.layout = layout
        self.hits = list(hits)
        self.on_read = on_read
        self.reads = 0
        self.released = False

    def read(self):
        if self.reads >= len(self.hits):
            raise FrameAcquisitionError("end of script")
        index = self.reads
        self.reads += 1
        if self.on_read is not None:
            self.on_read(index)

        frame = np.full((144, 176, 3), 255, dtype=np.uint8)
        hit = self.hits[index]
        if hit is not None:
            zone = self.layout[hit]
            frame[zone.y:zone.y + zone.height, zone.x:zone.x + zone.width] = 0
        return frame

    def release(self):
        self.released = True


class FakeClock:
    def __init__(self, start=0.0, step=1.0):
        self.now = start - step
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


class FakeControlPlane:
    def __init__(self, connects=True):
        self.command_registry = CommandRegistry()
        self.connects = connects
        self.statuses = []
        self.disconnected = False
        self.timeouts = []

    def connect(self, timeout=5.0):
        self.timeouts.append(timeout)
        return self.connects

    def publish_status(self, status):
        self.statuses.append(status)

    def disconnect(self):
        self.disconnected = True


class FakeViewer:
    def __init__(self):
        self.shown = 0
        self.closed = False

    def show(self, frame):
        self.shown += 1

    def close(self):
        self.closed = True


def make_service(hits, on_read=None, step=1.0, visualizer=None, **kwargs):
    reporter = RecordingReporter()
    builder = PipelineBuilder().with_reference_layout().with_reporter(reporter)
    if visualizer is not None:
        builder = builder.with_visualizer(visualizer)
    pipeline = builder.build()

    source = ScriptedFrameSource(pipeline.layout, hits, on_read=on_read)
    service = MeterService(
        pipeline=pipeline,
        frame_source=source,
        clock=FakeClock(step=step),
        **kwargs
    )
    return service, source, reporter


def test_stop_takes_effect_after_current_frame():
    holder = {}

    def on_read(index):
        if index == 2:
            holder['service'].stop()

    service, source, _ = make_service([0, 1, 2, 3, 4], on_read=on_read)
    holder['service'] = service

    service.run()

    assert service.frames_processed == 3
    assert source.reads == 3
    assert source.released
    assert service.pipeline.accumulator.state.last_zone == 2


def test_acquisition_failure_stops_loop_and_releases():
    service, source, _ = make_service([0, 1])

    with pytest.raises(FrameAcquisitionError):
        service.run()

    assert service.frames_processed == 2
    assert source.released


def test_flush_snapshot_through_loop():
    # Clock: 0, 30, 60, 90
    service, _, reporter = make_service([0, 1, 2, None], step=30.0)

    with pytest.raises(FrameAcquisitionError):
        service.run()

    assert [s.kind for s in reporter.snapshots] == [SnapshotKind.FLUSH]
    assert reporter.snapshots[0].timestamp == 60.0
    assert reporter.snapshots[0].window_minute == pytest.approx(0.25)


def test_forced_snapshot_requested_mid_run():
    holder = {}

    def on_read(index):
        if index == 1:
            holder['service'].force_flag.request()
            holder['service'].force_flag.request()

    service, _, reporter = make_service([0, 1, 2], on_read=on_read)
    holder['service'] = service

    with pytest.raises(FrameAcquisitionError):
        service.run()

    forced = [s for s in reporter.snapshots if s.kind == SnapshotKind.FORCED]
    assert len(forced) == 1
    # Reported after frame 1 was ingested
    assert forced[0].window_minute == pytest.approx(0.125)
    assert forced[0].timestamp == 1.0


def test_snapshot_command_via_control_plane():
    plane = FakeControlPlane()
    holder = {}

    def on_read(index):
        if index == 0:
            holder['plane'].command_registry.execute('snapshot', {'command': 'snapshot'})

    service, _, reporter = make_service([None, None], on_read=on_read, control_plane=plane)
    holder['plane'] = plane
    service.setup()

    with pytest.raises(FrameAcquisitionError):
        service.run()

    assert [s.kind for s in reporter.snapshots] == [SnapshotKind.FORCED]
    assert plane.statuses == ["running", "stopped"]
    assert plane.disconnected


def test_unreachable_control_plane_is_not_fatal():
    plane = FakeControlPlane(connects=False)
    holder = {}

    def on_read(index):
        if index == 1:
            holder['service'].stop()

    service, source, _ = make_service([0, 1, 2], on_read=on_read, control_plane=plane)
    holder['service'] = service
    service.setup()

    service.run()

    assert service.frames_processed == 2
    assert plane.statuses == []
    # The failed connect still gets torn down
    assert plane.disconnected
    assert source.released


def test_viewer_shows_annotated_frames():
    viewer = FakeViewer()
    service, _, _ = make_service([0, 1, None], visualizer=ZoneVisualizer(), viewer=viewer)

    with pytest.raises(FrameAcquisitionError):
        service.run()

    assert viewer.shown == 3
    assert viewer.closed


def test_control_timeout_passed_to_connect():
    plane = FakeControlPlane()
    service, _, _ = make_service([], control_plane=plane, control_timeout=12.5)

    service.setup()

    assert plane.timeouts == [12.5]


def test_forced_snapshot_at_ten_minute_boundary_sees_closing_window():
    holder = {}

    def on_read(index):
        if index == 2:
            holder['service'].force_flag.request()

    # Clock: 0, 300, 600
    service, _, reporter = make_service([0, 1, None], on_read=on_read, step=300.0)
    holder['service'] = service

    with pytest.raises(FrameAcquisitionError):
        service.run()

    kinds = [s.kind for s in reporter.snapshots]
    assert kinds == [SnapshotKind.FLUSH, SnapshotKind.FLUSH, SnapshotKind.FORCED]
    forced = reporter.snapshots[-1]
    assert forced.timestamp == 600.0
    assert forced.window_10minute == pytest.approx(0.125)
    assert service.pipeline.accumulator.state.window_10minute == 0.0
