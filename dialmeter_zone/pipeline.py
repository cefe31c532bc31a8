"""
Dial Meter Pipeline Module
==========================

Bounded Context: Per-frame orchestration.

Design:
- Orchestrator: detect → ingest → (optional) render
- Builder pattern: fluent configuration
- Fail Fast: layout validated at build time, not per frame
- No I/O: frames and timestamps come from the caller

Dependencies:
- dialmeter_zone.geometry (layout, detector)
- dialmeter_zone.analytics (accumulator)
- dialmeter_zone.rendering (visualizer)
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from dialmeter_reporting.logging import StructuredLogger
from dialmeter_reporting.reporters import SnapshotReporter
from dialmeter_reporting.schemas import Snapshot
from dialmeter_zone.geometry.shapes import ZoneLayout
from dialmeter_zone.geometry.detector import ZoneHitDetector
from dialmeter_zone.analytics.accumulator import ConsumptionAccumulator
from dialmeter_zone.rendering.visualizer import ZoneVisualizer


@dataclass(frozen=True)
class FrameResult:
    """Outcome of one processed frame."""

    observation: Optional[int]
    snapshot: Optional[Snapshot] = None
    annotated: Optional[np.ndarray] = None


@dataclass
class PipelineConfig:
    """
    Pipeline configuration.

    Design:
    - All dependencies injected
    - Validated at construction
    """

    layout: ZoneLayout
    accumulator: ConsumptionAccumulator
    visualizer: Optional[ZoneVisualizer] = None


class DialMeterPipeline:
    """
    Runs one frame at a time through detection and accumulation.

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_reference_layout()
            .with_reporter(reporter)
            .with_base_offset(510.234)
            .build()
        )

        result = pipeline.process_frame(frame, now=time.time())
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate configuration (fail fast)."""
        if self.config.accumulator.zone_count != self.config.layout.zone_count:
            raise ValueError(
                f"Accumulator expects {self.config.accumulator.zone_count} zones, "
                f"layout has {self.config.layout.zone_count}"
            )

    @property
    def layout(self) -> ZoneLayout:
        return self.config.layout

    @property
    def accumulator(self) -> ConsumptionAccumulator:
        return self.config.accumulator

    def process_frame(
        self,
        frame: np.ndarray,
        now: float,
        render: bool = False,
        force: bool = False,
    ) -> FrameResult:
        """
        Process a single frame.

        Pipeline stages:
        1. Zone hit detection (geometry layer)
        2. Accumulation, flush if due, forced report if asked (analytics layer)
        3. Overlay (rendering layer, only when asked and configured)

        Args:
            frame: (H, W, 3) image at the layout's resolution
            now: Epoch seconds of the frame
            render: Produce an annotated copy
            force: Report a forced snapshot with this frame

        Returns:
            FrameResult
        """
        observation = ZoneHitDetector.detect(frame, self.config.layout)
        snapshot = self.config.accumulator.ingest(observation, now, force=force)

        annotated = None
        if render and self.config.visualizer is not None:
            annotated = self.config.visualizer.draw_layout(
                frame,
                self.config.layout,
                hit_zone=observation,
                total=self.config.accumulator.state.displayed_total,
            )

        return FrameResult(observation=observation, snapshot=snapshot, annotated=annotated)


# Reference dial: 8 zones of 10x10 pixels in a 176x144 frame
REFERENCE_RESOLUTION_WH: Tuple[int, int] = (176, 144)
REFERENCE_ZONES: Tuple[Tuple[int, int, int, int], ...] = (
    (19, 107, 10, 10),
    (11, 81, 10, 10),
    (20, 58, 10, 10),
    (44, 51, 10, 10),
    (67, 58, 10, 10),
    (73, 82, 10, 10),
    (67, 105, 10, 10),
    (43, 112, 10, 10),
)


class PipelineBuilder:
    """
    Builder for DialMeterPipeline.

    Design:
    - Fluent API for construction
    - Fail-fast validation
    - Sensible defaults (reference layout, no reporter, no overlay)
    """

    def __init__(self):
        self._layout: Optional[ZoneLayout] = None
        self._reporter: Optional[SnapshotReporter] = None
        self._base_offset: float = 0.0
        self._started_at: Optional[float] = None
        self._visualizer: Optional[ZoneVisualizer] = None
        self._logger: Optional[StructuredLogger] = None

    def with_layout(self, layout: ZoneLayout) -> "PipelineBuilder":
        """Set the zone layout."""
        self._layout = layout
        return self

    def with_zones(
        self,
        rects: Sequence[Sequence[int]],
        frame_resolution_wh: Tuple[int, int],
    ) -> "PipelineBuilder":
        """Set the zone layout from [x, y, width, height] rows."""
        self._layout = ZoneLayout.from_xywh(rects, frame_resolution_wh)
        return self

    def with_reference_layout(self) -> "PipelineBuilder":
        """Use the 8-zone reference dial geometry."""
        return self.with_zones(REFERENCE_ZONES, REFERENCE_RESOLUTION_WH)

    def with_reporter(self, reporter: SnapshotReporter) -> "PipelineBuilder":
        """Set the snapshot reporter."""
        self._reporter = reporter
        return self

    def with_base_offset(self, base_offset: float) -> "PipelineBuilder":
        """Set the calibration constant for the displayed total."""
        self._base_offset = base_offset
        return self

    def with_start_time(self, started_at: float) -> "PipelineBuilder":
        """Start the flush windows at a fixed time instead of the first frame."""
        self._started_at = started_at
        return self

    def with_visualizer(self, visualizer: ZoneVisualizer) -> "PipelineBuilder":
        """Enable the overlay."""
        self._visualizer = visualizer
        return self

    def with_logger(self, logger: StructuredLogger) -> "PipelineBuilder":
        """Set the structured logger for the accumulator."""
        self._logger = logger
        return self

    def build(self) -> DialMeterPipeline:
        """
        Build the pipeline.

        Raises:
            ValueError: If the layout or base offset is invalid
        """
        if self._layout is None:
            raise ValueError("Zone layout is required (use .with_layout() or .with_zones())")
        if self._base_offset < 0:
            raise ValueError(f"Base offset must be >= 0, got {self._base_offset}")

        accumulator = ConsumptionAccumulator(
            zone_count=self._layout.zone_count,
            reporter=self._reporter,
            base_offset=self._base_offset,
            started_at=self._started_at,
            logger=self._logger,
        )

        config = PipelineConfig(
            layout=self._layout,
            accumulator=accumulator,
            visualizer=self._visualizer,
        )

        return DialMeterPipeline(config)
