"""
Dialmeter Zone
==============

Bounded Context: Reading an analog water-meter dial from still frames.

A marker on the dial passes through N fixed sensing zones. Each frame is
reduced to the index of the occluded zone (or none); consecutive distinct
hits become volume, one full revolution being one volume unit.

Architecture:

    dialmeter_zone/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # DialZone, ZoneLayout
    │   └── detector.py    # ZoneHitDetector
    │
    ├── analytics/         # Accumulation (stateful)
    │   └── accumulator.py # ConsumptionAccumulator, AccumulatorState
    │
    ├── rendering/         # Visualization (stateless drawing)
    │   ├── visualizer.py  # ZoneVisualizer
    │   └── viewer.py      # FrameViewer
    │
    └── pipeline.py        # Per-frame orchestration

Usage:

    from dialmeter_zone import ZoneLayout, ZoneHitDetector, ConsumptionAccumulator

    layout = ZoneLayout.from_xywh(REFERENCE_ZONES, (176, 144))
    accumulator = ConsumptionAccumulator(zone_count=len(layout), reporter=reporter)

    hit = ZoneHitDetector.detect(frame, layout)
    snapshot = accumulator.ingest(hit, now)

    # Or the pipeline
    pipeline = PipelineBuilder().with_reference_layout().with_reporter(reporter).build()
    result = pipeline.process_frame(frame, now)
"""

# Geometry Layer (immutable, stateless)
from dialmeter_zone.geometry.shapes import DialZone, ZoneLayout
from dialmeter_zone.geometry.detector import ZoneHitDetector

# Analytics Layer (stateful)
from dialmeter_zone.analytics.accumulator import (
    AccumulatorState,
    ConsumptionAccumulator,
    elapsed_zones,
    volume_delta,
)

# Rendering Layer (stateless)
from dialmeter_zone.rendering.visualizer import ZoneVisualizer

# Pipeline (orchestration)
from dialmeter_zone.pipeline import (
    DialMeterPipeline,
    FrameResult,
    PipelineBuilder,
    REFERENCE_RESOLUTION_WH,
    REFERENCE_ZONES,
)

__all__ = [
    # Geometry
    "DialZone",
    "ZoneLayout",
    "ZoneHitDetector",
    # Analytics
    "AccumulatorState",
    "ConsumptionAccumulator",
    "elapsed_zones",
    "volume_delta",
    # Rendering
    "ZoneVisualizer",
    # Pipeline
    "DialMeterPipeline",
    "FrameResult",
    "PipelineBuilder",
    "REFERENCE_RESOLUTION_WH",
    "REFERENCE_ZONES",
]

__version__ = "1.0.0"
