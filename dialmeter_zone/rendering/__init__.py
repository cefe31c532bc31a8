"""
Rendering Layer
===============

Bounded Context: Zone overlay and preview.

Responsibilities:
- Draw zones on frames, the hit zone highlighted
- Show the displayed total
- Pure rendering - no logic, no state

Non-responsibilities:
- Hit detection (handled by geometry)
- Accumulation (handled by analytics)
"""

from dialmeter_zone.rendering.visualizer import ZoneVisualizer
from dialmeter_zone.rendering.viewer import FrameViewer

__all__ = [
    "ZoneVisualizer",
    "FrameViewer",
]
