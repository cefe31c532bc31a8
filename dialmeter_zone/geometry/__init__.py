"""
Geometry Layer
==============

Bounded Context: Dial zone shapes and per-frame hit detection.

Responsibilities:
- Zone representation (immutable)
- Layout validation against the frame resolution
- Dark-pixel occlusion test
- NO state, NO accumulation, NO visualization
"""

from dialmeter_zone.geometry.shapes import DialZone, ZoneLayout
from dialmeter_zone.geometry.detector import ZoneHitDetector, DARK_LEVEL, HIT_RATIO

__all__ = [
    "DialZone",
    "ZoneLayout",
    "ZoneHitDetector",
    "DARK_LEVEL",
    "HIT_RATIO",
]
