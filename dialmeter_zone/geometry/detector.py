"""
Zone Hit Detector Module
========================

Stateless detection logic - applies zone geometry to a frame.

Design:
- Pure functions (no state)
- Never mutates the frame
- First hit in layout order wins (order is a priority tie-break)
- Thread-safe (no mutations)
"""

from fractions import Fraction
from typing import Optional

import numpy as np

from dialmeter_zone.geometry.shapes import DialZone, ZoneLayout

# A channel below this value makes the pixel dark (8-bit midpoint)
DARK_LEVEL = 128

# Zone is occluded when strictly more than this share of pixels is dark
HIT_RATIO = Fraction(4, 5)


class ZoneHitDetector:
    """
    Stateless detector for the dial marker.

    Design Philosophy:
    - All methods are static (no instance state)
    - Frames are (H, W, 3) uint8 arrays as delivered by OpenCV
    - A pixel is dark when ANY of its three channels is dark
    """

    @staticmethod
    def count_dark(frame: np.ndarray, zone: DialZone) -> int:
        """
        Count dark pixels inside a zone.

        Args:
            frame: (H, W, 3) image
            zone: Zone geometry (must fit the frame)

        Returns:
            Number of pixels with at least one channel < DARK_LEVEL
        """
        region = frame[zone.y:zone.y + zone.height, zone.x:zone.x + zone.width]
        dark = (region < DARK_LEVEL).any(axis=-1)
        return int(np.count_nonzero(dark))

    @staticmethod
    def dark_ratio(frame: np.ndarray, zone: DialZone) -> float:
        """Share of dark pixels in the zone, in [0, 1]."""
        return ZoneHitDetector.count_dark(frame, zone) / zone.area

    @staticmethod
    def is_hit(frame: np.ndarray, zone: DialZone) -> bool:
        """
        Check whether the marker occludes a zone.

        Exact comparison: a ratio of exactly 80% is not a hit.
        """
        return ZoneHitDetector.count_dark(frame, zone) > zone.area * HIT_RATIO

    @staticmethod
    def detect(frame: np.ndarray, layout: ZoneLayout) -> Optional[int]:
        """
        Find the zone currently occluded by the dial marker.

        Args:
            frame: (H, W, 3) image matching layout.frame_resolution_wh
            layout: Ordered zone layout

        Returns:
            Index of the first hit zone, or None when no zone is hit
        """
        for index, zone in enumerate(layout.zones):
            if ZoneHitDetector.is_hit(frame, zone):
                return index
        return None
