"""
Zone Visualizer Module
======================

Pure visualization layer for dial zones.

Design:
- Stateless rendering (pure functions)
- No business logic, no feedback into detection or accumulation
- Uses supervision drawing utilities

Dependencies:
- supervision (draw utilities, Color, Rect, Point)
- numpy (arrays)
"""

from typing import Optional

import numpy as np
import supervision as sv

from dialmeter_zone.geometry.shapes import DialZone, ZoneLayout


class ZoneVisualizer:
    """
    Stateless visualizer for the zone overlay.

    Usage:
        visualizer = ZoneVisualizer()
        annotated = visualizer.draw_layout(frame, layout, hit_zone=3, total=510.23)
    """

    def __init__(
        self,
        zone_color: sv.Color = sv.Color(r=0, g=255, b=0),
        hit_color: sv.Color = sv.Color(r=255, g=0, b=0),
        text_color: sv.Color = sv.Color(r=255, g=255, b=255),
        text_background_color: sv.Color = sv.Color(r=0, g=0, b=0),
        thickness: int = 1,
        text_scale: float = 0.4,
        text_thickness: int = 1,
        text_padding: int = 3,
    ):
        """
        Initialize visualizer with style configuration.

        Args:
            zone_color: Outline of zones not hit
            hit_color: Outline of the zone currently hit
            text_color: Color for the total label
            text_background_color: Background for the total label
            thickness: Outline thickness
            text_scale: Scale factor for text
            text_thickness: Thickness for text
            text_padding: Padding for text background
        """
        self.zone_color = zone_color
        self.hit_color = hit_color
        self.text_color = text_color
        self.text_background_color = text_background_color
        self.thickness = thickness
        self.text_scale = text_scale
        self.text_thickness = text_thickness
        self.text_padding = text_padding

    def draw_zone(self, frame: np.ndarray, zone: DialZone, hit: bool = False) -> np.ndarray:
        """Outline one zone."""
        return sv.draw_rectangle(
            scene=frame,
            rect=sv.Rect(x=zone.x, y=zone.y, width=zone.width, height=zone.height),
            color=self.hit_color if hit else self.zone_color,
            thickness=self.thickness,
        )

    def draw_layout(
        self,
        frame: np.ndarray,
        layout: ZoneLayout,
        hit_zone: Optional[int] = None,
        total: Optional[float] = None,
    ) -> np.ndarray:
        """
        Draw every zone, highlighting the hit one, on a copy of the frame.

        Args:
            frame: Frame to annotate (left untouched)
            layout: Zone layout
            hit_zone: Index of the zone hit in this frame, if any
            total: Displayed total to print in the top-left corner

        Returns:
            Annotated copy
        """
        annotated = frame.copy()
        for index, zone in enumerate(layout.zones):
            annotated = self.draw_zone(annotated, zone, hit=(index == hit_zone))

        if total is not None:
            annotated = sv.draw_text(
                scene=annotated,
                text=f"{total:.2f}",
                text_anchor=sv.Point(x=30, y=10),
                text_color=self.text_color,
                text_scale=self.text_scale,
                text_thickness=self.text_thickness,
                text_padding=self.text_padding,
                background_color=self.text_background_color,
            )

        return annotated
