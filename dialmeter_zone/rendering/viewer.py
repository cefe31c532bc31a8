"""
Frame Viewer Module
===================

On-screen preview window for troubleshooting zone placement.
Requires a display; only opened when asked for.
"""

import cv2
import numpy as np


class FrameViewer:
    """
    Thin OpenCV window wrapper.

    Usage:
        with FrameViewer("WATER-METER") as viewer:
            viewer.show(annotated_frame)
    """

    def __init__(self, title: str = "WATER-METER", scale: int = 3):
        self.title = title
        self.scale = scale
        self._open = False

    def open(self) -> None:
        cv2.namedWindow(self.title, cv2.WINDOW_NORMAL)
        self._open = True

    def show(self, frame: np.ndarray) -> None:
        """Display a frame (enlarged, the reference frames are tiny)."""
        if not self._open:
            self.open()
        if self.scale != 1:
            frame = cv2.resize(
                frame, None, fx=self.scale, fy=self.scale, interpolation=cv2.INTER_NEAREST
            )
        cv2.imshow(self.title, frame)
        cv2.waitKey(1)

    def close(self) -> None:
        if self._open:
            cv2.destroyWindow(self.title)
            self._open = False

    def __enter__(self) -> "FrameViewer":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
