"""
Frame sources for the meter service.

The service only needs "give me the next frame" and "let go of the device";
anything that satisfies FrameSource can drive it (camera, video file, test
fake).
"""

import logging
from typing import Protocol, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class FrameAcquisitionError(RuntimeError):
    """Raised when a frame source cannot deliver a frame."""
    pass


class FrameSource(Protocol):
    """Anything that yields (H, W, 3) frames at a fixed resolution."""

    frame_resolution_wh: Tuple[int, int]

    def read(self) -> np.ndarray:
        """
        Raises:
            FrameAcquisitionError: If no frame could be read
        """
        ...

    def release(self) -> None:
        ...


class CameraFrameSource:
    """
    cv2.VideoCapture wrapper that always returns frames at the configured
    resolution.

    Usage:
        with CameraFrameSource(0, (176, 144)) as source:
            frame = source.read()
    """

    def __init__(self, source: Union[int, str], frame_resolution_wh: Tuple[int, int]):
        self.source = source
        self.frame_resolution_wh = tuple(frame_resolution_wh)
        self._capture = None

    def open(self) -> "CameraFrameSource":
        """
        Raises:
            FrameAcquisitionError: If the device or stream cannot be opened
        """
        if self._capture is not None:
            return self

        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            raise FrameAcquisitionError(f"Cannot open video source: {self.source!r}")

        width, height = self.frame_resolution_wh
        # Drivers may ignore these; read() resizes whatever arrives
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        self._capture = capture
        logger.info(f"📷 Video source opened: {self.source!r} at {width}x{height}")
        return self

    def read(self) -> np.ndarray:
        if self._capture is None:
            self.open()

        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise FrameAcquisitionError(f"Failed to read frame from {self.source!r}")

        height, width = frame.shape[:2]
        if (width, height) != self.frame_resolution_wh:
            frame = cv2.resize(frame, self.frame_resolution_wh, interpolation=cv2.INTER_AREA)

        return frame

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("📷 Video source released")

    def __enter__(self) -> "CameraFrameSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
