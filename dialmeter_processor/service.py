"""
Meter Service - control loop orchestrator.

This module provides the MeterService class which owns the frame loop:
frame acquisition, zone detection, accumulation, snapshot reporting and
the optional preview window.

Threading Model:
- Loop thread (caller of run()): the only thread touching the pipeline
- Control Plane thread (paho-mqtt internal): only raises force_flag
- Signal handlers (main thread, between bytecodes): only raise flags

Context object:
- Everything the loop needs is held here and injected at construction;
  there is no module-level mutable state.
"""

import logging
import time
from typing import Callable, Optional

from dialmeter_control import MQTTControlPlane, RequestFlag
from dialmeter_reporting.logging import LogEvent, StructuredLogger, create_logger
from dialmeter_zone.pipeline import DialMeterPipeline
from dialmeter_zone.rendering import FrameViewer
from dialmeter_processor.camera import FrameAcquisitionError, FrameSource

logger = logging.getLogger(__name__)


class MeterService:
    """
    Main meter service.

    Loop, once per frame:
    1. Read a frame (FrameAcquisitionError is fatal)
    2. Detect + accumulate (a minute flush is reported inside), with a
       forced snapshot if one was requested since the last frame
    3. Show the overlay (when a viewer is attached)
    4. Stop if asked; never in the middle of steps 1-3

    Usage:
        service = MeterService(pipeline=pipeline, frame_source=camera)
        signal.signal(signal.SIGUSR1, lambda s, f: service.force_flag.request())
        signal.signal(signal.SIGTERM, lambda s, f: service.stop())

        service.setup()
        service.run()  # Blocks until stopped
    """

    def __init__(
        self,
        pipeline: DialMeterPipeline,
        frame_source: FrameSource,
        control_plane: Optional[MQTTControlPlane] = None,
        viewer: Optional[FrameViewer] = None,
        clock: Callable[[], float] = time.time,
        force_flag: Optional[RequestFlag] = None,
        stop_flag: Optional[RequestFlag] = None,
        event_logger: Optional[StructuredLogger] = None,
        control_timeout: float = 5.0,
    ):
        """
        Initialize meter service.

        Args:
            pipeline: Detection + accumulation pipeline (owned by the loop)
            frame_source: Where frames come from
            control_plane: MQTT control plane for commands (optional)
            viewer: Preview window (optional)
            clock: Epoch seconds source, injectable for tests
            force_flag: Forced-snapshot request flag
            stop_flag: Termination request flag
            event_logger: Structured logger for domain events
            control_timeout: Seconds to wait for the broker at setup
        """
        self.pipeline = pipeline
        self.frame_source = frame_source
        self.control_plane = control_plane
        self.viewer = viewer
        self.clock = clock

        self.force_flag = force_flag or RequestFlag("force_snapshot")
        self.stop_flag = stop_flag or RequestFlag("stop")
        self.events = event_logger or create_logger("service")
        self.control_timeout = control_timeout

        self.frames_processed = 0
        self._control_connected = False

    def setup(self) -> None:
        """
        Register control handlers and connect the control plane.

        A broker that cannot be reached is not fatal: the service runs
        without remote control and signals still work.
        """
        if self.control_plane is None:
            return

        self._setup_control_handlers()

        if self.control_plane.connect(timeout=self.control_timeout):
            self._control_connected = True
        else:
            logger.warning(
                "⚠️ Control plane unavailable, running without remote control"
            )

    def _setup_control_handlers(self) -> None:
        registry = self.control_plane.command_registry
        registry.register(
            "snapshot",
            self._handle_snapshot,
            "Report the current windows and total now"
        )
        logger.info("Control handlers registered")

    def _handle_snapshot(self, command: dict) -> None:
        """Runs in the MQTT thread: only raise the flag."""
        self.force_flag.request()

    def run(self) -> None:
        """
        Run the loop until stop() or a fatal acquisition error.

        Raises:
            FrameAcquisitionError: After cleanup, if the source failed
        """
        logger.info("Starting meter service")
        self._publish_status("running")

        try:
            while True:
                self._step()
                if self.stop_flag.consume():
                    logger.info("Stop requested, leaving loop")
                    break
        except FrameAcquisitionError as e:
            self.events.error(
                event=LogEvent.ACQUISITION_ERROR,
                message="Frame acquisition failed, stopping",
                metadata={'frames_processed': self.frames_processed},
                exc_info=e,
            )
            raise
        finally:
            self.cleanup()

    def _step(self) -> None:
        frame = self.frame_source.read()
        now = self.clock()

        force = self.force_flag.consume()
        if force:
            self.events.info(
                event=LogEvent.CONTROL_SNAPSHOT_REQUESTED,
                message="Forced snapshot requested",
                metadata={'timestamp': now}
            )

        result = self.pipeline.process_frame(
            frame, now, render=self.viewer is not None, force=force
        )

        if self.viewer is not None and result.annotated is not None:
            self.viewer.show(result.annotated)

        self.frames_processed += 1

    def stop(self) -> None:
        """Ask the loop to stop after the current frame. Signal-safe."""
        self.stop_flag.request()

    def cleanup(self) -> None:
        """Release the frame source, close the window, disconnect MQTT."""
        self.frame_source.release()

        if self.viewer is not None:
            self.viewer.close()

        # disconnect() also stops a paho loop left over from a failed connect
        if self.control_plane is not None:
            self._publish_status("stopped")
            self.control_plane.disconnect()
            self._control_connected = False

        logger.info(
            f"✅ Meter service stopped ({self.frames_processed} frames, "
            f"total {self.pipeline.accumulator.state.displayed_total:.2f})"
        )

    def _publish_status(self, status: str) -> None:
        if self.control_plane is not None and self._control_connected:
            self.control_plane.publish_status(status)
