#!/usr/bin/env python3
"""
Water Meter Service - Entry Point
=================================

This script starts the dial meter service, which:
- Reads frames from a camera pointed at an analog water-meter dial
- Detects which sensing zone the dial marker occludes
- Accumulates consumption (1 revolution = 1 volume unit)
- Reports a snapshot every minute (log, total file, rrdtool)
- Responds to forced-snapshot requests (SIGUSR1 or MQTT)

Usage:
    python run_meter.py --config config/meter_config.yaml
    python run_meter.py --start-value 510.234 --display

Lifecycle:
    1. Setup logging (console + file)
    2. Load configuration from YAML (defaults when no file is given)
    3. Resolve base offset (--start-value > total file > 0.0)
    4. Build reporters, pipeline, frame source, control plane
    5. Install signal handlers
    6. Run the loop until stopped
    7. Graceful shutdown

Signals:
    - SIGUSR1: Report a snapshot now (state unchanged)
    - SIGTERM / SIGINT (Ctrl+C): Stop after the current frame

Exit codes:
    - 0: Stopped on request
    - 1: Configuration error or frame acquisition failure
"""

import argparse
import dataclasses
import signal
import sys
import logging
from pathlib import Path
from typing import List, Optional

from dialmeter_control import MQTTControlPlane
from dialmeter_processor import CameraFrameSource, FrameAcquisitionError, MeterConfig, MeterService
from dialmeter_reporting import (
    CompositeReporter,
    LogReporter,
    RrdUpdateReporter,
    SnapshotReporter,
    TotalFileReporter,
    create_logger,
    resolve_base_offset,
)
from dialmeter_zone import PipelineBuilder, ZoneVisualizer
from dialmeter_zone.rendering import FrameViewer


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging for the meter service.

    Args:
        log_file: Optional path to log file (default: logs/meter.log)

    Returns:
        Logger instance for the entry point
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class MeterApp:
    """
    Main application wrapper for MeterService.

    Handles:
    - Configuration loading and CLI overrides
    - Component initialization (reporters, pipeline, camera, control plane)
    - Signal handling (SIGUSR1, SIGTERM, SIGINT)
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        start_value: Optional[float] = None,
        display: bool = False,
        log_file: Optional[Path] = None,
    ):
        self.config_path = config_path
        self.start_value = start_value
        self.display = display
        self.logger = setup_logging(log_file)

        # Components (initialized in setup())
        self.config: Optional[MeterConfig] = None
        self.service: Optional[MeterService] = None

    def load_config(self) -> MeterConfig:
        """
        YAML (or defaults), then command-line overrides on top.

        Raises:
            FileNotFoundError, ValueError: On a bad configuration
        """
        if self.config_path is not None:
            self.logger.info(f"📄 Loading configuration: {self.config_path}")
            config = MeterConfig.from_yaml(self.config_path)
        else:
            self.logger.info("📄 No configuration file, using reference dial defaults")
            config = MeterConfig()

        overrides = {}
        if self.start_value is not None:
            overrides['start_value'] = self.start_value
        if self.display:
            overrides['display'] = True
        if overrides:
            config = dataclasses.replace(config, **overrides)

        return config

    def build_reporter(self, config: MeterConfig) -> SnapshotReporter:
        persistence = config.persistence
        reporters: List[SnapshotReporter] = [LogReporter(create_logger("snapshot"))]

        persist_logger = create_logger("persistence")
        if persistence.total_file is not None:
            reporters.append(TotalFileReporter(persistence.total_file, persist_logger))
        if persistence.rrd_enabled:
            reporters.append(RrdUpdateReporter(
                persistence.rrd_file,
                persist_logger,
                rrdtool_path=persistence.rrdtool_path,
                timeout=persistence.rrd_timeout,
            ))

        return CompositeReporter(reporters)

    def build_control_plane(self, config: MeterConfig) -> Optional[MQTTControlPlane]:
        if config.mqtt_config is None:
            return None

        command_topic, status_topic = config.mqtt_config.topics_for(config.service_id)
        self.logger.info(f"🔌 Control topic: {command_topic}")
        return MQTTControlPlane(
            broker_host=config.mqtt_config.broker,
            broker_port=config.mqtt_config.port,
            command_topic=command_topic,
            status_topic=status_topic,
            client_id=f"dialmeter_{config.service_id}",
            username=config.mqtt_config.username,
            password=config.mqtt_config.password,
        )

    def setup(self) -> None:
        """
        Setup all components.

        Raises:
            FileNotFoundError, ValueError: On a bad configuration
        """
        self.logger.info("=" * 80)
        self.logger.info("🚀 Dial Water Meter - Starting")
        self.logger.info("=" * 80)

        self.config = config = self.load_config()
        self.logger.info(f"✅ Configuration loaded (service_id={config.service_id})")

        base_offset = resolve_base_offset(
            config.start_value,
            config.persistence.total_file,
            create_logger("persistence"),
        )

        builder = (
            PipelineBuilder()
            .with_layout(config.build_layout())
            .with_reporter(self.build_reporter(config))
            .with_base_offset(base_offset)
            .with_logger(create_logger("accumulator"))
        )
        if config.display:
            builder = builder.with_visualizer(ZoneVisualizer())
        pipeline = builder.build()

        self.service = MeterService(
            pipeline=pipeline,
            frame_source=CameraFrameSource(
                config.camera.source, config.camera.frame_resolution_wh
            ),
            control_plane=self.build_control_plane(config),
            viewer=FrameViewer() if config.display else None,
            event_logger=create_logger("service"),
            control_timeout=(
                config.mqtt_config.connect_timeout if config.mqtt_config else 5.0
            ),
        )
        self.service.setup()

        self.logger.info(f"✅ Pipeline ready ({pipeline.layout.zone_count} zones)")
        self.logger.info("=" * 80)

    def install_signal_handlers(self) -> None:
        """
        Handlers only raise flags; the loop acts on them between frames.
        """
        signal.signal(signal.SIGUSR1, self._snapshot_handler)
        signal.signal(signal.SIGTERM, self._stop_handler)
        signal.signal(signal.SIGINT, self._stop_handler)

    def _snapshot_handler(self, signum, frame):
        self.service.force_flag.request()

    def _stop_handler(self, signum, frame):
        self.service.stop()

    def run(self) -> int:
        """
        Run the meter service until stopped.

        Returns:
            Process exit code
        """
        if not self.service:
            raise RuntimeError("Service not initialized. Call setup() first.")

        self.install_signal_handlers()
        self.logger.info("Press Ctrl+C to stop, send SIGUSR1 for a snapshot")

        try:
            self.service.run()
        except FrameAcquisitionError as e:
            self.logger.error(f"❌ Frame acquisition failed: {e}")
            return 1

        self.logger.info("✅ Shutdown complete")
        return 0


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace with parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Dial Water Meter - camera + zone hits + consumption snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reference dial, resume from the total file
  python run_meter.py

  # Custom config, calibrate to the physical register
  python run_meter.py --config config/meter_config.yaml --start-value 510.234

  # Troubleshoot zone placement
  python run_meter.py --display --no-log-file
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to meter configuration YAML file (default: reference dial)'
    )

    parser.add_argument(
        '--start-value',
        type=float,
        default=None,
        help='Initial meter reading; overrides the total file'
    )

    parser.add_argument(
        '--display',
        action='store_true',
        help='Show the zone overlay in a window'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/meter.log'),
        help='Path to log file (default: logs/meter.log)'
    )

    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """
    Main entry point.

    Workflow:
    1. Parse CLI arguments
    2. Create MeterApp
    3. Setup components (config errors exit 1 here)
    4. Run service (blocks until stopped)
    """
    args = parse_args(argv)

    log_file = None if args.no_log_file else args.log_file

    app = MeterApp(
        config_path=args.config,
        start_value=args.start_value,
        display=args.display,
        log_file=log_file,
    )

    try:
        app.setup()
    except (FileNotFoundError, ValueError, TypeError) as e:
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(app.run())


if __name__ == '__main__':
    main()
