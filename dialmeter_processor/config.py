"""
Configuration schema for the MeterService.

This module defines the configuration structure for the meter service,
including camera settings, zone geometry, persistence targets and the
optional MQTT control plane.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
import yaml

from dialmeter_zone.geometry.shapes import ZoneLayout
from dialmeter_zone.pipeline import REFERENCE_RESOLUTION_WH, REFERENCE_ZONES


@dataclass(frozen=True)
class ZoneConfig:
    """One sensing zone, in frame pixels."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        """Validate zone configuration."""
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Zone origin must be >= 0, got ({self.x}, {self.y})")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Zone size must be positive, got {self.width}x{self.height}"
            )

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class CameraConfig:
    """Frame source configuration."""

    source: Union[int, str] = 0  # device index or stream URL
    frame_resolution_wh: Tuple[int, int] = REFERENCE_RESOLUTION_WH

    def __post_init__(self):
        width, height = self.frame_resolution_wh
        if width <= 0 or height <= 0:
            raise ValueError(
                f"frame_resolution_wh must have positive dimensions, got {self.frame_resolution_wh}"
            )
        if width > 4096 or height > 4096:
            raise ValueError(
                f"frame_resolution_wh dimensions too large (max 4096x4096), got {self.frame_resolution_wh}"
            )


@dataclass(frozen=True)
class PersistenceConfig:
    """Where snapshots are persisted."""

    total_file: Optional[Path] = Path("water-meter.txt")
    rrd_enabled: bool = False
    rrd_file: Path = Path("water-meter.rrd")
    rrdtool_path: str = "rrdtool"
    rrd_timeout: float = 10.0

    def __post_init__(self):
        if self.rrd_timeout <= 0:
            raise ValueError(f"rrd_timeout must be > 0, got {self.rrd_timeout}")


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration (control plane only)."""

    broker: str
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    connect_timeout: float = 5.0

    command_topic: str = "dialmeter/control/{service_id}/commands"
    status_topic: str = "dialmeter/control/{service_id}/status"

    def __post_init__(self):
        """Validate MQTT configuration."""
        if not self.broker:
            raise ValueError("MQTT broker cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ValueError(
                f"MQTT port must be in [1, 65535], got {self.port}"
            )

        if self.connect_timeout <= 0:
            raise ValueError(
                f"connect_timeout must be > 0, got {self.connect_timeout}"
            )

    def topics_for(self, service_id: str) -> Tuple[str, str]:
        """(command_topic, status_topic) with the service id filled in."""
        return (
            self.command_topic.format(service_id=service_id),
            self.status_topic.format(service_id=service_id),
        )


@dataclass(frozen=True)
class MeterConfig:
    """
    Main configuration for the MeterService.

    This configuration is loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass). An empty zone list
    means the reference 8-zone dial.
    """

    service_id: str = "meter_01"

    camera: CameraConfig = field(default_factory=CameraConfig)
    zones: List[ZoneConfig] = field(default_factory=list)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)

    # Calibration override; None means "read the total file"
    start_value: Optional[float] = None
    display: bool = False

    mqtt_config: Optional[MQTTConfig] = None

    def __post_init__(self):
        """Validate meter configuration."""
        if not self.service_id:
            raise ValueError("service_id cannot be empty")

        if self.start_value is not None and self.start_value < 0:
            raise ValueError(f"start_value must be >= 0, got {self.start_value}")

        # Zone geometry is checked against the frame here, before any I/O
        self.build_layout()

    def zone_rects(self) -> List[Tuple[int, int, int, int]]:
        if not self.zones:
            return list(REFERENCE_ZONES)
        return [zone.as_xywh() for zone in self.zones]

    def build_layout(self) -> ZoneLayout:
        """
        Raises:
            ValueError: If fewer than 2 zones or a zone leaves the frame
        """
        return ZoneLayout.from_xywh(self.zone_rects(), self.camera.frame_resolution_wh)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "MeterConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            service_id: "meter_01"

            camera:
              source: 0
              frame_resolution_wh: [176, 144]

            zones:                # omit for the reference dial
              - [19, 107, 10, 10]
              - [11, 81, 10, 10]
              - ...

            persistence:
              total_file: "water-meter.txt"
              rrd_enabled: true
              rrd_file: "water-meter.rrd"

            start_value: null
            display: false

            mqtt_config:          # omit to run without remote control
              broker: "localhost"
              port: 1883
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        camera_data = dict(data.get("camera") or {})
        if "frame_resolution_wh" in camera_data:
            camera_data["frame_resolution_wh"] = tuple(camera_data["frame_resolution_wh"])
        camera = CameraConfig(**camera_data)

        zones = [cls._parse_zone(z) for z in data.get("zones") or []]

        persistence_data = dict(data.get("persistence") or {})
        if persistence_data.get("total_file") is not None:
            persistence_data["total_file"] = Path(persistence_data["total_file"])
        if "rrd_file" in persistence_data:
            persistence_data["rrd_file"] = Path(persistence_data["rrd_file"])
        persistence = PersistenceConfig(**persistence_data)

        mqtt_data = data.get("mqtt_config")
        mqtt_config = MQTTConfig(**mqtt_data) if mqtt_data else None

        start_value = data.get("start_value")

        return cls(
            service_id=data.get("service_id", "meter_01"),
            camera=camera,
            zones=zones,
            persistence=persistence,
            start_value=float(start_value) if start_value is not None else None,
            display=bool(data.get("display", False)),
            mqtt_config=mqtt_config,
        )

    @staticmethod
    def _parse_zone(zone_data) -> ZoneConfig:
        """Zones are either [x, y, w, h] rows or {x, y, width, height} maps."""
        if isinstance(zone_data, dict):
            return ZoneConfig(**zone_data)
        if len(zone_data) != 4:
            raise ValueError(f"Zone must be [x, y, width, height], got {zone_data}")
        return ZoneConfig(*(int(v) for v in zone_data))
