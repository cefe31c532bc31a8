"""
dialmeter_processor - Meter service for an analog water-meter dial

This package provides the service that reads frames from a camera,
runs them through the dial pipeline and reports consumption snapshots.

Architecture:
- MeterService: Control loop orchestrator (context object)
- CameraFrameSource: cv2.VideoCapture frame source
- MeterConfig: Configuration management

Threading Model:
- Loop thread (runs MeterService.run, owns all meter state)
- Control Plane Thread (paho-mqtt internal, raises the snapshot flag)
"""

from dialmeter_processor.config import (
    CameraConfig,
    MeterConfig,
    MQTTConfig,
    PersistenceConfig,
    ZoneConfig,
)
from dialmeter_processor.camera import CameraFrameSource, FrameAcquisitionError, FrameSource
from dialmeter_processor.service import MeterService

__all__ = [
    "CameraConfig",
    "MeterConfig",
    "MQTTConfig",
    "PersistenceConfig",
    "ZoneConfig",
    "CameraFrameSource",
    "FrameAcquisitionError",
    "FrameSource",
    "MeterService",
]
