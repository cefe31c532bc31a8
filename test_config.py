"""
Test Meter Configuration
========================

YAML loading, validation and command-line overrides.

Usage:
    pytest test_config.py
"""

from pathlib import Path

import pytest
import yaml

from dialmeter_processor import MeterConfig, MQTTConfig, ZoneConfig
from dialmeter_reporting import RrdUpdateReporter, TotalFileReporter
from dialmeter_zone import REFERENCE_ZONES
from run_meter import MeterApp, parse_args

SAMPLE_CONFIG = Path(__file__).parent / "config" / "meter_config.yaml"


def write_yaml(tmp_path, data) -> Path:
    path = tmp_path / "meter.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_sample_config_loads():
    config = MeterConfig.from_yaml(SAMPLE_CONFIG)

    assert config.service_id == "meter_01"
    assert config.camera.frame_resolution_wh == (176, 144)
    assert [z.as_xywh() for z in config.zones] == list(REFERENCE_ZONES)
    assert config.start_value is None
    assert config.mqtt_config.broker == "localhost"
    assert config.build_layout().zone_count == 8


def test_defaults_use_reference_dial():
    config = MeterConfig()

    assert config.zones == []
    assert config.zone_rects() == list(REFERENCE_ZONES)
    assert config.mqtt_config is None
    assert config.persistence.rrd_enabled is False


def test_minimal_yaml(tmp_path):
    config = MeterConfig.from_yaml(write_yaml(tmp_path, {'service_id': 'cellar'}))

    assert config.service_id == 'cellar'
    assert config.build_layout().zone_count == 8


def test_zones_as_mappings(tmp_path):
    path = write_yaml(tmp_path, {
        'camera': {'frame_resolution_wh': [64, 48]},
        'zones': [
            {'x': 0, 'y': 0, 'width': 4, 'height': 4},
            {'x': 10, 'y': 10, 'width': 4, 'height': 4},
            {'x': 20, 'y': 20, 'width': 4, 'height': 4},
        ],
    })

    layout = MeterConfig.from_yaml(path).build_layout()

    assert layout.zone_count == 3
    assert layout.frame_resolution_wh == (64, 48)


def test_zone_outside_frame_rejected(tmp_path):
    path = write_yaml(tmp_path, {
        'zones': [[0, 0, 10, 10], [170, 140, 10, 10]],
    })

    with pytest.raises(ValueError):
        MeterConfig.from_yaml(path)


def test_single_zone_rejected():
    with pytest.raises(ValueError):
        MeterConfig(zones=[ZoneConfig(0, 0, 10, 10)])


def test_negative_start_value_rejected():
    with pytest.raises(ValueError):
        MeterConfig(start_value=-1.0)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        MeterConfig.from_yaml(tmp_path / "nope.yaml")


def test_mqtt_topics_for_service():
    mqtt_config = MQTTConfig(broker="localhost")

    assert mqtt_config.topics_for("cellar") == (
        "dialmeter/control/cellar/commands",
        "dialmeter/control/cellar/status",
    )

    with pytest.raises(ValueError):
        MQTTConfig(broker="localhost", port=0)


def test_mqtt_connect_timeout(tmp_path):
    path = write_yaml(tmp_path, {'mqtt_config': {'broker': 'localhost', 'connect_timeout': 12.5}})

    assert MeterConfig.from_yaml(path).mqtt_config.connect_timeout == 12.5
    assert MeterConfig.from_yaml(SAMPLE_CONFIG).mqtt_config.connect_timeout == 5.0

    with pytest.raises(ValueError):
        MQTTConfig(broker="localhost", connect_timeout=0)


def test_persistence_paths(tmp_path):
    path = write_yaml(tmp_path, {
        'persistence': {
            'total_file': str(tmp_path / "total.log"),
            'rrd_enabled': True,
            'rrd_file': str(tmp_path / "water.rrd"),
        },
    })

    persistence = MeterConfig.from_yaml(path).persistence

    assert persistence.total_file == tmp_path / "total.log"
    assert persistence.rrd_file == tmp_path / "water.rrd"


# ─────────────────────────────────────────────────────────────────────────────
# Entry point wiring
# ─────────────────────────────────────────────────────────────────────────────

def test_command_line_start_value_overrides_yaml(tmp_path):
    path = write_yaml(tmp_path, {'start_value': 100.0})

    app = MeterApp(config_path=path, start_value=510.234)
    config = app.load_config()

    assert config.start_value == 510.234
    assert MeterApp(config_path=path).load_config().start_value == 100.0


def test_reporters_follow_persistence_config(tmp_path):
    app = MeterApp()
    path = write_yaml(tmp_path, {
        'persistence': {
            'total_file': str(tmp_path / "total.log"),
            'rrd_enabled': True,
        },
    })

    composite = app.build_reporter(MeterConfig.from_yaml(path))

    kinds = [type(r) for r in composite.reporters]
    assert TotalFileReporter in kinds
    assert RrdUpdateReporter in kinds
    assert len(composite) == 3


def test_parse_args():
    args = parse_args(["--start-value", "12.5", "--display", "--no-log-file"])

    assert args.start_value == 12.5
    assert args.display is True
    assert args.no_log_file is True
    assert args.config is None
