"""
Dialmeter CLI - Command-line interface for the meter service.

Sends control commands over MQTT.
"""

from .cli import main
from .mqtt_client import MQTTCommandClient

__all__ = ['main', 'MQTTCommandClient']
__version__ = '1.0.0'
