"""
dialmeter_control - Out-of-band control for the meter service

Bounded Context: Requests that reach the control loop from outside it
Responsibilities:
  - Signal-safe, read-and-clear request flags (force snapshot, stop)
  - Command registration and validation
  - MQTT command reception and status publishing

Design Philosophy:
  - The loop thread owns the meter state; outside code only raises flags
  - Explicit registration (fail-fast, lists available commands on error)
"""

from .flag import RequestFlag
from .registry import CommandRegistry, CommandNotAvailableError
from .plane import MQTTControlPlane

__all__ = [
    "RequestFlag",
    "CommandRegistry",
    "CommandNotAvailableError",
    "MQTTControlPlane",
]
