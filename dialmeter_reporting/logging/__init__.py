"""
Structured Logging for Dialmeter
================================

Bounded Context: Observability

JSON-structured logging for meter, snapshot and persistence events.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
