"""
Dialmeter Reporting Schemas
===========================

Bounded Context: Data Structures

Immutable, typed records handed across the persistence boundary.

Design:
- Frozen dataclasses (immutability)
- to_dict() / from_dict() for JSON
"""

from .snapshot import Snapshot, SnapshotKind

__all__ = [
    'Snapshot',
    'SnapshotKind',
]
