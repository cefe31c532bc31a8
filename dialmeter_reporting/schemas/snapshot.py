"""
Snapshot Schema
===============

Bounded Context: Consumption snapshot data structure

A Snapshot is the immutable record handed to the persistence boundary
at every minute flush and on every forced report.

Message Flow:
    ConsumptionAccumulator → Snapshot → SnapshotReporter → file / rrdtool / log
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class SnapshotKind(str, Enum):
    """Why a snapshot was emitted."""
    FLUSH = "flush"        # Minute boundary crossed
    FORCED = "forced"      # Out-of-band request (signal / control command)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable consumption snapshot.

    Volumes are in volume units (one full dial revolution = 1.0).

    Attributes:
        kind: Flush or forced
        timestamp: Epoch seconds at emission
        window_minute: Volume since the last minute flush
        window_10minute: Volume since the last 10-minute reset
        drain: Volume over the current run of non-idle minutes
        total: Displayed total (cumulative volume + base offset)
        frame_rate: Frames per second over the last minute (flush only)

    Invariants:
        - all volumes >= 0
        - forced snapshots carry no frame_rate

    Example:
        >>> snap = Snapshot(
        ...     kind=SnapshotKind.FLUSH,
        ...     timestamp=1700000000.0,
        ...     window_minute=0.25,
        ...     window_10minute=1.5,
        ...     drain=3.0,
        ...     total=510.234,
        ...     frame_rate=12.0,
        ... )
        >>> snap.displayed_total
        '510.23'
    """
    kind: SnapshotKind
    timestamp: float
    window_minute: float
    window_10minute: float
    drain: float
    total: float
    frame_rate: Optional[float] = None

    def __post_init__(self):
        """Validate invariants."""
        for name in ("window_minute", "window_10minute", "drain", "total"):
            if getattr(self, name) < 0:
                raise ValueError(f"Snapshot {name} must be >= 0, got {getattr(self, name)}")
        if self.kind == SnapshotKind.FORCED and self.frame_rate is not None:
            raise ValueError("Forced snapshots carry no frame_rate")

    @property
    def displayed_total(self) -> str:
        """Total as persisted and shown: two decimals."""
        return f"{self.total:.2f}"

    @property
    def time_str(self) -> str:
        """Local wall-clock time of the snapshot (HH:MM:SS)."""
        return datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S")

    def summary(self) -> str:
        """Human-readable one-line report."""
        line = (
            f"Last minute: {self.window_minute:6.2f}, "
            f"Last 10min: {self.window_10minute:6.2f}, "
            f"Last drain: {self.drain:6.2f}, "
            f"Total: {self.total:8.2f}"
        )
        if self.frame_rate is not None:
            line += f", Framerate: {self.frame_rate:.1f}"
        return line

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'kind': self.kind.value,
            'timestamp': self.timestamp,
            'window_minute': self.window_minute,
            'window_10minute': self.window_10minute,
            'drain': self.drain,
            'total': self.total,
            'frame_rate': self.frame_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        """Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            frame_rate = data.get('frame_rate')
            return cls(
                kind=SnapshotKind(data['kind']),
                timestamp=float(data['timestamp']),
                window_minute=float(data['window_minute']),
                window_10minute=float(data['window_10minute']),
                drain=float(data['drain']),
                total=float(data['total']),
                frame_rate=float(frame_rate) if frame_rate is not None else None,
            )
        except KeyError as e:
            raise ValueError(f"Missing required Snapshot field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid Snapshot data: {e}")
