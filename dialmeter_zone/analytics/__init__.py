"""
Analytics Layer
===============

Bounded Context: Stateful volume accumulation.

Responsibilities:
- Turn consecutive zone hits into volume deltas (with wraparound)
- Maintain minute / 10-minute / drain windows
- Decide when a snapshot is due

Design Philosophy:
- Mutable accumulator (ConsumptionAccumulator + AccumulatorState)
- Immutable outputs (Snapshot)
- Single owner: the loop thread
"""

from dialmeter_zone.analytics.accumulator import (
    AccumulatorState,
    ConsumptionAccumulator,
    elapsed_zones,
    volume_delta,
    MINUTE_SECONDS,
    TEN_MINUTE_SECONDS,
)

__all__ = [
    "AccumulatorState",
    "ConsumptionAccumulator",
    "elapsed_zones",
    "volume_delta",
    "MINUTE_SECONDS",
    "TEN_MINUTE_SECONDS",
]
