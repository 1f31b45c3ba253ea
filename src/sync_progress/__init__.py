"""Sync Progress - progress and ETA estimation for file synchronization runs.

This package turns the item lifecycle events of a sync engine (planned,
partially transferred, completed) into smoothed bandwidth and
time-to-completion estimates, and relays a snapshot of them once per
second to any number of observers.
"""

from sync_progress.core import (
    EstimateTicker,
    EstimationConfig,
    ProgressAggregator,
    ProgressNotifier,
    RateEstimator,
)
from sync_progress.types import (
    Direction,
    Estimates,
    Instruction,
    ItemStatus,
    ProgressSnapshot,
    SyncItem,
)

__all__ = [
    "Direction",
    "EstimateTicker",
    "EstimationConfig",
    "Estimates",
    "Instruction",
    "ItemStatus",
    "ProgressAggregator",
    "ProgressNotifier",
    "ProgressSnapshot",
    "RateEstimator",
    "SyncItem",
]
