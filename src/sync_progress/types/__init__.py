"""Type definitions for sync-progress.

This package provides the data models and protocols shared by the
estimation core and its observers.
"""

from sync_progress.types.models import (
    Direction,
    Estimates,
    Instruction,
    ItemStatus,
    ProgressSnapshot,
    SyncItem,
)
from sync_progress.types.protocols import ProgressObserver

__all__ = [
    # Models
    "Direction",
    "Estimates",
    "Instruction",
    "ItemStatus",
    "ProgressSnapshot",
    "SyncItem",
    # Protocols
    "ProgressObserver",
]
