"""Data models for sync-progress.

This module defines the dataclasses and enums exchanged between the sync
engine, the estimation core, and observers of progress snapshots.
"""

from dataclasses import dataclass
from enum import Enum

from sync_progress.utils.formatting import format_eta, format_rate, format_size


class Instruction(Enum):
    """Operation the sync engine decided to perform on an item."""

    NONE = "none"
    EVAL = "eval"
    REMOVE = "remove"
    RENAME = "rename"
    EVAL_RENAME = "eval_rename"
    NEW = "new"
    CONFLICT = "conflict"
    IGNORE = "ignore"
    SYNC = "sync"
    STAT_ERROR = "stat_error"
    ERROR = "error"


class Direction(Enum):
    """Transfer direction of an item."""

    NONE = "none"
    UP = "up"
    DOWN = "down"


class ItemStatus(Enum):
    """Final outcome reported by the sync engine for an item."""

    NO_STATUS = "no_status"
    FATAL_ERROR = "fatal_error"
    NORMAL_ERROR = "normal_error"
    SOFT_ERROR = "soft_error"
    SUCCESS = "success"
    CONFLICT = "conflict"
    FILE_IGNORED = "file_ignored"
    RESTORATION = "restoration"


# Instructions that move file content and therefore count toward byte totals
TRANSFER_INSTRUCTIONS: frozenset[Instruction] = frozenset(
    {Instruction.NEW, Instruction.SYNC, Instruction.CONFLICT}
)


@dataclass(slots=True, frozen=True)
class SyncItem:
    """One file or directory entry subject to a sync operation.

    The path is the item's identity within a run. ``affected_items`` is the
    number of logical files the operation stands for (a rename may count
    both source and target).
    """

    path: str
    size: int = 0
    is_directory: bool = False
    instruction: Instruction = Instruction.SYNC
    direction: Direction = Direction.DOWN
    status: ItemStatus = ItemStatus.NO_STATUS
    affected_items: int = 1
    rename_target: str = ""

    @property
    def is_real_operation(self) -> bool:
        """Whether the engine actually does something with this item."""
        return self.instruction is not Instruction.NONE

    @property
    def is_size_dependent(self) -> bool:
        """Whether completing this item contributes to byte-based progress."""
        return not self.is_directory and self.instruction in TRANSFER_INSTRUCTIONS


@dataclass(slots=True, frozen=True)
class Estimates:
    """Bandwidth and remaining-time estimate.

    An ``eta_ms`` of 0 means the estimate is unknown, not that the work is
    already done.
    """

    bandwidth: float = 0.0
    eta_ms: float = 0.0

    @property
    def is_known(self) -> bool:
        """Whether an ETA is available."""
        return self.eta_ms > 0


@dataclass(slots=True, frozen=True)
class ProgressSnapshot:
    """Immutable view of a sync run's progress, produced once per tick."""

    total_files: int
    completed_files: int
    total_bytes: int
    completed_bytes: int
    current_file_index: int
    estimated_bandwidth: float
    estimated_eta_ms: float
    last_completed_item: SyncItem | None = None

    @property
    def percent(self) -> float:
        """Completion percentage, by bytes when sizes are known, else by files."""
        if self.total_bytes > 0:
            return min(100.0, self.completed_bytes / self.total_bytes * 100.0)
        if self.total_files > 0:
            return min(100.0, self.completed_files / self.total_files * 100.0)
        return 0.0

    def describe(self) -> str:
        """Human-readable one-line summary."""
        return (
            f"file {self.current_file_index} of {self.total_files}, "
            f"{format_size(self.completed_bytes)} of {format_size(self.total_bytes)} "
            f"({self.percent:.1f}%), {format_rate(self.estimated_bandwidth)}, "
            f"{format_eta(self.estimated_eta_ms)} left"
        )
