"""Display wording and classification for sync item outcomes."""

from __future__ import annotations

from sync_progress.types.models import Direction, Instruction, ItemStatus, SyncItem

_WARNING_KINDS: frozenset[ItemStatus] = frozenset(
    {
        ItemStatus.SOFT_ERROR,
        ItemStatus.NORMAL_ERROR,
        ItemStatus.FATAL_ERROR,
        ItemStatus.FILE_IGNORED,
        ItemStatus.CONFLICT,
        ItemStatus.RESTORATION,
    }
)


def result_string(item: SyncItem) -> str:
    """Past-tense description of what happened to a completed item.

    Examples:
        >>> result_string(SyncItem(path="a.txt", instruction=Instruction.NEW, direction=Direction.UP))
        'Uploaded'
        >>> result_string(SyncItem(path="a.txt", instruction=Instruction.RENAME, rename_target="b.txt"))
        'Moved to b.txt'
    """
    match item.instruction:
        case Instruction.SYNC | Instruction.NEW:
            return "Uploaded" if item.direction is Direction.UP else "Downloaded"
        case Instruction.CONFLICT:
            return "Downloaded, renamed conflicting file"
        case Instruction.REMOVE:
            return "Deleted"
        case Instruction.EVAL_RENAME | Instruction.RENAME:
            return f"Moved to {item.rename_target}"
        case Instruction.IGNORE:
            return "Ignored"
        case Instruction.STAT_ERROR:
            return "Filesystem access error"
        case Instruction.ERROR:
            return "Error"
        case _:
            return "Unknown"


def action_string(item: SyncItem) -> str:
    """Present-participle description of what is being done to an item.

    Returns an empty string for items with nothing to do.
    """
    match item.instruction:
        case Instruction.CONFLICT | Instruction.SYNC | Instruction.NEW:
            return "uploading" if item.direction is Direction.UP else "downloading"
        case Instruction.REMOVE:
            return "deleting"
        case Instruction.EVAL_RENAME | Instruction.RENAME:
            return "moving"
        case Instruction.IGNORE:
            return "ignoring"
        case Instruction.STAT_ERROR | Instruction.ERROR:
            return "error"
        case _:
            return ""


def is_warning_kind(status: ItemStatus) -> bool:
    """Whether an item outcome should be surfaced to the user as a warning."""
    return status in _WARNING_KINDS


def is_ignored_kind(status: ItemStatus) -> bool:
    """Whether an item was skipped on purpose and needs no reporting."""
    return status is ItemStatus.FILE_IGNORED
