"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols for the parties that
consume progress snapshots, so observers need no common base class.
"""

from typing import Protocol, runtime_checkable

from sync_progress.types.models import ProgressSnapshot


@runtime_checkable
class ProgressObserver(Protocol):
    """Protocol for receivers of published progress snapshots.

    Any callable taking a group key and a snapshot satisfies it, including
    bound methods and plain functions.
    """

    def __call__(self, group_key: str, snapshot: ProgressSnapshot) -> None:
        """Receive one snapshot for a sync group.

        Args:
            group_key: Identifier of the sync run (e.g. the synced folder alias)
            snapshot: Progress snapshot computed for that run
        """
        ...
