"""Process-wide fan-out of progress snapshots to observers."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Self

from sync_progress.types.models import ProgressSnapshot
from sync_progress.types.protocols import ProgressObserver

logger = logging.getLogger(__name__)


class ProgressNotifier:
    """Synchronous publish/subscribe relay for progress snapshots.

    Create one instance at startup and pass it to every aggregator driver
    and observer that needs it; call ``close()`` at shutdown. The notifier
    keeps no run state of its own.

    Snapshots published under an empty group key are dropped, so runs that
    are not fully set up never reach observers.
    """

    def __init__(self) -> None:
        self._observers: list[ProgressObserver] = []
        self._closed: bool = False

    def subscribe(self, observer: ProgressObserver) -> None:
        """Register an observer; subscribing the same observer twice is a no-op."""
        if self._closed:
            logger.warning("Ignoring subscription of %r to a closed notifier", observer)
            return
        if observer in self._observers:
            return
        self._observers.append(observer)
        logger.debug("Subscribed progress observer %r", observer)

    def unsubscribe(self, observer: ProgressObserver) -> None:
        """Remove an observer; unknown observers are ignored."""
        try:
            self._observers.remove(observer)
        except ValueError:
            return
        logger.debug("Unsubscribed progress observer %r", observer)

    def publish(self, group_key: str | None, snapshot: ProgressSnapshot) -> None:
        """Deliver ``snapshot`` to every observer, in registration order.

        Args:
            group_key: Identifier of the sync run; empty means unidentified
            snapshot: Progress snapshot to deliver
        """
        if not group_key:
            logger.debug("Dropping progress snapshot without a group key")
            return

        # Observers may unsubscribe while being notified
        for observer in tuple(self._observers):
            try:
                observer(group_key, snapshot)
            except Exception:
                logger.exception(
                    "Progress observer %r failed for group %s",
                    observer,
                    group_key,
                )

    @property
    def observer_count(self) -> int:
        """Number of currently subscribed observers."""
        return len(self._observers)

    @property
    def closed(self) -> bool:
        """Whether the notifier has been torn down."""
        return self._closed

    def close(self) -> None:
        """Tear down the notifier, unsubscribing all observers."""
        self._observers.clear()
        self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
