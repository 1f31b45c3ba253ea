"""Periodic driver that recomputes estimates and publishes snapshots.

The ticker runs on the asyncio event loop that owns the aggregator. Sync
engines that report progress from worker threads must hand those calls to
the loop (for example with ``loop.call_soon_threadsafe``) rather than
calling the aggregator directly.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Self

from sync_progress.core.notifier import ProgressNotifier
from sync_progress.core.progress.aggregator import ProgressAggregator
from sync_progress.types.models import ProgressSnapshot
from sync_progress.utils.logging import set_run_id

logger = logging.getLogger(__name__)


class EstimateTicker:
    """Ticks an aggregator at a fixed interval and publishes its snapshot."""

    aggregator: ProgressAggregator
    notifier: ProgressNotifier
    group_key: str
    interval: float

    def __init__(
        self,
        aggregator: ProgressAggregator,
        notifier: ProgressNotifier,
        group_key: str,
        interval: float | None = None,
    ) -> None:
        """Initialize the ticker.

        Args:
            aggregator: Aggregator of the sync run being estimated
            notifier: Relay receiving one snapshot per tick
            group_key: Identifier of the sync run
            interval: Seconds between ticks; defaults to the aggregator's configured interval
        """
        if interval is None:
            interval = aggregator.config.tick_interval
        if interval <= 0:
            raise ValueError("Interval must be positive")

        self.aggregator = aggregator
        self.notifier = notifier
        self.group_key = group_key
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def has_started(self) -> bool:
        """Whether the periodic task is currently running."""
        return self._task is not None and not self._task.done()

    def tick_once(self) -> ProgressSnapshot:
        """Run a single recompute step and publish the result."""
        self.aggregator.tick()
        snapshot = self.aggregator.snapshot()
        self.notifier.publish(self.group_key, snapshot)
        return snapshot

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.has_started:
            logger.warning("Estimate ticker for %s already running", self.group_key)
            return

        self._task = asyncio.create_task(self._tick_loop(), name=f"estimate-ticker-{self.group_key}")
        logger.info("Started estimate ticker for %s every %.2fs", self.group_key, self.interval)

    async def stop(self) -> None:
        """Stop ticking so an idle aggregator's rates stop decaying."""
        if self._task is None:
            return

        _ = self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        logger.info("Stopped estimate ticker for %s", self.group_key)

    async def _tick_loop(self) -> None:
        set_run_id(self.group_key)
        while True:
            await asyncio.sleep(self.interval)
            _ = self.tick_once()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.stop()
