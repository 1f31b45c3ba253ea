"""Run-level progress aggregation and blended ETA estimation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from sync_progress.core.config import EstimationConfig
from sync_progress.core.progress.rate_estimator import RateEstimator
from sync_progress.types.models import Estimates, Instruction, ProgressSnapshot, SyncItem
from sync_progress.utils.logging import log_with_context

logger = logging.getLogger(__name__)


@dataclass
class InFlightItem:
    """An item currently being transferred and its own rate estimator.

    ``size_assumed`` marks items that were never planned; their size is only
    known as the largest byte count reported for them so far.
    """

    item: SyncItem
    progress: RateEstimator = field(default_factory=RateEstimator)
    size_assumed: bool = False


def _ramp(value: float, lower: float, upper: float) -> float:
    """Map ``value`` linearly onto [0, 1] between ``lower`` and ``upper``."""
    if upper <= lower:
        return 1.0 if value >= upper else 0.0
    return min(1.0, max(0.0, (value - lower) / (upper - lower)))


class ProgressAggregator:
    """Source of truth for the progress and ETA of one sync run.

    Tracks two counters, files and bytes, each with its own smoothed rate,
    plus the items currently in flight. All methods must be called from the
    thread (event loop) that owns the aggregator; there is no locking.
    """

    config: EstimationConfig
    file_progress_estimator: RateEstimator
    size_progress_estimator: RateEstimator
    max_files_per_second: float
    max_bytes_per_second: float
    last_completed_item: SyncItem | None

    def __init__(self, config: EstimationConfig | None = None) -> None:
        """Initialize an empty aggregator.

        Args:
            config: Estimation tuning; defaults are used when omitted
        """
        self.config = config or EstimationConfig()
        self.file_progress_estimator = self._new_estimator()
        self.size_progress_estimator = self._new_estimator()
        self.max_files_per_second = 0.0
        self.max_bytes_per_second = 0.0
        self.last_completed_item = None
        self._planned: dict[str, SyncItem] = {}
        self._in_flight: dict[str, InFlightItem] = {}
        self._total_size_of_completed_jobs = 0

    def _new_estimator(self, total: int = 0) -> RateEstimator:
        return RateEstimator(
            total=total,
            smoothing=self.config.smoothing,
            ramp_decay=self.config.ramp_decay,
        )

    # Inbound calls from the sync engine

    def register_planned_work(self, item: SyncItem) -> None:
        """Account for an item the sync engine plans to process.

        Files always count toward the file total and, when they transfer
        content, their size toward the byte total. Directories count only
        when they are actually created or removed.
        """
        if item.is_directory and item.instruction is Instruction.NONE:
            return

        self._planned[item.path] = item
        self.file_progress_estimator.add_total(1)
        if item.is_size_dependent:
            self.size_progress_estimator.add_total(item.size)

    def report_partial_progress(self, item: SyncItem | str, completed_bytes: int) -> None:
        """Record that ``completed_bytes`` of an in-flight item are done.

        Args:
            item: The item, or its path when it was registered beforehand
            completed_bytes: Bytes of this item completed so far
        """
        sync_item, size_assumed = self._resolve(item, completed_bytes=completed_bytes)

        entry = self._in_flight.get(sync_item.path)
        if entry is None:
            entry = InFlightItem(item=sync_item, progress=self._new_estimator())
            self._in_flight[sync_item.path] = entry
        entry.item = sync_item
        entry.size_assumed = size_assumed

        entry.progress.reset_total(sync_item.size)
        entry.progress.set_completed(completed_bytes)
        self._recompute_completed_size()

        # Known quirk: any progress, even on an unrelated item, clears the
        # last completed marker.
        self.last_completed_item = None

    def report_completion(self, item: SyncItem) -> None:
        """Fold a finished item into the run-level completed totals."""
        was_known = self._planned.pop(item.path, None) is not None
        was_in_flight = self._in_flight.pop(item.path, None) is not None

        completed_files = self.file_progress_estimator.completed + item.affected_items
        if not (was_known or was_in_flight):
            log_with_context(
                logger,
                logging.WARNING,
                "Completion reported for unplanned item",
                extra={
                    "path": item.path,
                    "completed_files": completed_files,
                    "total_files": self.file_progress_estimator.total,
                },
            )
        elif completed_files > self.file_progress_estimator.total:
            logger.debug(
                "Clamping completed files %d to total %d",
                completed_files,
                self.file_progress_estimator.total,
            )

        self.file_progress_estimator.set_completed(completed_files)
        if item.is_size_dependent:
            self._total_size_of_completed_jobs += item.size
        self._recompute_completed_size()
        self.last_completed_item = item

    def tick(self) -> None:
        """Advance all rate estimators by one interval and update peak rates."""
        self.size_progress_estimator.tick()
        self.file_progress_estimator.tick()

        for entry in self._in_flight.values():
            entry.progress.tick()

        self.max_files_per_second = max(self.file_progress_estimator.rate_per_sec, self.max_files_per_second)
        self.max_bytes_per_second = max(self.size_progress_estimator.rate_per_sec, self.max_bytes_per_second)

    # Queries

    def total_progress(self) -> Estimates:
        """Get the blended bandwidth and ETA estimate for the whole run.

        A pure byte-rate ETA is far too pessimistic while many small
        operations (deletes, renames) run with almost no byte throughput,
        and a pure file-rate ETA is far too pessimistic during one large
        transfer. The byte-based estimate is preferred, but it is shifted
        toward an optimistic estimate (everything left proceeds at the best
        rates seen so far) when files are completing near their peak rate
        while bytes move abnormally slowly.
        """
        file_estimate = self.file_progress_estimator.estimate()
        if self.size_progress_estimator.total == 0:
            return file_estimate

        size_estimate = self.size_progress_estimator.estimate()
        be_optimistic = self._optimism()
        if be_optimistic == 0.0:
            return size_estimate

        eta_ms = (1.0 - be_optimistic) * size_estimate.eta_ms + be_optimistic * self.optimistic_eta()
        return Estimates(bandwidth=size_estimate.bandwidth, eta_ms=eta_ms)

    def optimistic_eta(self) -> float:
        """ETA assuming the remaining work proceeds at the best observed rates.

        Returns 0 ("unknown") while either peak rate is still zero.
        """
        if self.max_files_per_second == 0 or self.max_bytes_per_second == 0:
            return 0.0

        return (
            self.file_progress_estimator.remaining() / self.max_files_per_second * 1000.0
            + self.size_progress_estimator.remaining() / self.max_bytes_per_second * 1000.0
        )

    def _optimism(self) -> float:
        cfg = self.config

        # 0 when fps <= lower*max, 1 when fps >= upper*max
        if self.max_files_per_second == 0:
            near_max_fps = 0.0
        else:
            near_max_fps = _ramp(
                self.file_progress_estimator.rate_per_sec,
                cfg.fps_lower * self.max_files_per_second,
                cfg.fps_upper * self.max_files_per_second,
            )

        # 1 when transfer <= lower*max, 0 when transfer >= upper*max
        if self.max_bytes_per_second == 0:
            slow_transfer = 0.0
        else:
            slow_transfer = 1.0 - _ramp(
                self.size_progress_estimator.rate_per_sec,
                cfg.transfer_lower * self.max_bytes_per_second,
                cfg.transfer_upper * self.max_bytes_per_second,
            )

        return near_max_fps * slow_transfer

    def file_progress(self, path: str) -> Estimates:
        """Get the estimate for a single in-flight item.

        Unknown paths yield an empty estimate.
        """
        entry = self._in_flight.get(path)
        if entry is None:
            return Estimates()
        return entry.progress.estimate()

    def snapshot(self) -> ProgressSnapshot:
        """Capture the run's current progress for observers."""
        estimate = self.total_progress()
        return ProgressSnapshot(
            total_files=self.total_files,
            completed_files=self.completed_files,
            total_bytes=self.total_size,
            completed_bytes=self.completed_size,
            current_file_index=self.current_file,
            estimated_bandwidth=estimate.bandwidth,
            estimated_eta_ms=estimate.eta_ms,
            last_completed_item=self.last_completed_item,
        )

    @property
    def total_files(self) -> int:
        """Files planned for the run."""
        return self.file_progress_estimator.total

    @property
    def completed_files(self) -> int:
        """Files finished so far, clamped to the total."""
        return self.file_progress_estimator.completed

    @property
    def total_size(self) -> int:
        """Bytes planned for transfer."""
        return self.size_progress_estimator.total

    @property
    def completed_size(self) -> int:
        """Bytes transferred so far, including in-flight items."""
        return self.size_progress_estimator.completed

    @property
    def current_file(self) -> int:
        """One-based index of the file being worked on, for "file N of M" displays."""
        return self.completed_files + len(self._in_flight)

    @property
    def in_flight(self) -> Mapping[str, InFlightItem]:
        """Read-only view of the items currently in flight."""
        return MappingProxyType(self._in_flight)

    def _resolve(self, item: SyncItem | str, *, completed_bytes: int) -> tuple[SyncItem, bool]:
        """Find the item a progress report refers to.

        Returns:
            The item and whether its size is only assumed from reported bytes
        """
        if isinstance(item, SyncItem):
            return item, False

        in_flight = self._in_flight.get(item)
        if in_flight is not None:
            if in_flight.size_assumed and completed_bytes > in_flight.item.size:
                return replace(in_flight.item, size=completed_bytes), True
            return in_flight.item, in_flight.size_assumed

        planned = self._planned.get(item)
        if planned is not None:
            return planned, False

        log_with_context(
            logger,
            logging.WARNING,
            "Progress reported for unplanned item; assuming a plain file",
            extra={"path": item, "completed_bytes": completed_bytes},
        )
        return SyncItem(path=item, size=completed_bytes), True

    def _recompute_completed_size(self) -> None:
        completed = self._total_size_of_completed_jobs
        for entry in self._in_flight.values():
            if entry.item.is_size_dependent:
                completed += entry.progress.completed
        self.size_progress_estimator.set_completed(completed)
