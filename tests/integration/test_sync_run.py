"""End-to-end sync run scenarios.

These drive an aggregator through realistic event sequences, the way a
sync engine and the 1 Hz ticker would, and check the published snapshots.
"""

from __future__ import annotations

import asyncio

import pytest

from sync_progress.core.notifier import ProgressNotifier
from sync_progress.core.progress.aggregator import ProgressAggregator
from sync_progress.core.ticker import EstimateTicker
from sync_progress.types.models import Instruction, ProgressSnapshot, SyncItem


@pytest.mark.integration
class TestSyncRunScenarios:
    """Scenario tests for complete sync runs."""

    def test_single_file_run(self, aggregator: ProgressAggregator, notifier: ProgressNotifier) -> None:
        """Test plan, partial progress at tick 1 and completion at tick 2."""
        received: list[ProgressSnapshot] = []
        notifier.subscribe(lambda key, snap: received.append(snap))
        ticker = EstimateTicker(aggregator, notifier, "Documents")
        item = SyncItem(path="report.pdf", size=500)

        aggregator.register_planned_work(item)
        aggregator.report_partial_progress("report.pdf", 250)
        _ = ticker.tick_once()
        aggregator.report_completion(item)
        final = ticker.tick_once()

        assert final.completed_files == 1
        assert final.completed_bytes == 500
        assert final.last_completed_item == item
        assert len(aggregator.in_flight) == 0
        assert received[0].completed_bytes == 250
        assert received[-1] is final

    def test_delete_only_run_uses_file_estimate(self, aggregator: ProgressAggregator) -> None:
        """Test a run without byte totals reports the file-based ETA."""
        removals = [SyncItem(path=f"old/{i}.tmp", instruction=Instruction.REMOVE) for i in range(100)]
        for item in removals:
            aggregator.register_planned_work(item)

        for tick in range(5):
            for item in removals[tick * 10 : (tick + 1) * 10]:
                aggregator.report_completion(item)
            aggregator.tick()

        assert aggregator.total_size == 0
        estimate = aggregator.total_progress()
        assert estimate == aggregator.file_progress_estimator.estimate()
        # 50 files left at 10 files/s
        assert estimate.eta_ms == pytest.approx(5000.0)  # pyright: ignore[reportUnknownMemberType]

    def test_large_file_eta_trends_to_zero(self, aggregator: ProgressAggregator) -> None:
        """Test a steady single transfer yields a shrinking ETA."""
        item = SyncItem(path="disk.img", size=1000)
        aggregator.register_planned_work(item)

        etas: list[float] = []
        for tick in range(1, 11):
            aggregator.report_partial_progress(item, tick * 100)
            aggregator.tick()
            etas.append(aggregator.total_progress().eta_ms)

        assert etas[0] == pytest.approx(9000.0)  # pyright: ignore[reportUnknownMemberType]
        assert all(later < earlier for earlier, later in zip(etas, etas[1:]))
        assert etas[-1] == pytest.approx(0.0, abs=1e-6)  # pyright: ignore[reportUnknownMemberType]

    def test_delete_burst_leans_toward_optimistic_eta(self, aggregator: ProgressAggregator) -> None:
        """Test many byte-less operations after a fast transfer use the optimistic ETA."""
        first = SyncItem(path="video-1.mkv", size=100_000)
        second = SyncItem(path="video-2.mkv", size=100_000)
        removals = [SyncItem(path=f"cache/{i}.tmp", instruction=Instruction.REMOVE) for i in range(500)]
        for item in (first, second, *removals):
            aggregator.register_planned_work(item)

        # Fast byte phase at 10 000 bytes per tick
        for tick in range(1, 11):
            aggregator.report_partial_progress(first, tick * 10_000)
            aggregator.tick()
        aggregator.report_completion(first)

        # Deletes at a steady 10 per tick; byte throughput collapses
        for tick in range(50):
            for item in removals[tick * 10 : (tick + 1) * 10]:
                aggregator.report_completion(item)
            aggregator.tick()

        byte_only_eta = aggregator.size_progress_estimator.estimate().eta_ms
        blended_eta = aggregator.total_progress().eta_ms
        assert 0 < blended_eta < byte_only_eta
        # One file and 100 000 bytes left at the best rates seen
        assert blended_eta == pytest.approx(aggregator.optimistic_eta())  # pyright: ignore[reportUnknownMemberType]
        assert blended_eta == pytest.approx(10_000.0, rel=0.02)  # pyright: ignore[reportUnknownMemberType]

    @pytest.mark.asyncio
    async def test_ticker_drives_observers(self, aggregator: ProgressAggregator, notifier: ProgressNotifier) -> None:
        """Test periodic snapshots reflect progress reported between ticks."""
        received: list[tuple[str, ProgressSnapshot]] = []
        notifier.subscribe(lambda key, snap: received.append((key, snap)))
        items = [SyncItem(path=f"f{i}", size=100) for i in range(3)]
        for item in items:
            aggregator.register_planned_work(item)

        async with EstimateTicker(aggregator, notifier, "Documents", interval=0.01):
            for item in items:
                aggregator.report_partial_progress(item, 50)
                await asyncio.sleep(0.02)
                aggregator.report_completion(item)
                await asyncio.sleep(0.02)
            await asyncio.sleep(0.05)

        assert received
        assert all(key == "Documents" for key, _ in received)
        completed = [snap.completed_files for _, snap in received]
        assert completed == sorted(completed)
        assert completed[-1] == 3

    def test_unidentified_run_is_not_published(self, aggregator: ProgressAggregator, notifier: ProgressNotifier) -> None:
        """Test a ticker without a group key never reaches observers."""
        received: list[ProgressSnapshot] = []
        notifier.subscribe(lambda key, snap: received.append(snap))
        ticker = EstimateTicker(aggregator, notifier, "")

        _ = ticker.tick_once()

        assert received == []
