"""Tests for smoothed rate estimation."""

from __future__ import annotations

import pytest

from sync_progress.core.progress.rate_estimator import RateEstimator


@pytest.mark.unit
class TestRateEstimator:
    """Test suite for RateEstimator."""

    def test_initial_state(self) -> None:
        """Test a fresh estimator reports nothing known."""
        estimator = RateEstimator(total=100)

        assert estimator.completed == 0
        assert estimator.previous_completed == 0
        assert estimator.rate_per_sec == 0.0
        assert estimator.ramp == 1.0
        assert estimator.remaining() == 100

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"smoothing": 1.0}, "Smoothing"),
            ({"smoothing": -0.1}, "Smoothing"),
            ({"smoothing": float("nan")}, "Smoothing"),
            ({"ramp_decay": 1.5}, "Ramp decay"),
            ({"total": -1}, "Total"),
        ],
    )
    def test_invalid_arguments(self, kwargs: dict[str, float], message: str) -> None:
        """Test constructor validation."""
        with pytest.raises(ValueError, match=message):
            _ = RateEstimator(**kwargs)  # pyright: ignore[reportArgumentType]

    def test_set_completed_clamps_to_total(self) -> None:
        """Test completed values beyond the total are clamped."""
        estimator = RateEstimator(total=50)

        estimator.set_completed(80)

        assert estimator.completed == 50
        assert estimator.remaining() == 0

    def test_set_completed_clamps_negative_to_zero(self) -> None:
        """Test negative completed values are clamped to zero."""
        estimator = RateEstimator(total=50)

        estimator.set_completed(-5)

        assert estimator.completed == 0

    def test_set_completed_clamps_previous(self) -> None:
        """Test lowering completed also lowers the previous snapshot."""
        estimator = RateEstimator(total=100)
        estimator.set_completed(60)
        estimator.tick()
        assert estimator.previous_completed == 60

        estimator.set_completed(20)

        assert estimator.previous_completed == 20
        estimator.tick()
        assert estimator.rate_per_sec >= 0.0

    def test_total_never_decreases(self) -> None:
        """Test set_total ignores smaller values."""
        estimator = RateEstimator(total=100)

        estimator.set_total(40)
        assert estimator.total == 100

        estimator.set_total(150)
        assert estimator.total == 150

    def test_reset_total_may_lower_total(self) -> None:
        """Test reset_total replaces the total and re-clamps the counters."""
        estimator = RateEstimator(total=1000)
        estimator.set_completed(700)
        estimator.tick()

        estimator.reset_total(400)

        assert estimator.total == 400
        assert estimator.completed == 400
        assert estimator.previous_completed == 400
        assert estimator.remaining() == 0

    def test_reset_total_rejects_negative(self) -> None:
        """Test a negative total is treated as empty."""
        estimator = RateEstimator(total=10)

        estimator.reset_total(-5)

        assert estimator.total == 0
        assert estimator.completed == 0

    def test_add_total(self) -> None:
        """Test planned work grows the total and non-positive amounts are ignored."""
        estimator = RateEstimator()

        estimator.add_total(10)
        estimator.add_total(5)
        estimator.add_total(0)
        estimator.add_total(-3)

        assert estimator.total == 15

    def test_first_tick_trusts_measurement_fully(self) -> None:
        """Test the first tick adopts the measured delta as the rate."""
        estimator = RateEstimator(total=1000)
        estimator.set_completed(250)

        estimator.tick()

        assert estimator.rate_per_sec == pytest.approx(250.0)  # pyright: ignore[reportUnknownMemberType]
        assert estimator.previous_completed == 250
        assert estimator.ramp == pytest.approx(0.7)  # pyright: ignore[reportUnknownMemberType]

    def test_second_tick_blends_with_history(self) -> None:
        """Test the second tick weighs the old rate by 0.9 * (1 - 0.7)."""
        estimator = RateEstimator(total=1000)
        estimator.set_completed(100)
        estimator.tick()

        estimator.set_completed(300)
        estimator.tick()

        weight = 0.9 * (1.0 - 0.7)
        expected = weight * 100.0 + (1.0 - weight) * 200.0
        assert estimator.rate_per_sec == pytest.approx(expected)  # pyright: ignore[reportUnknownMemberType]

    def test_ramp_decays_to_three_percent_in_ten_ticks(self) -> None:
        """Test the ramp-up term decays geometrically."""
        estimator = RateEstimator(total=10)

        for _ in range(10):
            estimator.tick()

        assert estimator.ramp == pytest.approx(0.7**10)  # pyright: ignore[reportUnknownMemberType]
        assert estimator.ramp < 0.03

    def test_constant_progress_keeps_constant_rate(self) -> None:
        """Test a steady delta yields the same smoothed rate."""
        estimator = RateEstimator(total=10_000)

        for i in range(1, 20):
            estimator.set_completed(i * 100)
            estimator.tick()

        assert estimator.rate_per_sec == pytest.approx(100.0)  # pyright: ignore[reportUnknownMemberType]

    def test_idle_ticks_decay_toward_zero(self) -> None:
        """Test the rate decays but never turns negative without progress."""
        estimator = RateEstimator(total=10_000)
        estimator.set_completed(100)
        estimator.tick()
        initial_rate = estimator.rate_per_sec

        rates: list[float] = []
        for _ in range(100):
            estimator.tick()
            rates.append(estimator.rate_per_sec)

        assert all(rate >= 0.0 for rate in rates)
        assert all(later <= earlier for earlier, later in zip(rates, rates[1:]))
        assert rates[-1] < initial_rate * 1e-3

    def test_estimate_eta(self) -> None:
        """Test ETA is remaining divided by rate, in milliseconds."""
        estimator = RateEstimator(total=1000)
        estimator.set_completed(200)
        estimator.tick()

        estimate = estimator.estimate()

        assert estimate.bandwidth == pytest.approx(200.0)  # pyright: ignore[reportUnknownMemberType]
        assert estimate.eta_ms == pytest.approx(4000.0)  # pyright: ignore[reportUnknownMemberType]

    def test_estimate_unknown_when_rate_is_zero(self) -> None:
        """Test a zero rate reports ETA 0 instead of dividing by zero."""
        estimator = RateEstimator(total=1000)

        estimate = estimator.estimate()

        assert estimate.bandwidth == 0.0
        assert estimate.eta_ms == 0.0
        assert not estimate.is_known

    def test_is_complete(self) -> None:
        """Test completion requires a non-empty total that has been reached."""
        estimator = RateEstimator()
        assert not estimator.is_complete

        estimator.set_total(10)
        estimator.set_completed(10)
        assert estimator.is_complete
