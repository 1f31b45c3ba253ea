"""Smoothed rate estimation over a monotonically growing counter."""

from __future__ import annotations

import logging
import math

from sync_progress.types.models import Estimates

logger = logging.getLogger(__name__)

DEFAULT_SMOOTHING = 0.9
DEFAULT_RAMP_DECAY = 0.7


class RateEstimator:
    """Exponential moving average of progress per tick against a fixed total.

    A good way to think about the smoothing factor: if progress P is made per
    tick and then stops entirely, after N ticks the rate has dropped to
    ``P * smoothing**N``. With 0.9 about 4% is left after 30 ticks.

    Early on the estimate should reach the true value quickly, so the
    effective smoothing starts at 0 and ramps up to its final value as
    ``ramp`` decays (1.0 to about 0.03 in ten ticks with the default decay).
    """

    total: int
    completed: int
    previous_completed: int
    rate_per_sec: float
    ramp: float
    smoothing: float
    ramp_decay: float

    def __init__(
        self,
        total: int = 0,
        smoothing: float = DEFAULT_SMOOTHING,
        ramp_decay: float = DEFAULT_RAMP_DECAY,
    ) -> None:
        """Initialize the rate estimator.

        Args:
            total: Initial upper bound for the counter
            smoothing: Final weight given to the historical rate (0.0 to <1.0)
            ramp_decay: Factor the ramp-up term is multiplied by each tick (0.0 to <1.0)
        """
        if not math.isfinite(smoothing) or not 0.0 <= smoothing < 1.0:
            raise ValueError("Smoothing must be in [0.0, 1.0)")

        if not math.isfinite(ramp_decay) or not 0.0 <= ramp_decay < 1.0:
            raise ValueError("Ramp decay must be in [0.0, 1.0)")

        if total < 0:
            raise ValueError("Total cannot be negative")

        self.total = total
        self.completed = 0
        self.previous_completed = 0
        self.rate_per_sec = 0.0
        self.ramp = 1.0
        self.smoothing = smoothing
        self.ramp_decay = ramp_decay

    def set_total(self, total: int) -> None:
        """Raise the total to ``total``.

        Totals only grow as new planned work is discovered; a smaller value
        is ignored.
        """
        if total < self.total:
            logger.debug("Ignoring total decrease from %d to %d", self.total, total)
            return
        self.total = total

    def reset_total(self, total: int) -> None:
        """Replace the total, lowering it when the declared size shrank.

        Used for per-item estimators, whose total is the item's current
        size. The completed counters are re-clamped to the new total.
        """
        self.total = max(total, 0)
        self.set_completed(self.completed)

    def add_total(self, amount: int) -> None:
        """Grow the total by ``amount`` units of newly planned work."""
        if amount <= 0:
            return
        self.total += amount

    def set_completed(self, completed: int) -> None:
        """Set the completed counter, clamped to ``[0, total]``.

        The previous-completed snapshot is clamped as well so the next
        tick's delta is never negative.
        """
        self.completed = min(max(completed, 0), self.total)
        self.previous_completed = min(self.previous_completed, self.completed)

    def tick(self) -> None:
        """Fold the progress made since the last tick into the smoothed rate."""
        weight = self.smoothing * (1.0 - self.ramp)
        self.ramp *= self.ramp_decay
        delta = self.completed - self.previous_completed
        self.rate_per_sec = weight * self.rate_per_sec + (1.0 - weight) * delta
        self.previous_completed = self.completed

    def remaining(self) -> int:
        """Units of work left."""
        return self.total - self.completed

    def estimate(self) -> Estimates:
        """Get the current bandwidth and ETA.

        Returns:
            Estimates with the smoothed rate; the ETA is 0 ("unknown") while
            the rate is zero rather than an unbounded value.
        """
        if self.rate_per_sec == 0:
            return Estimates(bandwidth=self.rate_per_sec, eta_ms=0.0)

        eta_ms = self.remaining() / self.rate_per_sec * 1000.0
        return Estimates(bandwidth=self.rate_per_sec, eta_ms=eta_ms)

    @property
    def is_complete(self) -> bool:
        """Whether a non-empty total has been reached."""
        return self.total > 0 and self.completed >= self.total
