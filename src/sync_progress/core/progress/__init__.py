"""Progress estimation module for computing sync totals, rates and ETAs."""

from __future__ import annotations

from .rate_estimator import RateEstimator
from .aggregator import (
    InFlightItem,
    ProgressAggregator,
)
from .item_status import (
    action_string,
    is_ignored_kind,
    is_warning_kind,
    result_string,
)

__all__ = [
    "RateEstimator",
    "InFlightItem",
    "ProgressAggregator",
    "action_string",
    "is_ignored_kind",
    "is_warning_kind",
    "result_string",
]
