"""Estimation core: rate smoothing, run aggregation and snapshot fan-out."""

from __future__ import annotations

from sync_progress.core.config import (
    ConfigurationError,
    EstimationConfig,
    LoggingConfig,
    MainConfig,
    load_config,
)
from sync_progress.core.notifier import ProgressNotifier
from sync_progress.core.progress import ProgressAggregator, RateEstimator
from sync_progress.core.ticker import EstimateTicker

__all__ = [
    "ConfigurationError",
    "EstimateTicker",
    "EstimationConfig",
    "LoggingConfig",
    "MainConfig",
    "ProgressAggregator",
    "ProgressNotifier",
    "RateEstimator",
    "load_config",
]
