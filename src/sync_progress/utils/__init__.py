"""Shared utility modules.

This package provides pure formatting helpers for progress display and the
logging setup used across the estimator.
"""

from sync_progress.utils.formatting import (
    format_eta,
    format_rate,
    format_size,
)
from sync_progress.utils.logging import (
    RunIdFilter,
    clear_run_id,
    configure_logging,
    get_run_id,
    log_with_context,
    set_run_id,
)

__all__ = [
    # Formatting utilities
    "format_eta",
    "format_rate",
    "format_size",
    # Logging
    "RunIdFilter",
    "clear_run_id",
    "configure_logging",
    "get_run_id",
    "log_with_context",
    "set_run_id",
]
