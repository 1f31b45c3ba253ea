"""Logging setup with sync-run tagging.

Every log line emitted while a sync run is being estimated can carry the
run's group key. The key lives in a ContextVar, so it follows the asyncio
task that owns the aggregator without being passed around explicitly.
"""

import contextvars
import logging
import logging.handlers
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from typing_extensions import override

run_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] - %(message)s"

# Rotation settings for the optional log file
_LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_FILE_BACKUPS: Final[int] = 3


class RunIdFilter(logging.Filter):
    """Logging filter that adds the current sync run id to log records.

    Records logged outside of any run get ``"-"``.
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        run_id = run_id_var.get()
        record.run_id = run_id if run_id else "-"
        return True


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_console: bool = True,
    log_file: Path | None = None,
) -> None:
    """Configure root logging for an application embedding the estimator.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        enable_console: Attach a stdout handler
        log_file: Optional path for a size-rotated log file

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> set_run_id("Documents")
        >>> logging.getLogger(__name__).info("Sync started")
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates on reconfiguration
    root_logger.handlers.clear()

    run_filter = RunIdFilter()
    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(run_filter)
        root_logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(run_filter)
        root_logger.addHandler(file_handler)


def set_run_id(run_id: str) -> None:
    """Set the sync run id for the current context."""
    _ = run_id_var.set(run_id)


def get_run_id() -> str | None:
    """Get the sync run id of the current context, if any."""
    return run_id_var.get()


def clear_run_id() -> None:
    """Clear the sync run id from the current context."""
    _ = run_id_var.set(None)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional structured context fields.

    The current run id is added to the context when one is set.

    Example:
        >>> log_with_context(
        ...     logger,
        ...     logging.WARNING,
        ...     "Completion for unplanned item",
        ...     extra={"path": "a/b.txt", "completed_files": 12},
        ... )
    """
    context = dict(extra) if extra else {}

    run_id = get_run_id()
    if run_id:
        context["run_id"] = run_id

    logger.log(level, message, extra=context)
