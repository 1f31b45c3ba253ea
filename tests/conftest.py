"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

import pytest

from sync_progress.core.notifier import ProgressNotifier
from sync_progress.core.progress.aggregator import ProgressAggregator
from sync_progress.types.models import Instruction, SyncItem
from sync_progress.utils.logging import RunIdFilter


@pytest.fixture
def aggregator() -> ProgressAggregator:
    """Provide a fresh aggregator with default tuning."""
    return ProgressAggregator()


@pytest.fixture
def notifier() -> Iterator[ProgressNotifier]:
    """Provide a notifier that is closed after the test."""
    with ProgressNotifier() as relay:
        yield relay


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Remove the handlers configure_logging installs and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if any(isinstance(f, RunIdFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def make_file() -> Callable[..., SyncItem]:
    """Factory for plain file items that transfer content."""

    def _make(path: str, size: int = 0, instruction: Instruction = Instruction.SYNC) -> SyncItem:
        return SyncItem(path=path, size=size, instruction=instruction)

    return _make


@pytest.fixture
def make_dir() -> Callable[..., SyncItem]:
    """Factory for directory items."""

    def _make(path: str, instruction: Instruction = Instruction.NEW) -> SyncItem:
        return SyncItem(path=path, is_directory=True, instruction=instruction)

    return _make
