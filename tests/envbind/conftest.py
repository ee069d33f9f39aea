"""Shared pytest fixtures for the EnvBind test suite."""

from __future__ import annotations

import logging
import os
from typing import Callable, Mapping

import pytest

from EnvBind import Loader, MappingSource


@pytest.fixture(autouse=True)
def _restore_environ() -> None:
    """Snapshot environment variables and restore them after each test."""

    original = os.environ.copy()
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@pytest.fixture(autouse=True)
def _restore_envbind_logger() -> None:
    """Undo handler, level and propagation changes made by ``configure_logging``."""

    logger = logging.getLogger("EnvBind")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    try:
        yield
    finally:
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate


@pytest.fixture
def make_loader() -> Callable[[Mapping[str, str]], Loader]:
    """Build loaders reading from an in-memory mapping."""

    def _factory(values: Mapping[str, str]) -> Loader:
        return Loader(MappingSource(values))

    return _factory
