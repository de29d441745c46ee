"""Shared fixtures for compgraph tests."""

import logging
from collections.abc import Callable

import pytest


@pytest.fixture
def cache_misses(caplog: pytest.LogCaptureFixture) -> Callable[[], list[str]]:
    """Return a callable draining the nodes recomputed since its last call.

    Recomputations are observed through the engine's "Cache miss" debug log.
    """
    caplog.set_level(logging.DEBUG, logger="compgraph._node")

    def drain() -> list[str]:
        misses = [
            record.getMessage().removeprefix("Cache miss ")
            for record in caplog.records
            if record.name == "compgraph._node" and record.getMessage().startswith("Cache miss ")
        ]
        caplog.clear()
        return misses

    return drain
