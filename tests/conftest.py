import random
from datetime import datetime, UTC

import pytest

from smartshortener.dao.memory import ShortURLMemoryDAO


@pytest.fixture
def now() -> datetime:
    """Fixed 'current' instant shared by clock-dependent tests."""
    return datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def memory_dao() -> ShortURLMemoryDAO:
    return ShortURLMemoryDAO()
