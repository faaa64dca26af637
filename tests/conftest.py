from datetime import datetime

import pytest

from taskcore.observers import StatisticsObserver
from taskcore.storage.task_store import TaskStore
from taskcore.utils.utils import FrozenClock


@pytest.fixture
def clock():
    """Clock pinned to a known instant"""
    return FrozenClock(datetime(2026, 1, 5, 12, 0, 0))


@pytest.fixture
def store(clock):
    """Fresh store with a frozen clock"""
    return TaskStore(clock)


@pytest.fixture
def recorder(store):
    """Statistics observer subscribed to the store"""
    observer = StatisticsObserver()
    store.subscribe(observer)
    return observer
