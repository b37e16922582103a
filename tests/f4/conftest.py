"""Fixtures for F4 tests - Quiz sessions."""

import random

import pytest

from tagdrill.core.proficiency import MemoryStore, ProficiencyTracker
from tagdrill.core.record_merger import load_dataset


class FakeTimer:
    """Stand-in for threading.Timer that fires only when told to."""

    instances: list["FakeTimer"] = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def join(self, timeout=None):
        self.fire()

    def fire(self):
        if self.started and not self.cancelled:
            self.function()


@pytest.fixture
def fake_timer():
    FakeTimer.instances = []
    yield FakeTimer
    FakeTimer.instances = []


@pytest.fixture
def dataset(sample_data_dir):
    return load_dataset(sample_data_dir)


@pytest.fixture
def tracker():
    return ProficiencyTracker(MemoryStore())


@pytest.fixture
def rng():
    return random.Random(1234)
