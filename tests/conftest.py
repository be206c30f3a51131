from __future__ import annotations

import pytest

from fakes import FakeClient, FakeClock, RecordingExposer


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def exposer() -> RecordingExposer:
    return RecordingExposer()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
