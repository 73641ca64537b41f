"""Shared fixtures for appvitals tests."""

from datetime import datetime

import pytest

from tests.helpers import NOW, FakeProbeClient


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def fake_probe() -> FakeProbeClient:
    return FakeProbeClient()
