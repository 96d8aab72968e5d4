"""
Shared pytest fixtures for the manse engine tests.
"""

from zoneinfo import ZoneInfo

import pytest

from manse.normalize import BirthInput


@pytest.fixture(scope="session")
def kst():
    return ZoneInfo("Asia/Seoul")


@pytest.fixture
def make_birth():
    """Factory for BirthInput with a solar, time-known default."""
    def _make(year=1990, month=8, day=20, hour=9, minute=0, **kwargs):
        kwargs.setdefault("has_time", hour is not None)
        return BirthInput(year=year, month=month, day=day, hour=hour, minute=minute, **kwargs)
    return _make
