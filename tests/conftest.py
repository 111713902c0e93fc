"""Shared fixtures for domain health tests."""

from datetime import datetime, timedelta, timezone

import pytest

from domain_health.config import ProbeSettings


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def settings() -> ProbeSettings:
    return ProbeSettings()


@pytest.fixture
def future(now):
    """Factory for a datetime N days from now (negative for the past)."""
    def _future(days: int) -> datetime:
        return now + timedelta(days=days)
    return _future
