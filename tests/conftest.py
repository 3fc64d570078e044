"""Pytest fixtures for rescue camp tests."""

import pytest

from rescuecamp.core.scenario import Scenario


@pytest.fixture
def default_seed() -> int:
    """Default random seed for reproducible tests."""
    return 42


@pytest.fixture
def short_run_length() -> float:
    """Short run length (minutes) for quick tests."""
    return 120.0  # 2 hours


@pytest.fixture
def short_scenario(default_seed, short_run_length) -> Scenario:
    """Default camp over a short horizon with frequent arrivals."""
    return Scenario(run_length=short_run_length, arrival_mean=5.0, random_seed=default_seed)
