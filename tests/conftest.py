"""Pytest fixtures for relgraph tests."""

from collections.abc import Generator

import pytest

from relgraph.config.settings import Settings, get_settings


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(environment="development", log_level="DEBUG")


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so env changes in one test never leak into another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
