"""
Test configuration and fixtures.

Provides common fixtures and setup for all tests.
"""

import os

import pytest

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"

from candlefeed.core.config import TestingConfig
from candlefeed.services.history import CacheStore

from helpers import FakeUpstream


@pytest.fixture
def test_config():
    """Testing configuration instance."""
    return TestingConfig()


@pytest.fixture
def cache_store():
    """Empty candle cache."""
    return CacheStore()


@pytest.fixture
def fake_upstream():
    """Fake upstream client returning one candle per period."""
    return FakeUpstream()
