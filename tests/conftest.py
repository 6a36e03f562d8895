"""Pytest configuration and fixtures."""

import os
import random

import pytest

from app.core.profile_cache import TTLProfileCache
from app.services.entity_intelligence import EntityIntelligenceService
from tests.fakes.fake_entity_store import FakeEntityStore


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["ENTITY_ENV"] = "test"


@pytest.fixture
def fake_store():
    """Empty in-memory backing store."""
    return FakeEntityStore()


@pytest.fixture
def service(fake_store):
    """Service wired to the fake store with a seeded random source."""
    return EntityIntelligenceService(
        backend=fake_store,
        cache=TTLProfileCache(ttl_seconds=300),
        rng=random.Random(42),
        store_timeout_seconds=2.0,
    )
