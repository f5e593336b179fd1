"""
Shared fixtures for search store tests.
"""

import pytest

from search_stores import BackendRegistry, InMemoryStoreCache, SearchStoreService, reset_store_cache
from search_stores.config import resolve_search_settings
from search_stores.tests.fakes import FakeSearchStoreBackend, FakeUpstream, SleepRecorder


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def backend(upstream):
    return FakeSearchStoreBackend(api_key="test-key", upstream=upstream)


@pytest.fixture
def cache():
    return InMemoryStoreCache()


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def service(backend, cache, sleep):
    """Service over the fake backend with instant polling and retries."""
    return SearchStoreService(backend, cache=cache, config=resolve_search_settings(), sleep=sleep)


@pytest.fixture
def fake_backend_registered(upstream):
    """Register the fake backend so services built per API key share ``upstream``."""
    BackendRegistry.register("fake", FakeSearchStoreBackend)
    FakeSearchStoreBackend.shared_upstream = upstream
    reset_store_cache()
    yield upstream
    FakeSearchStoreBackend.shared_upstream = None
    FakeSearchStoreBackend.upstreams_by_key = {}
    BackendRegistry.unregister("fake")
    reset_store_cache()
