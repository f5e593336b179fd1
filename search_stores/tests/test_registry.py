"""Tests for the backend registry."""

import pytest

from search_stores.backends.gemini import GeminiSearchStoreBackend
from search_stores.exceptions import BackendNotFoundError, ConfigurationError
from search_stores.registry import BackendRegistry
from search_stores.service import SearchStoreService
from search_stores.tests.fakes import FakeSearchStoreBackend


@pytest.fixture(autouse=True)
def registered(fake_backend_registered):
    return fake_backend_registered


def test_gemini_is_registered():
    assert "gemini" in BackendRegistry.list_backends()
    assert "fake" in BackendRegistry.list_backends()


def test_create_uses_configured_backend():
    backend = BackendRegistry.create(api_key="key")

    assert isinstance(backend, FakeSearchStoreBackend)
    assert backend.api_key == "key"


def test_create_builds_a_fresh_instance_per_call():
    assert BackendRegistry.create("fake", api_key="a") is not BackendRegistry.create("fake", api_key="a")


def test_create_named_backend():
    assert isinstance(BackendRegistry.create("gemini", api_key="key"), GeminiSearchStoreBackend)


def test_unknown_backend():
    with pytest.raises(BackendNotFoundError):
        BackendRegistry.create("nope", api_key="key")


def test_register_rejects_non_backends():
    with pytest.raises(ConfigurationError):
        BackendRegistry.register("bad", dict)


def test_default_follows_settings(settings):
    assert BackendRegistry.get_default() == "fake"

    settings.SEARCH_STORE_BACKEND = None
    assert BackendRegistry.get_default() == "gemini"


def test_backend_class_lookup():
    assert BackendRegistry.backend_class("fake") is FakeSearchStoreBackend
    assert BackendRegistry.backend_class() is FakeSearchStoreBackend


def test_unregister_moves_default():
    BackendRegistry.register("spare", FakeSearchStoreBackend, set_default=True)
    BackendRegistry.unregister("spare")

    assert "spare" not in BackendRegistry.list_backends()
    assert BackendRegistry._default != "spare"


def test_named_backend_loads_builtins_on_first_use():
    # Fresh registry: nothing registered and the built-ins not yet loaded
    BackendRegistry.clear()

    backend = BackendRegistry.create("gemini", api_key="key")

    assert isinstance(backend, GeminiSearchStoreBackend)


def test_service_resolves_gemini_under_production_settings(settings):
    settings.SEARCH_STORE_BACKEND = "gemini"
    BackendRegistry.clear()

    service = SearchStoreService.for_api_key("AIza-test")

    assert isinstance(service.backend, GeminiSearchStoreBackend)


def test_clear_lets_builtins_register_again():
    assert "gemini" in BackendRegistry.list_backends()

    BackendRegistry.clear()

    assert BackendRegistry.list_backends() == ["gemini"]
    assert BackendRegistry.get_default() == "fake"
    assert BackendRegistry._default == "gemini"
