"""Tests for search store settings resolution."""

from search_stores.config import DEFAULT_SYSTEM_INSTRUCTION, resolve_search_settings


def test_defaults_apply_when_settings_are_absent(settings):
    for name in ("SEARCH_STORE_BACKEND", "SEARCH_STORE_POLL_INTERVAL", "SEARCH_STORE_RETRY_BASE_DELAY"):
        delattr(settings, name)

    config = resolve_search_settings()

    assert config.backend is None
    assert config.default_model == "gemini-2.5-flash"
    assert config.poll_interval == 1.0
    assert config.poll_max_attempts == 300
    assert config.retry_max_retries == 3
    assert config.retry_base_delay == 1.0
    assert config.lookup_page_size == 10
    assert config.list_page_size == 20
    assert config.max_tokens_per_chunk == 500
    assert config.max_overlap_tokens == 50
    assert config.system_instruction == DEFAULT_SYSTEM_INSTRUCTION


def test_django_settings_override_defaults(settings):
    settings.SEARCH_STORE_DEFAULT_MODEL = "gemini-2.5-pro"
    settings.SEARCH_STORE_POLL_MAX_ATTEMPTS = 10

    config = resolve_search_settings()

    assert config.default_model == "gemini-2.5-pro"
    assert config.poll_max_attempts == 10
    assert config.backend == "fake"


def test_explicit_overrides_win(settings):
    settings.SEARCH_STORE_LIST_PAGE_SIZE = 50

    config = resolve_search_settings({"list_page_size": 5, "cache_ttl": 30.0})

    assert config.list_page_size == 5
    assert config.cache_ttl == 30.0


def test_none_overrides_are_ignored(settings):
    settings.SEARCH_STORE_DEFAULT_MODEL = "gemini-2.5-pro"

    config = resolve_search_settings({"default_model": None})

    assert config.default_model == "gemini-2.5-pro"


def test_unknown_overrides_are_ignored(caplog):
    config = resolve_search_settings({"poll_everything": True})

    assert not hasattr(config, "poll_everything")
    assert "poll_everything" in caplog.text
