"""
Search store configuration resolution.

Resolves tunables using hierarchy: explicit overrides → Django settings → defaults.
"""

import logging
from dataclasses import dataclass, fields
from typing import Any

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_INSTRUCTION = (
    "Format the answer as Markdown. Keep it short and to the point. "
    "Organize the answer in a clear, ordered structure."
)

# Field name -> Django setting name
_SETTING_NAMES = {
    "backend": "SEARCH_STORE_BACKEND",
    "default_model": "SEARCH_STORE_DEFAULT_MODEL",
    "lookup_page_size": "SEARCH_STORE_LOOKUP_PAGE_SIZE",
    "list_page_size": "SEARCH_STORE_LIST_PAGE_SIZE",
    "document_page_size": "SEARCH_STORE_DOCUMENT_PAGE_SIZE",
    "poll_interval": "SEARCH_STORE_POLL_INTERVAL",
    "poll_max_attempts": "SEARCH_STORE_POLL_MAX_ATTEMPTS",
    "retry_max_retries": "SEARCH_STORE_RETRY_MAX_RETRIES",
    "retry_base_delay": "SEARCH_STORE_RETRY_BASE_DELAY",
    "max_tokens_per_chunk": "SEARCH_STORE_MAX_TOKENS_PER_CHUNK",
    "max_overlap_tokens": "SEARCH_STORE_MAX_OVERLAP_TOKENS",
    "cache_ttl": "SEARCH_STORE_CACHE_TTL",
    "system_instruction": "SEARCH_STORE_SYSTEM_INSTRUCTION",
}


@dataclass(frozen=True)
class SearchStoreSettings:
    """Resolved tunables. Durations are in seconds."""

    backend: str | None = None
    default_model: str = "gemini-2.5-flash"
    lookup_page_size: int = 10
    list_page_size: int = 20
    document_page_size: int = 20
    poll_interval: float = 1.0
    poll_max_attempts: int = 300
    retry_max_retries: int = 3
    retry_base_delay: float = 1.0
    max_tokens_per_chunk: int = 500
    max_overlap_tokens: int = 50
    cache_ttl: float | None = None
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION


def resolve_search_settings(overrides: dict[str, Any] | None = None) -> SearchStoreSettings:
    """
    Resolve search store settings.

    Resolution order (first wins):
    1. ``overrides`` (per-call or per-service configuration)
    2. Django settings (``SEARCH_STORE_*``)
    3. Built-in defaults

    Example:
        # Faster polling for a single service instance
        config = resolve_search_settings({"poll_interval": 0.5})
    """
    values: dict[str, Any] = {}
    for field in fields(SearchStoreSettings):
        value = getattr(settings, _SETTING_NAMES[field.name], None)
        if value is not None:
            values[field.name] = value

    for key, value in (overrides or {}).items():
        if key not in _SETTING_NAMES:
            logger.warning(f"Ignoring unknown search store setting override: {key}")
            continue
        if value is not None:
            values[key] = value

    return SearchStoreSettings(**values)
