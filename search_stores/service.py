"""
Entry point that wires the orchestration components for one API key.
"""

from __future__ import annotations

from typing import Any

from .base import SearchStoreBackend
from .cache import StoreCache, get_store_cache
from .config import SearchStoreSettings, resolve_search_settings
from .documents import DocumentRegistry
from .query import QueryOrchestrator
from .registry import BackendRegistry
from .retry import RetryExecutor, Sleep
from .stores import StoreResolver
from .types import ChunkingConfig
from .uploads import DocumentUploader, OperationPoller


class SearchStoreService:
    """
    Store resolver, uploader, document registry and query orchestrator
    sharing one backend, one retry policy and the process-wide store cache.

    Example:
        service = SearchStoreService.for_api_key(request_api_key)
        store = await service.stores.get_or_create("docs-en")
        await service.uploader.upload(store, "guide.md")
        result = await service.queries.ask(store, "How do I install it?")
    """

    def __init__(
        self,
        backend: SearchStoreBackend,
        *,
        cache: StoreCache | None = None,
        config: SearchStoreSettings | None = None,
        sleep: Sleep | None = None,
    ):
        self.backend = backend
        self.config = config or resolve_search_settings()
        self.cache = cache if cache is not None else get_store_cache()

        self.retry = RetryExecutor(
            max_retries=self.config.retry_max_retries,
            base_delay=self.config.retry_base_delay,
            sleep=sleep,
        )
        self.stores = StoreResolver(
            backend,
            cache=self.cache,
            retry=self.retry,
            lookup_page_size=self.config.lookup_page_size,
            list_page_size=self.config.list_page_size,
        )
        self.poller = OperationPoller(
            backend,
            interval=self.config.poll_interval,
            max_attempts=self.config.poll_max_attempts,
            retry=self.retry,
            sleep=sleep,
        )
        self.uploader = DocumentUploader(
            backend,
            retry=self.retry,
            poller=self.poller,
            default_chunking=ChunkingConfig(
                max_tokens_per_chunk=self.config.max_tokens_per_chunk,
                max_overlap_tokens=self.config.max_overlap_tokens,
            ),
        )
        self.documents = DocumentRegistry(
            backend,
            self.uploader,
            retry=self.retry,
            page_size=self.config.document_page_size,
        )
        self.queries = QueryOrchestrator(
            backend,
            retry=self.retry,
            default_model=self.config.default_model,
            default_system_instruction=self.config.system_instruction,
        )

    @classmethod
    def for_api_key(
        cls,
        api_key: str | None,
        *,
        backend: str | None = None,
        overrides: dict[str, Any] | None = None,
        **kwargs,
    ) -> SearchStoreService:
        """
        Build a service around a fresh backend for ``api_key``.

        Unless a cache is passed, the service uses the process-wide cache kept
        for that key, so stores resolved for one key are never served to another.
        """
        config = resolve_search_settings(overrides)
        instance = BackendRegistry.create(backend or config.backend, api_key=api_key)
        kwargs.setdefault("cache", get_store_cache(api_key))
        return cls(instance, config=config, **kwargs)
