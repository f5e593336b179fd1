"""
Store resolution: create, find by display name, list and delete stores.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import replace

from django.utils import timezone

from .base import SearchStoreBackend
from .cache import StoreCache, get_store_cache
from .exceptions import InvalidRequestError, StoreNotFoundError
from .retry import RetryExecutor
from .types import StoreDescriptor, full_store_name

logger = logging.getLogger(__name__)


def _with_timestamps(descriptor: StoreDescriptor) -> StoreDescriptor:
    """Fill timestamps the upstream omitted with the current time."""
    now = timezone.now()
    return replace(
        descriptor,
        create_time=descriptor.create_time or now,
        update_time=descriptor.update_time or now,
    )


class StoreResolver:
    """
    Resolves stores by display name, backed by a shared descriptor cache.

    Lookups hit the cache first and only page through the remote listing on
    a miss. ``list_all`` always goes to the upstream and never touches the
    cache.
    """

    def __init__(
        self,
        backend: SearchStoreBackend,
        *,
        cache: StoreCache | None = None,
        retry: RetryExecutor | None = None,
        lookup_page_size: int = 10,
        list_page_size: int = 20,
    ):
        self.backend = backend
        self.cache = cache if cache is not None else get_store_cache()
        self.retry = retry or RetryExecutor()
        self.lookup_page_size = lookup_page_size
        self.list_page_size = list_page_size

    async def find_by_display_name(self, display_name: str) -> StoreDescriptor:
        """
        Find a store by its display name.

        Raises:
            StoreNotFoundError: If no store carries that display name
        """
        if not display_name:
            raise InvalidRequestError("A store display name is required")

        cached = self.cache.get(display_name)
        if cached is not None:
            return cached

        logger.info(f"Looking up store '{display_name}'")
        async for store in self._iter_remote(self.lookup_page_size):
            if store.display_name == display_name:
                descriptor = _with_timestamps(store)
                self.cache.set(display_name, descriptor)
                logger.info(f"Found store '{display_name}': {descriptor.store_id}")
                return descriptor

        raise StoreNotFoundError(f"No store named '{display_name}' was found", status_code=404)

    async def create(self, display_name: str) -> StoreDescriptor:
        """Create a store and cache its descriptor."""
        if not display_name:
            raise InvalidRequestError("A store display name is required")

        logger.info(f"Creating store '{display_name}'")
        store = await self.retry.execute(
            lambda: self.backend.create_store(display_name),
            description=f"create store '{display_name}'",
        )
        descriptor = _with_timestamps(replace(store, display_name=store.display_name or display_name))
        self.cache.set(display_name, descriptor)
        logger.info(f"Created store '{display_name}': {descriptor.store_id}")
        return descriptor

    async def get_or_create(self, display_name: str) -> StoreDescriptor:
        """
        Find a store by display name, creating it when missing.

        Concurrent calls for the same name are serialized, so a name that
        is missing everywhere gets created exactly once per process.
        """
        async with self.cache.lock_for(display_name):
            try:
                return await self.find_by_display_name(display_name)
            except StoreNotFoundError:
                return await self.create(display_name)

    def get_by_id(self, store_id: str, display_name: str | None = None) -> StoreDescriptor:
        """Build a descriptor for a known store id without a remote call."""
        if not store_id:
            raise InvalidRequestError("A store id is required")
        name = full_store_name(store_id)
        return _with_timestamps(StoreDescriptor(store_id=name, display_name=display_name or store_id))

    async def list_all(self) -> list[StoreDescriptor]:
        """List every store, always straight from the upstream."""
        stores = [
            _with_timestamps(store)
            async for store in self._iter_remote(self.list_page_size)
            if store.display_name
        ]
        logger.info(f"Listed {len(stores)} store(s)")
        return stores

    async def delete(self, descriptor: StoreDescriptor) -> None:
        """Force-delete a store, then drop it from the cache."""
        logger.info(f"Deleting store '{descriptor.display_name}' ({descriptor.store_id})")
        await self.retry.execute(
            lambda: self.backend.delete_store(descriptor.store_id, force=True),
            description=f"delete store '{descriptor.display_name}'",
        )
        self.cache.delete(descriptor.display_name)
        logger.info(f"Deleted store '{descriptor.display_name}'")

    async def _iter_remote(self, page_size: int) -> AsyncIterator[StoreDescriptor]:
        page_token = None
        while True:
            page = await self.retry.execute(
                lambda: self.backend.list_stores_page(page_size, page_token),
                description="list stores",
            )
            for store in page.items:
                yield store
            page_token = page.next_page_token
            if not page_token:
                return
