"""
Process-wide caches of store descriptors keyed by display name.

Display names are only unique within one upstream account, so the process
keeps one cache per API key (looked up by a digest of the key, never the key
itself).

Entries are invalidated on mutation: deleting a store drops its entry,
creating or re-resolving a store overwrites it. An optional TTL bounds how
long a descriptor is trusted without a remote lookup.
"""

from __future__ import annotations

import asyncio
import hashlib
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from .types import StoreDescriptor


class StoreCache(ABC):
    """
    Interface for store descriptor caches.

    Implementations also serialize find-or-create sequences per display name
    through ``lock_for``. A name's lock lives only while some task holds or
    waits for it.
    """

    def __init__(self):
        # name -> [lock, number of tasks holding or waiting for it]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, name: str) -> StoreDescriptor | None:
        pass

    @abstractmethod
    def set(self, name: str, descriptor: StoreDescriptor) -> None:
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @asynccontextmanager
    async def lock_for(self, name: str) -> AsyncIterator[None]:
        with self._locks_guard:
            entry = self._locks.get(name)
            if entry is None:
                entry = self._locks[name] = [asyncio.Lock(), 0]
            entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[name]


class InMemoryStoreCache(StoreCache):
    """
    Thread-safe in-memory cache.

    ``ttl`` of None keeps entries until they are explicitly deleted.
    """

    def __init__(self, ttl: float | None = None, *, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[StoreDescriptor, float]] = {}
        self._guard = threading.Lock()

    def get(self, name: str) -> StoreDescriptor | None:
        with self._guard:
            entry = self._entries.get(name)
            if entry is None:
                return None
            descriptor, stored_at = entry
            if self.ttl is not None and self._clock() - stored_at >= self.ttl:
                del self._entries[name]
                return None
            return descriptor

    def set(self, name: str, descriptor: StoreDescriptor) -> None:
        with self._guard:
            self._entries[name] = (descriptor, self._clock())

    def delete(self, name: str) -> None:
        with self._guard:
            self._entries.pop(name, None)

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


_caches: dict[str, StoreCache] = {}
_caches_guard = threading.Lock()


def _cache_key(api_key: str | None) -> str:
    if not api_key:
        return ""
    return hashlib.sha256(api_key.encode()).hexdigest()


def get_store_cache(api_key: str | None = None) -> StoreCache:
    """
    Return the process-wide cache for ``api_key``, creating it from settings
    on first use.

    Calls without a key share one cache; every distinct key gets its own, so
    one caller's store names never resolve to another caller's stores.
    """
    key = _cache_key(api_key)
    with _caches_guard:
        cache = _caches.get(key)
        if cache is None:
            from .config import resolve_search_settings

            cache = _caches[key] = InMemoryStoreCache(ttl=resolve_search_settings().cache_ttl)
        return cache


def reset_store_cache() -> None:
    """Drop every process-wide cache. Primarily for testing purposes."""
    with _caches_guard:
        _caches.clear()
