"""
Search Stores - orchestration for remote retrieval-augmented search stores.

Resolves stores and documents by display name, uploads files and polls their
indexing operations to completion, and runs grounded generation queries,
retrying transient upstream failures and caching store lookups in-process.

Example usage:
    from search_stores import SearchStoreService

    service = SearchStoreService.for_api_key(api_key)

    # Find or create a store
    store = await service.stores.get_or_create('docs-en')

    # Upload a document and wait for indexing
    await service.uploader.upload(store, 'docs/guide.md')

    # Ask a question
    result = await service.queries.ask(store, 'How do I install it?')
    print(result.text)
    for chunk in result.grounding_metadata.cited_chunks:
        print(f"  - {chunk.title}")
"""

from .base import SearchStoreBackend
from .cache import InMemoryStoreCache, StoreCache, get_store_cache, reset_store_cache
from .config import SearchStoreSettings, resolve_search_settings
from .documents import DocumentRegistry
from .exceptions import (
    BackendError,
    BackendNotFoundError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentUploadError,
    ErrorKind,
    FileSearchError,
    InvalidRequestError,
    MissingApiKeyError,
    NotFoundError,
    OperationCancelledError,
    OperationTimeoutError,
    StoreNotFoundError,
    TransientError,
)
from .query import QueryOrchestrator
from .registry import BackendRegistry
from .retry import RetryExecutor
from .service import SearchStoreService
from .stores import StoreResolver
from .types import (
    AsyncOperation,
    ChunkingConfig,
    CitedChunk,
    CustomMetadataEntry,
    DocumentDescriptor,
    GenerationParams,
    GroundingMetadata,
    QueryRequest,
    QueryResult,
    StoreDescriptor,
    UploadOptions,
    UploadOutcome,
)
from .uploads import DocumentUploader, OperationPoller


def _ensure_backends_registered():
    """Lazy import of backends so the SDK loads only when a backend is needed."""
    from .backends import register_backends

    register_backends()


# Register backends lazily when registry is first accessed
BackendRegistry._ensure_backends = _ensure_backends_registered

__all__ = [
    # Core classes
    "SearchStoreService",
    "SearchStoreBackend",
    "BackendRegistry",
    "StoreResolver",
    "DocumentUploader",
    "OperationPoller",
    "DocumentRegistry",
    "QueryOrchestrator",
    "RetryExecutor",
    "StoreCache",
    "InMemoryStoreCache",
    "get_store_cache",
    "reset_store_cache",
    "SearchStoreSettings",
    "resolve_search_settings",
    # Types
    "StoreDescriptor",
    "DocumentDescriptor",
    "CustomMetadataEntry",
    "ChunkingConfig",
    "UploadOptions",
    "UploadOutcome",
    "AsyncOperation",
    "GenerationParams",
    "QueryRequest",
    "QueryResult",
    "GroundingMetadata",
    "CitedChunk",
    # Exceptions
    "ErrorKind",
    "FileSearchError",
    "NotFoundError",
    "StoreNotFoundError",
    "DocumentNotFoundError",
    "TransientError",
    "OperationTimeoutError",
    "OperationCancelledError",
    "InvalidRequestError",
    "MissingApiKeyError",
    "BackendError",
    "DocumentUploadError",
    "ConfigurationError",
    "BackendNotFoundError",
]
