"""
Abstract base class for search store backends.

A backend is the boundary to the upstream indexing/generation service.
It performs exactly one remote call per method and translates upstream
failures into ``FileSearchError`` subclasses; retries, caching, polling and
name resolution live in the orchestration layer above it.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any

from .types import AsyncOperation, DocumentDescriptor, Page, StoreDescriptor

FileSource = str | os.PathLike | bytes


class SearchStoreBackend(ABC):
    """
    Abstract interface for search store backends.

    Implementations must provide methods for:
    - Store lifecycle (create, list one page, delete)
    - Document operations (upload-and-index, list one page, delete)
    - Operation status polling
    - Grounded generation

    Example usage:
        backend = BackendRegistry.create(api_key="...")
        store = await backend.create_store("docs-en")
        page = await backend.list_documents_page(store.store_id, page_size=20)
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """
        Return the backend identifier.

        Returns:
            str: Unique identifier for this backend (e.g., 'gemini')
        """
        pass

    # -------------------------------------------------------------------------
    # Store Lifecycle
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_store(self, display_name: str) -> StoreDescriptor:
        """
        Create a new store.

        Timestamps the upstream omits are left as None.
        """
        pass

    @abstractmethod
    async def list_stores_page(self, page_size: int, page_token: str | None = None) -> Page:
        """
        Fetch one page of stores.

        Returns:
            Page of StoreDescriptor with the token for the next page, if any
        """
        pass

    @abstractmethod
    async def delete_store(self, store_id: str, *, force: bool = True) -> None:
        """Delete a store and, with ``force``, every document in it."""
        pass

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def upload_document(
        self,
        store_id: str,
        source: FileSource,
        *,
        display_name: str,
        mime_type: str,
        custom_metadata: list[dict[str, Any]],
        chunking_config: dict[str, Any],
    ) -> AsyncOperation:
        """
        Start uploading and indexing a document.

        Args:
            store_id: Full resource name of the target store
            source: File path or raw bytes
            display_name: Name the document will be listed under
            mime_type: MIME type of the content
            custom_metadata: Wire-format metadata entries
            chunking_config: Wire-format chunking configuration

        Returns:
            AsyncOperation handle, usually not yet done
        """
        pass

    @abstractmethod
    async def get_operation(self, operation: AsyncOperation) -> AsyncOperation:
        """Re-fetch the status of a long-running operation."""
        pass

    @abstractmethod
    async def list_documents_page(
        self, store_id: str, page_size: int, page_token: str | None = None
    ) -> Page:
        """
        Fetch one page of documents in a store.

        Returns:
            Page of DocumentDescriptor; display names the upstream omits are
            left empty
        """
        pass

    @abstractmethod
    async def delete_document(self, document_id: str, *, force: bool = True) -> None:
        """Delete a document and its chunks."""
        pass

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    @abstractmethod
    async def generate_content(self, model: str, contents: str, config: dict[str, Any]) -> Any:
        """
        Run a generation call.

        ``config`` holds ``tools``, ``system_instruction``, sampling
        parameters and ``safety_settings`` as plain dicts. The raw response
        is returned; it must expose ``text`` and ``candidates``.
        """
        pass
