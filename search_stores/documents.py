"""
Document registry: find, list, delete and replace documents in a store.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import replace

from django.utils import timezone

from .base import FileSource, SearchStoreBackend
from .exceptions import DocumentNotFoundError, DocumentUploadError, InvalidRequestError
from .retry import RetryExecutor
from .types import AsyncOperation, DocumentDescriptor, StoreDescriptor, UploadOptions
from .uploads import DocumentUploader

logger = logging.getLogger(__name__)


def _normalize(document: DocumentDescriptor) -> DocumentDescriptor:
    now = timezone.now()
    return replace(
        document,
        display_name=document.display_name or document.document_id.rsplit("/", 1)[-1],
        create_time=document.create_time or now,
        update_time=document.update_time or now,
    )


class DocumentRegistry:
    """Looks up and manages documents inside a store."""

    def __init__(
        self,
        backend: SearchStoreBackend,
        uploader: DocumentUploader,
        *,
        retry: RetryExecutor | None = None,
        page_size: int = 20,
    ):
        self.backend = backend
        self.uploader = uploader
        self.retry = retry or RetryExecutor()
        self.page_size = page_size

    async def find_by_display_name(self, store: StoreDescriptor, display_name: str) -> DocumentDescriptor:
        """
        Find a document in ``store`` by display name.

        Raises:
            DocumentNotFoundError: If no document carries that display name
        """
        if not display_name:
            raise InvalidRequestError("A document display name is required")

        async for document in self._iter_remote(store):
            if document.display_name == display_name:
                return _normalize(document)

        raise DocumentNotFoundError(
            f"No document named '{display_name}' in store '{store.display_name}'",
            status_code=404,
        )

    async def list(self, store: StoreDescriptor) -> list[DocumentDescriptor]:
        """
        List every document in ``store``.

        Documents without a display name are labelled with the last segment
        of their resource name.
        """
        documents = [_normalize(document) async for document in self._iter_remote(store)]
        logger.info(f"Listed {len(documents)} document(s) in '{store.display_name}'")
        return documents

    async def delete(self, document: DocumentDescriptor) -> None:
        """Force-delete a document."""
        logger.info(f"Deleting document '{document.display_name}' ({document.document_id})")
        await self.retry.execute(
            lambda: self.backend.delete_document(document.document_id, force=True),
            description=f"delete document '{document.display_name}'",
        )

    async def update(
        self,
        store: StoreDescriptor,
        display_name: str,
        new_content: FileSource,
        options: UploadOptions | None = None,
    ) -> AsyncOperation:
        """
        Replace the document(s) named ``display_name`` with new content.

        The new content is uploaded and indexed first; only after indexing
        succeeds are the previous documents with that name deleted. A failed
        upload leaves the old documents in place. Between the two steps the
        store briefly holds both versions.

        Raises:
            DocumentUploadError: If indexing the new content failed
        """
        if not display_name:
            raise InvalidRequestError("A document display name is required")

        previous = [
            document
            async for document in self._iter_remote(store)
            if document.display_name == display_name
        ]
        if not previous:
            logger.info(f"No existing '{display_name}' in '{store.display_name}'; uploading fresh")

        upload_options = replace(options or UploadOptions(), display_name=display_name)
        operation = await self.uploader.upload(store, new_content, upload_options)
        if not operation.succeeded:
            raise DocumentUploadError(
                f"Indexing new version of '{display_name}' failed: {operation.error}",
                self.backend.backend_name,
            )

        for document in previous:
            if document.document_id == operation.document_id:
                continue
            await self.delete(document)

        logger.info(f"Replaced '{display_name}' with {operation.document_id}")
        return operation

    async def _iter_remote(self, store: StoreDescriptor) -> AsyncIterator[DocumentDescriptor]:
        page_token = None
        while True:
            page = await self.retry.execute(
                lambda: self.backend.list_documents_page(store.store_id, self.page_size, page_token),
                description=f"list documents in '{store.display_name}'",
            )
            for document in page.items:
                yield document
            page_token = page.next_page_token
            if not page_token:
                return
