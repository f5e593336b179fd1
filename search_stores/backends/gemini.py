"""
Gemini File Search backend implementation.

Talks to Google Gemini's File Search API through the async client of the
google-genai SDK. One client is built per API key.
"""

import io
import logging
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..base import FileSource, SearchStoreBackend
from ..exceptions import MissingApiKeyError, upstream_error
from ..types import AsyncOperation, DocumentDescriptor, Page, StoreDescriptor

logger = logging.getLogger(__name__)


def _to_int(value) -> int | None:
    # Counters arrive as int64 strings on some API versions
    if value is None or value == "":
        return None
    return int(value)


class GeminiSearchStoreBackend(SearchStoreBackend):
    """
    Search store backend using Google Gemini File Search API.

    Handles:
    - Creating, listing and deleting File Search stores
    - Uploading documents with metadata and chunking configuration
    - Polling upload operations
    - Generating grounded answers with the file_search tool
    """

    def __init__(self, api_key: str | None = None):
        """Initialize the Gemini client for a caller-supplied API key."""
        if not api_key:
            raise MissingApiKeyError()
        self.client = genai.Client(api_key=api_key)

    @property
    def backend_name(self) -> str:
        return "gemini"

    async def _call(self, description: str, awaitable):
        """Await an SDK call, translating upstream API errors."""
        try:
            return await awaitable
        except genai_errors.APIError as e:
            raise upstream_error(
                f"{description}: {e.message or e}", getattr(e, "code", None), self.backend_name
            ) from e

    # -------------------------------------------------------------------------
    # Store Lifecycle
    # -------------------------------------------------------------------------

    async def create_store(self, display_name: str) -> StoreDescriptor:
        store = await self._call(
            "Failed to create File Search store",
            self.client.aio.file_search_stores.create(config={"display_name": display_name}),
        )
        descriptor = self._to_store(store)
        descriptor.display_name = descriptor.display_name or display_name
        return descriptor

    async def list_stores_page(self, page_size: int, page_token: str | None = None) -> Page:
        config: dict[str, Any] = {"page_size": page_size}
        if page_token:
            config["page_token"] = page_token
        pager = await self._call(
            "Failed to list File Search stores",
            self.client.aio.file_search_stores.list(config=config),
        )
        return Page(
            items=[self._to_store(store) for store in pager.page if store.name],
            next_page_token=self._next_page_token(pager),
        )

    async def delete_store(self, store_id: str, *, force: bool = True) -> None:
        await self._call(
            f"Failed to delete File Search store {store_id}",
            self.client.aio.file_search_stores.delete(name=store_id, config={"force": force}),
        )

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

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
        file = io.BytesIO(source) if isinstance(source, bytes) else source
        operation = await self._call(
            f"Failed to upload '{display_name}'",
            self.client.aio.file_search_stores.upload_to_file_search_store(
                file=file,
                file_search_store_name=store_id,
                config={
                    "display_name": display_name,
                    "custom_metadata": custom_metadata,
                    "mime_type": mime_type,
                    "chunking_config": chunking_config,
                },
            ),
        )
        return self._to_operation(operation)

    async def get_operation(self, operation: AsyncOperation) -> AsyncOperation:
        refreshed = await self._call(
            f"Failed to fetch operation {operation.operation_id}",
            self.client.aio.operations.get(operation.raw),
        )
        return self._to_operation(refreshed)

    async def list_documents_page(
        self, store_id: str, page_size: int, page_token: str | None = None
    ) -> Page:
        config: dict[str, Any] = {"page_size": page_size}
        if page_token:
            config["page_token"] = page_token
        pager = await self._call(
            f"Failed to list documents in {store_id}",
            self.client.aio.file_search_stores.documents.list(parent=store_id, config=config),
        )
        return Page(
            items=[self._to_document(doc) for doc in pager.page if doc.name],
            next_page_token=self._next_page_token(pager),
        )

    async def delete_document(self, document_id: str, *, force: bool = True) -> None:
        await self._call(
            f"Failed to delete document {document_id}",
            self.client.aio.file_search_stores.documents.delete(
                name=document_id, config={"force": force}
            ),
        )

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def generate_content(self, model: str, contents: str, config: dict[str, Any]) -> Any:
        params = dict(config)
        params["tools"] = [
            types.Tool(file_search=types.FileSearch(**tool["file_search"]))
            for tool in config.get("tools", [])
        ]
        if config.get("safety_settings"):
            params["safety_settings"] = [
                types.SafetySetting(**setting) for setting in config["safety_settings"]
            ]

        return await self._call(
            "Failed to generate content",
            self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(**params),
            ),
        )

    # -------------------------------------------------------------------------
    # Gemini-specific helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _next_page_token(pager) -> str | None:
        return (getattr(pager, "config", None) or {}).get("page_token") or None

    @staticmethod
    def _to_store(store) -> StoreDescriptor:
        return StoreDescriptor(
            store_id=store.name,
            display_name=store.display_name or "",
            create_time=store.create_time,
            update_time=store.update_time,
            document_count=_to_int(getattr(store, "active_documents_count", None)),
            size_bytes=_to_int(getattr(store, "size_bytes", None)),
        )

    @staticmethod
    def _to_document(doc) -> DocumentDescriptor:
        metadata = None
        if getattr(doc, "custom_metadata", None):
            metadata = {}
            for entry in doc.custom_metadata:
                if entry.string_value is not None:
                    metadata[entry.key] = entry.string_value
                elif entry.numeric_value is not None:
                    metadata[entry.key] = str(entry.numeric_value)
                elif entry.string_list_value is not None:
                    metadata[entry.key] = ", ".join(entry.string_list_value.values or [])

        state = getattr(doc, "state", None)
        return DocumentDescriptor(
            document_id=doc.name,
            display_name=doc.display_name or "",
            create_time=doc.create_time,
            update_time=doc.update_time,
            mime_type=getattr(doc, "mime_type", None),
            size_bytes=_to_int(getattr(doc, "size_bytes", None)),
            metadata=metadata,
            state=getattr(state, "value", state),
        )

    @staticmethod
    def _to_operation(operation) -> AsyncOperation:
        response = getattr(operation, "response", None)
        return AsyncOperation(
            operation_id=operation.name or "",
            done=bool(operation.done),
            document_id=getattr(response, "document_name", None) if response else None,
            result=response,
            error=operation.error or None,
            raw=operation,
        )
