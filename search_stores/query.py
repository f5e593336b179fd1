"""
Grounded generation over one or more search stores.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import SearchStoreBackend
from .config import DEFAULT_SYSTEM_INSTRUCTION
from .exceptions import InvalidRequestError
from .retry import RetryExecutor
from .types import (
    CitedChunk,
    GenerationParams,
    GroundingMetadata,
    GroundingSupport,
    QueryRequest,
    QueryResult,
    StoreDescriptor,
    full_store_name,
)

logger = logging.getLogger(__name__)


def build_tool_config(store_ids: list[str], metadata_filter: str | None = None) -> dict[str, Any]:
    """
    Build the file_search tool scoped to ``store_ids``.

    ``metadata_filter`` is attached verbatim; its grammar belongs to the
    upstream service.
    """
    file_search: dict[str, Any] = {
        "file_search_store_names": [full_store_name(store_id) for store_id in store_ids]
    }
    if metadata_filter:
        file_search["metadata_filter"] = metadata_filter
    return {"file_search": file_search}


class QueryOrchestrator:
    """
    Builds retrieval-scoped generation requests and parses citations.

    Example:
        orchestrator = QueryOrchestrator(backend)
        result = await orchestrator.ask(store, "Summarize the uploaded docs")
        print(result.text)
    """

    def __init__(
        self,
        backend: SearchStoreBackend,
        *,
        retry: RetryExecutor | None = None,
        default_model: str = "gemini-2.5-flash",
        default_system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION,
    ):
        self.backend = backend
        self.retry = retry or RetryExecutor()
        self.default_model = default_model
        self.default_system_instruction = default_system_instruction

    def build_config(self, request: QueryRequest) -> dict[str, Any]:
        """Assemble the generation config for ``request``."""
        config: dict[str, Any] = {
            "tools": [build_tool_config(request.store_ids, request.metadata_filter)],
            "system_instruction": request.system_instruction or self.default_system_instruction,
        }
        if request.generation_params:
            config.update(request.generation_params.to_config())
        if request.safety_settings:
            config["safety_settings"] = list(request.safety_settings)
        return config

    async def query(self, request: QueryRequest) -> QueryResult:
        if not request.query_text or not request.query_text.strip():
            raise InvalidRequestError("Query text is required")
        if not request.store_ids:
            raise InvalidRequestError("At least one store is required")

        model = request.model or self.default_model
        config = self.build_config(request)
        logger.info(f"Querying {len(request.store_ids)} store(s) with model {model}")

        response = await self.retry.execute(
            lambda: self.backend.generate_content(model, request.query_text, config),
            description="generate content",
        )

        text = getattr(response, "text", None) or ""
        grounding = self._extract_grounding(response)
        if grounding is not None:
            logger.info(f"Answer cites {len(grounding.cited_chunks)} chunk(s)")
        return QueryResult(text=text, grounding_metadata=grounding)

    async def ask(
        self,
        stores: StoreDescriptor | list[StoreDescriptor],
        query_text: str,
        *,
        metadata_filter: str | None = None,
        model: str | None = None,
        system_instruction: str | None = None,
        generation_params: GenerationParams | None = None,
        safety_settings: list[dict[str, Any]] | None = None,
    ) -> QueryResult:
        """Keyword convenience around ``query``."""
        if isinstance(stores, StoreDescriptor):
            stores = [stores]
        return await self.query(
            QueryRequest(
                query_text=query_text,
                store_ids=[store.store_id for store in stores],
                metadata_filter=metadata_filter,
                model=model,
                system_instruction=system_instruction,
                generation_params=generation_params,
                safety_settings=safety_settings,
            )
        )

    def _extract_grounding(self, response) -> GroundingMetadata | None:
        """Extract citations from the primary candidate's grounding metadata."""
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return None
        grounding = getattr(candidates[0], "grounding_metadata", None)
        if grounding is None:
            return None

        chunks = []
        for chunk in getattr(grounding, "grounding_chunks", None) or []:
            ctx = getattr(chunk, "retrieved_context", None)
            if ctx is None:
                continue
            chunks.append(
                CitedChunk(
                    title=getattr(ctx, "title", None),
                    uri=getattr(ctx, "uri", None),
                    text=getattr(ctx, "text", None),
                    document_name=getattr(ctx, "document_name", None),
                    store_name=getattr(ctx, "file_search_store", None),
                )
            )

        supports = []
        for support in getattr(grounding, "grounding_supports", None) or []:
            segment = getattr(support, "segment", None)
            supports.append(
                GroundingSupport(
                    segment_text=getattr(segment, "text", None),
                    start_index=getattr(segment, "start_index", None),
                    end_index=getattr(segment, "end_index", None),
                    chunk_indices=list(getattr(support, "grounding_chunk_indices", None) or []),
                )
            )

        queries = getattr(grounding, "retrieval_queries", None) or getattr(
            grounding, "web_search_queries", None
        )
        return GroundingMetadata(
            cited_chunks=chunks,
            search_queries=list(queries) if queries else None,
            supports=supports,
        )
