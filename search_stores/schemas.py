"""
Django Ninja schemas for the search store API.
"""

from datetime import datetime
from typing import Any, Optional

from ninja import Field, Schema


class StoreOut(Schema):
    """A search store."""

    store_id: str
    short_id: str
    display_name: str
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
    document_count: Optional[int] = None
    size_bytes: Optional[int] = None


class StoreListResponse(Schema):
    stores: list[StoreOut]
    count: int


class StoreCreateRequest(Schema):
    display_name: str = Field(..., min_length=1)


class DocumentOut(Schema):
    """A document inside a store."""

    document_id: str
    display_name: str
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    metadata: Optional[dict[str, str]] = None
    state: Optional[str] = None


class DocumentListResponse(Schema):
    documents: list[DocumentOut]
    count: int


class UploadResultOut(Schema):
    file_name: str
    success: bool
    document_id: Optional[str] = None
    error: Optional[str] = None


class UploadResponse(Schema):
    results: list[UploadResultOut]
    success_count: int
    fail_count: int


class OperationOut(Schema):
    operation_id: str
    done: bool
    document_id: Optional[str] = None


class GenerationConfigIn(Schema):
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(None, gt=0)
    top_p: Optional[float] = Field(None, ge=0, le=1)
    top_k: Optional[int] = Field(None, gt=0)


class QueryIn(Schema):
    """Request to run a grounded query."""

    query: str
    metadata_filter: Optional[str] = None
    model: Optional[str] = None
    system_instruction: Optional[str] = None
    generation_config: Optional[GenerationConfigIn] = None
    safety_settings: Optional[list[dict[str, Any]]] = None


class CitedChunkOut(Schema):
    title: Optional[str] = None
    uri: Optional[str] = None
    text: Optional[str] = None
    document_name: Optional[str] = None
    store_name: Optional[str] = None


class GroundingSupportOut(Schema):
    segment_text: Optional[str] = None
    start_index: Optional[int] = None
    end_index: Optional[int] = None
    chunk_indices: list[int] = []


class GroundingMetadataOut(Schema):
    cited_chunks: list[CitedChunkOut] = []
    search_queries: Optional[list[str]] = None
    supports: list[GroundingSupportOut] = []


class QueryOut(Schema):
    text: str
    grounding_metadata: Optional[GroundingMetadataOut] = None


class MessageResponse(Schema):
    message: str
