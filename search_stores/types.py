"""
Type definitions for search store orchestration.

These dataclasses describe stores, documents, long-running operations and
query requests/results independently of the upstream SDK, so the resolver,
uploader, registry and query orchestrator can be exercised against any
backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .exceptions import InvalidRequestError

STORE_PREFIX = "fileSearchStores/"


def extract_store_id(name: str) -> str:
    """Strip the resource prefix: ``fileSearchStores/abc`` -> ``abc``."""
    if name.startswith(STORE_PREFIX):
        return name[len(STORE_PREFIX) :]
    return name


def full_store_name(store_id: str) -> str:
    """Add the resource prefix: ``abc`` -> ``fileSearchStores/abc``."""
    if store_id.startswith(STORE_PREFIX):
        return store_id
    return STORE_PREFIX + store_id


@dataclass
class StoreDescriptor:
    """
    A remote search store.

    ``store_id`` is always the full upstream resource name.
    """

    store_id: str
    display_name: str
    create_time: datetime | None = None
    update_time: datetime | None = None
    document_count: int | None = None
    size_bytes: int | None = None

    @property
    def short_id(self) -> str:
        return extract_store_id(self.store_id)


@dataclass
class DocumentDescriptor:
    """A single document indexed inside a store."""

    document_id: str
    display_name: str
    create_time: datetime | None = None
    update_time: datetime | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    metadata: dict[str, str] | None = None
    state: str | None = None


@dataclass
class CustomMetadataEntry:
    """
    One custom metadata value attached to an uploaded document.

    Exactly one of ``string_value``, ``numeric_value`` or
    ``string_list_value`` must be set.
    """

    key: str
    string_value: str | None = None
    numeric_value: float | None = None
    string_list_value: list[str] | None = None

    def __post_init__(self):
        if not self.key:
            raise InvalidRequestError("Custom metadata entries require a key")
        values = [self.string_value, self.numeric_value, self.string_list_value]
        if sum(value is not None for value in values) != 1:
            raise InvalidRequestError(
                f"Custom metadata '{self.key}' must have exactly one of "
                "string_value, numeric_value or string_list_value"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomMetadataEntry:
        """Accept wire entries in either snake_case or camelCase."""
        list_value = data.get("string_list_value", data.get("stringListValue"))
        if isinstance(list_value, dict):
            list_value = list_value.get("values")
        return cls(
            key=data.get("key", ""),
            string_value=data.get("string_value", data.get("stringValue")),
            numeric_value=data.get("numeric_value", data.get("numericValue")),
            string_list_value=list(list_value) if list_value is not None else None,
        )

    def to_wire(self) -> dict[str, Any]:
        if self.string_value is not None:
            return {"key": self.key, "string_value": self.string_value}
        if self.numeric_value is not None:
            return {"key": self.key, "numeric_value": self.numeric_value}
        return {"key": self.key, "string_list_value": {"values": list(self.string_list_value)}}


@dataclass
class ChunkingConfig:
    """Token-bounded, overlapping chunking applied while indexing."""

    max_tokens_per_chunk: int = 500
    max_overlap_tokens: int = 50

    def __post_init__(self):
        if self.max_tokens_per_chunk <= 0:
            raise InvalidRequestError("max_tokens_per_chunk must be positive")
        if self.max_overlap_tokens < 0:
            raise InvalidRequestError("max_overlap_tokens cannot be negative")
        if self.max_overlap_tokens >= self.max_tokens_per_chunk:
            raise InvalidRequestError("max_overlap_tokens must be smaller than max_tokens_per_chunk")

    def to_wire(self) -> dict[str, Any]:
        return {
            "white_space_config": {
                "max_tokens_per_chunk": self.max_tokens_per_chunk,
                "max_overlap_tokens": self.max_overlap_tokens,
            }
        }


@dataclass
class UploadOptions:
    """
    Options for a single upload.

    ``chunking`` left as None means the configured defaults apply.
    """

    display_name: str | None = None
    mime_type: str | None = None
    custom_metadata: list[CustomMetadataEntry] = field(default_factory=list)
    chunking: ChunkingConfig | None = None


@dataclass
class AsyncOperation:
    """
    Handle for a long-running upstream task, observed by polling.

    ``raw`` keeps the backend's own operation object so it can be passed
    back when re-fetching status.
    """

    operation_id: str
    done: bool = False
    document_id: str | None = None
    result: Any | None = None
    error: dict[str, Any] | None = None
    raw: Any | None = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.done and not self.error


@dataclass
class UploadOutcome:
    """Result of one source in a multi-file upload."""

    source_name: str
    operation: AsyncOperation | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.operation is not None and self.operation.succeeded


@dataclass
class Page:
    """One page of a paginated upstream listing."""

    items: list[Any]
    next_page_token: str | None = None


@dataclass
class GenerationParams:
    """Sampling parameters; only the fields that are set get forwarded."""

    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None

    def to_config(self) -> dict[str, Any]:
        values = {
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
            "top_p": self.top_p,
            "top_k": self.top_k,
        }
        return {key: value for key, value in values.items() if value is not None}


@dataclass
class QueryRequest:
    """
    A grounded generation request scoped to one or more stores.

    ``model`` and ``system_instruction`` fall back to the configured
    defaults when left as None. ``metadata_filter`` is forwarded verbatim.
    """

    query_text: str
    store_ids: list[str]
    metadata_filter: str | None = None
    model: str | None = None
    system_instruction: str | None = None
    generation_params: GenerationParams | None = None
    safety_settings: list[dict[str, Any]] | None = None


@dataclass
class CitedChunk:
    """A retrieved chunk that informed the answer."""

    title: str | None = None
    uri: str | None = None
    text: str | None = None
    document_name: str | None = None
    store_name: str | None = None


@dataclass
class GroundingSupport:
    """Links a span of the answer to the chunks that support it."""

    segment_text: str | None = None
    start_index: int | None = None
    end_index: int | None = None
    chunk_indices: list[int] = field(default_factory=list)


@dataclass
class GroundingMetadata:
    cited_chunks: list[CitedChunk] = field(default_factory=list)
    search_queries: list[str] | None = None
    supports: list[GroundingSupport] = field(default_factory=list)


@dataclass
class QueryResult:
    text: str
    grounding_metadata: GroundingMetadata | None = None
