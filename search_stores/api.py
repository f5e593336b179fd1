"""
Django Ninja API for search store endpoints.

Every endpoint takes the caller's upstream API key from the ``x-api-key``
header and translates ``FileSearchError`` kinds and upstream status codes
into HTTP responses.
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import asdict
from typing import List, Optional

from asgiref.sync import sync_to_async
from ninja import File, Form, Router
from ninja.errors import HttpError
from ninja.files import UploadedFile

from .exceptions import ErrorKind, FileSearchError
from .schemas import (
    DocumentListResponse,
    DocumentOut,
    MessageResponse,
    OperationOut,
    QueryIn,
    QueryOut,
    StoreCreateRequest,
    StoreListResponse,
    StoreOut,
    UploadResponse,
)
from .service import SearchStoreService
from .types import ChunkingConfig, CustomMetadataEntry, GenerationParams, UploadOptions

logger = logging.getLogger(__name__)

router = Router()

API_KEY_HEADER = "x-api-key"

# Upstream statuses passed through unchanged, with the message shown for them
STATUS_MESSAGES = {
    400: None,
    401: "The API key is invalid.",
    403: "The API key lacks permission or File Search is not enabled for it.",
    404: None,
    429: "API rate limit exceeded. Please try again shortly.",
    500: None,
    503: "The model is currently overloaded. Please try again shortly.",
}

KIND_STATUSES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.TRANSIENT: 503,
    ErrorKind.TIMEOUT: 504,
}


def http_status_for(error: FileSearchError) -> int:
    """Map an orchestration error to the HTTP status returned to clients."""
    if error.status_code in STATUS_MESSAGES:
        return error.status_code
    return KIND_STATUSES.get(error.kind, 500)


def to_http_error(error: FileSearchError) -> HttpError:
    status = http_status_for(error)
    return HttpError(status, STATUS_MESSAGES.get(status) or error.message)


@contextmanager
def translate_errors(action: str):
    try:
        yield
    except FileSearchError as e:
        logger.warning(f"{action} failed ({e.kind.value}, status={e.status_code}): {e}")
        raise to_http_error(e) from e


def _service(request) -> SearchStoreService:
    api_key = request.headers.get(API_KEY_HEADER)
    if not api_key:
        raise HttpError(401, f"An API key is required. Send it in the {API_KEY_HEADER} header.")
    with translate_errors("Backend setup"):
        return SearchStoreService.for_api_key(api_key)


def _store_out(store) -> dict:
    return {**asdict(store), "short_id": store.short_id}


# -------------------------------------------------------------------------
# Stores
# -------------------------------------------------------------------------


@router.get("/stores", response=StoreListResponse)
async def list_stores(request):
    """List every store visible to the API key."""
    service = _service(request)
    with translate_errors("List stores"):
        stores = await service.stores.list_all()
    return {"stores": [_store_out(store) for store in stores], "count": len(stores)}


@router.post("/stores", response=StoreOut)
async def create_store(request, payload: StoreCreateRequest):
    """Create a store."""
    service = _service(request)
    with translate_errors("Create store"):
        store = await service.stores.create(payload.display_name.strip())
    return _store_out(store)


@router.get("/stores/{display_name}", response=StoreOut)
async def get_store(request, display_name: str):
    service = _service(request)
    with translate_errors("Get store"):
        store = await service.stores.find_by_display_name(display_name)
    return _store_out(store)


@router.delete("/stores/{display_name}", response=MessageResponse)
async def delete_store(request, display_name: str):
    """Delete a store and every document in it."""
    service = _service(request)
    with translate_errors("Delete store"):
        store = await service.stores.find_by_display_name(display_name)
        await service.stores.delete(store)
    return {"message": f"Store '{display_name}' deleted"}


# -------------------------------------------------------------------------
# Documents
# -------------------------------------------------------------------------


@router.get("/stores/{display_name}/documents", response=DocumentListResponse)
async def list_documents(request, display_name: str):
    service = _service(request)
    with translate_errors("List documents"):
        store = await service.stores.find_by_display_name(display_name)
        documents = await service.documents.list(store)
    return {"documents": [asdict(doc) for doc in documents], "count": len(documents)}


@router.get("/stores/{display_name}/documents/{document_name}", response=DocumentOut)
async def get_document(request, display_name: str, document_name: str):
    service = _service(request)
    with translate_errors("Get document"):
        store = await service.stores.find_by_display_name(display_name)
        document = await service.documents.find_by_display_name(store, document_name)
    return asdict(document)


@router.delete("/stores/{display_name}/documents/{document_name}", response=MessageResponse)
async def delete_document(request, display_name: str, document_name: str):
    service = _service(request)
    with translate_errors("Delete document"):
        store = await service.stores.find_by_display_name(display_name)
        document = await service.documents.find_by_display_name(store, document_name)
        await service.documents.delete(document)
    return {"message": f"Document '{document_name}' deleted"}


@router.post("/stores/{display_name}/documents/{document_name}/replace", response=OperationOut)
async def replace_document(
    request,
    display_name: str,
    document_name: str,
    file: UploadedFile = File(...),
):
    """Replace a document's content, keeping its display name."""
    service = _service(request)
    content = await sync_to_async(file.read)()
    with translate_errors("Replace document"):
        store = await service.stores.find_by_display_name(display_name)
        operation = await service.documents.update(store, document_name, content)
    return {
        "operation_id": operation.operation_id,
        "done": operation.done,
        "document_id": operation.document_id,
    }


def _upload_options(
    custom_metadata: Optional[str],
    max_tokens_per_chunk: Optional[int],
    max_overlap_tokens: Optional[int],
    defaults: ChunkingConfig,
) -> UploadOptions:
    entries = []
    if custom_metadata:
        try:
            raw_entries = json.loads(custom_metadata)
        except json.JSONDecodeError as e:
            raise HttpError(400, "custom_metadata must be valid JSON") from e
        if not isinstance(raw_entries, list):
            raise HttpError(400, "custom_metadata must be a JSON array")
        with translate_errors("Parse custom metadata"):
            entries = [CustomMetadataEntry.from_dict(entry) for entry in raw_entries]

    chunking = None
    if max_tokens_per_chunk is not None or max_overlap_tokens is not None:
        with translate_errors("Build chunking config"):
            chunking = ChunkingConfig(
                max_tokens_per_chunk=max_tokens_per_chunk or defaults.max_tokens_per_chunk,
                max_overlap_tokens=(
                    defaults.max_overlap_tokens if max_overlap_tokens is None else max_overlap_tokens
                ),
            )
    return UploadOptions(custom_metadata=entries, chunking=chunking)


@router.post("/stores/{display_name}/upload", response=UploadResponse)
async def upload_documents(
    request,
    display_name: str,
    files: List[UploadedFile] = File(...),
    custom_metadata: Optional[str] = Form(None),
    max_tokens_per_chunk: Optional[int] = Form(None, ge=100, le=2000),
    max_overlap_tokens: Optional[int] = Form(None, ge=0, le=500),
):
    """
    Upload files into a store and wait for each to be indexed.

    Files are processed independently; one failing does not stop the others.
    """
    service = _service(request)
    if not files:
        raise HttpError(400, "No files to upload")

    options = _upload_options(
        custom_metadata, max_tokens_per_chunk, max_overlap_tokens, service.uploader.default_chunking
    )
    contents = [await sync_to_async(upload.read)() for upload in files]

    with translate_errors("Upload documents"):
        store = await service.stores.find_by_display_name(display_name)
        outcomes = await service.uploader.upload_many(
            store, contents, options, display_names=[upload.name for upload in files]
        )

    results = []
    for outcome in outcomes:
        error = None
        if outcome.error is not None:
            error = str(outcome.error)
        elif not outcome.succeeded:
            error = f"Indexing failed: {outcome.operation.error}"
        results.append(
            {
                "file_name": outcome.source_name,
                "success": outcome.succeeded,
                "document_id": outcome.operation.document_id if outcome.operation else None,
                "error": error,
            }
        )
    success_count = sum(1 for result in results if result["success"])
    return {
        "results": results,
        "success_count": success_count,
        "fail_count": len(results) - success_count,
    }


# -------------------------------------------------------------------------
# Query
# -------------------------------------------------------------------------


async def _run_query(service: SearchStoreService, store, payload: QueryIn) -> dict:
    params = None
    if payload.generation_config:
        params = GenerationParams(**payload.generation_config.model_dump())

    with translate_errors("Query store"):
        result = await service.queries.ask(
            store,
            payload.query.strip(),
            metadata_filter=payload.metadata_filter or None,
            model=payload.model,
            system_instruction=payload.system_instruction,
            generation_params=params,
            safety_settings=payload.safety_settings,
        )
    return asdict(result)


def _require_query(payload: QueryIn) -> None:
    if not payload.query or not payload.query.strip():
        raise HttpError(400, "query is required")


@router.post("/stores/{display_name}/query", response=QueryOut)
async def query_store(request, display_name: str, payload: QueryIn):
    """Answer a question grounded in the store's documents."""
    service = _service(request)
    _require_query(payload)
    with translate_errors("Query store"):
        store = await service.stores.find_by_display_name(display_name)
    return await _run_query(service, store, payload)


@router.post("/stores/by-id/{store_id}/query", response=QueryOut)
async def query_store_by_id(request, store_id: str, payload: QueryIn):
    """Same as ``query_store`` for a store addressed by its short id; no lookup is made."""
    service = _service(request)
    _require_query(payload)
    with translate_errors("Query store"):
        store = service.stores.get_by_id(store_id)
    return await _run_query(service, store, payload)
