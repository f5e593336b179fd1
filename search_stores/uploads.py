"""
Document upload and indexing.

Uploads start a long-running indexing operation upstream; the uploader polls
it to completion under a bounded attempt budget.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from .base import FileSource, SearchStoreBackend
from .exceptions import InvalidRequestError, OperationCancelledError, OperationTimeoutError
from .retry import RetryExecutor, Sleep
from .types import AsyncOperation, ChunkingConfig, StoreDescriptor, UploadOptions, UploadOutcome

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

MIME_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".txt": "text/plain",
    ".text": "text/plain",
    ".pdf": "application/pdf",
    ".csv": "text/csv",
    ".json": "application/json",
    ".html": "text/html",
    ".htm": "text/html",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


def guess_mime_type(filename: str) -> str:
    """Map a file name's extension to a MIME type."""
    return MIME_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MIME_TYPE)


def source_name(source: FileSource) -> str:
    """Base name of a path source; ``file`` for raw bytes."""
    if isinstance(source, bytes):
        return "file"
    return os.path.basename(os.fspath(source))


class OperationPoller:
    """
    Polls an async operation until it reports done.

    Each attempt sleeps ``interval`` seconds and then re-fetches the status.
    After ``max_attempts`` fetches without ``done`` the poller gives up with
    ``OperationTimeoutError``, which means "stopped waiting", not "failed".
    """

    def __init__(
        self,
        backend: SearchStoreBackend,
        *,
        interval: float = 1.0,
        max_attempts: int = 300,
        retry: RetryExecutor | None = None,
        sleep: Sleep | None = None,
    ):
        self.backend = backend
        self.interval = interval
        self.max_attempts = max_attempts
        self.retry = retry or RetryExecutor()
        self._sleep = sleep or asyncio.sleep

    async def wait(
        self,
        operation: AsyncOperation,
        *,
        label: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncOperation:
        attempts = 0
        while not operation.done:
            if attempts >= self.max_attempts:
                raise OperationTimeoutError(
                    f"Timed out waiting for '{label or operation.operation_id}' "
                    f"after {attempts} status checks"
                )
            if cancel_event is not None and cancel_event.is_set():
                raise OperationCancelledError(f"Stopped waiting for '{label or operation.operation_id}'")

            await self._sleep(self.interval)
            current = operation
            operation = await self.retry.execute(
                lambda: self.backend.get_operation(current),
                description=f"poll operation {current.operation_id}",
            )
            attempts += 1
            logger.debug(f"Poll {attempts}/{self.max_attempts} for '{label}': done={operation.done}")

        return operation


class DocumentUploader:
    """
    Uploads files into a store and waits for indexing to finish.

    Example:
        uploader = DocumentUploader(backend, poller=OperationPoller(backend))
        operation = await uploader.upload(store, "docs/guide.md")
    """

    def __init__(
        self,
        backend: SearchStoreBackend,
        *,
        retry: RetryExecutor | None = None,
        poller: OperationPoller | None = None,
        default_chunking: ChunkingConfig | None = None,
    ):
        self.backend = backend
        self.retry = retry or RetryExecutor()
        self.poller = poller or OperationPoller(backend, retry=self.retry)
        self.default_chunking = default_chunking or ChunkingConfig()

    async def upload(
        self,
        store: StoreDescriptor,
        source: FileSource,
        options: UploadOptions | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncOperation:
        """
        Upload ``source`` (a path or raw bytes) and poll until indexed.

        Returns:
            The completed operation; check ``succeeded`` for the outcome

        Raises:
            OperationTimeoutError: If indexing did not finish within the poll budget
        """
        options = options or UploadOptions()
        if isinstance(source, str) and not source:
            raise InvalidRequestError("A file path or content is required")

        display_name = options.display_name or source_name(source)
        mime_type = options.mime_type or self._infer_mime_type(source, options.display_name)
        chunking = options.chunking or self.default_chunking

        logger.info(f"Uploading '{display_name}' ({mime_type}) to {store.store_id}")
        operation = await self.retry.execute(
            lambda: self.backend.upload_document(
                store.store_id,
                source,
                display_name=display_name,
                mime_type=mime_type,
                custom_metadata=[entry.to_wire() for entry in options.custom_metadata],
                chunking_config=chunking.to_wire(),
            ),
            description=f"upload '{display_name}'",
        )

        operation = await self.poller.wait(operation, label=display_name, cancel_event=cancel_event)
        if operation.succeeded:
            logger.info(f"Indexed '{display_name}' as {operation.document_id}")
        else:
            logger.warning(f"Indexing '{display_name}' finished with error: {operation.error}")
        return operation

    async def upload_many(
        self,
        store: StoreDescriptor,
        sources: list[FileSource],
        options: UploadOptions | None = None,
        *,
        display_names: list[str] | None = None,
    ) -> list[UploadOutcome]:
        """
        Upload several sources concurrently.

        ``options.display_name`` is ignored; each source is named from
        ``display_names`` when given, else from its own base name. MIME type
        is always inferred per source. Returns one outcome per source, in
        order, carrying either the completed operation or the error that
        stopped it.
        """
        base = options or UploadOptions()
        if display_names is not None and len(display_names) != len(sources):
            raise InvalidRequestError("display_names must match sources one to one")
        names = display_names or [source_name(source) for source in sources]

        async def run(source: FileSource, name: str) -> UploadOutcome:
            per_source = UploadOptions(
                display_name=name,
                custom_metadata=base.custom_metadata,
                chunking=base.chunking,
            )
            try:
                operation = await self.upload(store, source, per_source)
            except Exception as e:
                logger.warning(f"Upload of '{name}' failed: {e}")
                return UploadOutcome(source_name=name, error=e)
            return UploadOutcome(source_name=name, operation=operation)

        return list(await asyncio.gather(*(run(source, name) for source, name in zip(sources, names))))

    @staticmethod
    def _infer_mime_type(source: FileSource, display_name: str | None) -> str:
        if isinstance(source, bytes):
            return guess_mime_type(display_name) if display_name else DEFAULT_MIME_TYPE
        return guess_mime_type(os.fspath(source))
