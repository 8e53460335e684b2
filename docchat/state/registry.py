"""Document registry: the client's view of which documents exist.

All mutations go to the server first. Local state is only replaced by a
full refresh, with one exception: a confirmed delete drops the document
from the snapshot straight away so nothing can keep referring to it.
"""

import asyncio
import logging
import mimetypes
from collections.abc import Callable
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from docchat.client.backend import BackendClient, BackendError
from docchat.client.config import MAX_UPLOAD_BYTES
from docchat.models.schemas import Document, SearchResult, StatsResponse, UploadResponse
from docchat.state.errors import DeleteError, FetchError, UploadError, UploadRejection

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_CONTENT_TYPES = frozenset({"application/pdf", DOCX_MIME, "text/plain"})

_EXTENSION_TYPES = {
    ".pdf": "application/pdf",
    ".docx": DOCX_MIME,
    ".txt": "text/plain",
}


class RegistrySnapshot(BaseModel):
    """Documents and statistics as last fetched from the backend."""

    model_config = ConfigDict(frozen=True)

    documents: tuple[Document, ...] = ()
    stats: StatsResponse = StatsResponse()

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(doc.id for doc in self.documents)


def guess_content_type(filename: str) -> str | None:
    """Guess a MIME type from the file extension."""
    suffix = PurePath(filename).suffix.lower()
    if suffix in _EXTENSION_TYPES:
        return _EXTENSION_TYPES[suffix]
    return mimetypes.guess_type(filename)[0]


def validate_upload(
    filename: str,
    content: bytes,
    content_type: str | None = None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> str:
    """Check a file against the upload whitelist and size limit.

    Args:
        filename: Name of the file to upload.
        content: Raw file bytes.
        content_type: Declared MIME type; guessed from the filename when omitted.
        max_bytes: Largest accepted size.

    Returns:
        The MIME type to send with the upload.

    Raises:
        UploadError: If the type is not accepted or the size is out of range.
    """
    mime = (content_type or guess_content_type(filename) or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_CONTENT_TYPES:
        raise UploadError(
            "Please upload a PDF, DOCX, or TXT file",
            UploadRejection.UNSUPPORTED_TYPE,
        )
    if not content:
        raise UploadError("File is empty", UploadRejection.EMPTY_FILE)
    if len(content) > max_bytes:
        size_mb = len(content) / (1024 * 1024)
        raise UploadError(
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed "
            f"({max_bytes / (1024 * 1024):.0f}MB)",
            UploadRejection.SIZE_EXCEEDED,
        )
    return mime


def _rejection_for_status(status_code: int | None) -> UploadRejection:
    if status_code == 413:
        return UploadRejection.SIZE_EXCEEDED
    if status_code in (400, 415):
        return UploadRejection.UNSUPPORTED_TYPE
    return UploadRejection.SERVER_ERROR


class DocumentRegistry:
    """Holds the document list and statistics.

    Components that reference documents by id subscribe with ``on_removed``
    and are told synchronously when a document stops existing.
    """

    def __init__(self, client: BackendClient, max_upload_bytes: int | None = None) -> None:
        self._client = client
        self._max_upload_bytes = max_upload_bytes or client.config.max_upload_bytes
        self._snapshot = RegistrySnapshot()
        self._removed_listeners: list[Callable[[int], None]] = []
        self._refresh_generation = 0

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._snapshot.documents

    @property
    def stats(self) -> StatsResponse:
        return self._snapshot.stats

    @property
    def ids(self) -> frozenset[int]:
        return self._snapshot.ids

    def get(self, document_id: int) -> Document | None:
        return next((doc for doc in self._snapshot.documents if doc.id == document_id), None)

    def filter_by_name(self, term: str) -> list[Document]:
        """Case-insensitive substring match on document names."""
        needle = term.strip().lower()
        if not needle:
            return list(self._snapshot.documents)
        return [doc for doc in self._snapshot.documents if needle in doc.document_name.lower()]

    def on_removed(self, listener: Callable[[int], None]) -> None:
        self._removed_listeners.append(listener)

    def _notify_removed(self, document_ids: list[int]) -> None:
        for document_id in document_ids:
            for listener in self._removed_listeners:
                listener(document_id)

    async def refresh(self) -> RegistrySnapshot:
        """Fetch documents and statistics and replace the snapshot.

        Returns:
            The new snapshot.

        Raises:
            FetchError: If either request fails; the previous snapshot is kept.
        """
        self._refresh_generation += 1
        generation = self._refresh_generation
        try:
            documents, stats = await asyncio.gather(
                self._client.list_documents(),
                self._client.get_stats(),
            )
        except BackendError as e:
            logger.warning(f"Failed to load documents: {e}")
            raise FetchError("Failed to load data") from e

        if generation != self._refresh_generation:
            logger.debug("Discarding superseded registry refresh")
            return self._snapshot

        previous_ids = self._snapshot.ids
        self._snapshot = RegistrySnapshot(documents=tuple(documents), stats=stats)
        vanished = sorted(previous_ids - self._snapshot.ids)
        logger.info(f"Loaded {len(documents)} documents")
        self._notify_removed(vanished)
        return self._snapshot

    async def invalidate(self) -> RegistrySnapshot:
        """Mark local state stale and refetch it from the backend."""
        return await self.refresh()

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> UploadResponse:
        """Validate and upload a file, then refresh.

        Raises:
            UploadError: If validation fails (nothing is sent) or the server rejects it.
            FetchError: If the upload succeeded but the refresh did not.
        """
        mime = validate_upload(filename, content, content_type, self._max_upload_bytes)
        try:
            result = await self._client.upload_document(filename, content, mime)
        except BackendError as e:
            logger.warning(f"Upload of {filename} rejected: {e}")
            raise UploadError(
                f"Failed to upload document: {e.detail}",
                _rejection_for_status(e.status_code),
            ) from e

        logger.info(f"Uploaded {result.document_name} ({result.word_count} words)")
        await self.invalidate()
        return result

    async def remove(self, document_id: int) -> None:
        """Delete a document on the server, then refresh.

        Removal listeners run before this coroutine yields again, so no
        other task can observe a selection that still holds the id.

        Raises:
            DeleteError: If the server refuses; local state is unchanged.
            FetchError: If the delete succeeded but the refresh did not.
        """
        try:
            await self._client.delete_document(document_id)
        except BackendError as e:
            logger.warning(f"Failed to delete document {document_id}: {e}")
            raise DeleteError("Failed to delete document") from e

        self._snapshot = RegistrySnapshot(
            documents=tuple(doc for doc in self._snapshot.documents if doc.id != document_id),
            stats=self._snapshot.stats,
        )
        logger.info(f"Deleted document {document_id}")
        self._notify_removed([document_id])
        await self.invalidate()

    async def search(self, term: str) -> list[SearchResult]:
        """Server-side content search.

        Raises:
            FetchError: If the search request fails.
        """
        if not term.strip():
            return []
        try:
            return await self._client.search_documents(term.strip())
        except BackendError as e:
            raise FetchError("Failed to search documents") from e
