"""Async HTTP client for the document-chat backend.

One method per backend endpoint. Transport failures and non-success
statuses are raised as BackendError; the state layer maps them onto the
user-facing error kinds.
"""

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from docchat.client.config import ClientConfig, get_client_config
from docchat.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Document,
    DocumentDetail,
    MessageAck,
    SearchResult,
    StatsResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

_DOCUMENT_LIST = TypeAdapter(list[Document])
_MESSAGE_LIST = TypeAdapter(list[ChatMessage])
_SEARCH_LIST = TypeAdapter(list[SearchResult])


class BackendError(Exception):
    """Raised when a backend request fails.

    Attributes:
        status_code: HTTP status of the response, None for transport failures.
        detail: Server-provided error detail or a description of the failure.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail if status_code is None else f"HTTP {status_code}: {detail}")
        self.detail = detail
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> str:
    """Pull FastAPI's ``detail`` field out of an error response if present."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return response.text or response.reason_phrase


class BackendClient:
    """Thin async wrapper around the backend REST API.

    Owns an httpx.AsyncClient unless one is injected (tests pass a client
    built on httpx.MockTransport).
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or get_client_config()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.api_base_url,
            timeout=self._config.request_timeout,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            BackendError: On connection failure, non-2xx status or invalid JSON.
        """
        try:
            response = await self._http.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.warning(f"{method} {url} failed with HTTP {e.response.status_code}: {detail}")
            raise BackendError(detail, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise BackendError(f"Connection failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from {url}") from e

    def _parse(self, adapter_or_model: Any, data: Any, url: str) -> Any:
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(data)
            return adapter_or_model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Unexpected response shape from {url}: {e}")
            raise BackendError(f"Unexpected response from {url}") from e

    async def get_health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def list_documents(self) -> list[Document]:
        data = await self._request("GET", "/documents")
        return self._parse(_DOCUMENT_LIST, data, "/documents")

    async def get_document(self, document_id: int) -> DocumentDetail:
        url = f"/documents/{document_id}"
        return self._parse(DocumentDetail, await self._request("GET", url), url)

    async def search_documents(self, term: str) -> list[SearchResult]:
        url = f"/documents/search/{quote(term, safe='')}"
        return self._parse(_SEARCH_LIST, await self._request("GET", url), url)

    async def get_stats(self) -> StatsResponse:
        return self._parse(StatsResponse, await self._request("GET", "/stats"), "/stats")

    async def upload_document(
        self,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> UploadResponse:
        """Upload a document as multipart/form-data.

        Args:
            filename: Original filename, sent as the part's filename.
            content: Raw file bytes.
            content_type: MIME type of the file.

        Returns:
            UploadResponse describing the stored document.
        """
        data = await self._request(
            "POST",
            "/documents/upload",
            files={"file": (filename, content, content_type)},
        )
        return self._parse(UploadResponse, data, "/documents/upload")

    async def delete_document(self, document_id: int) -> MessageAck:
        url = f"/documents/{document_id}"
        return self._parse(MessageAck, await self._request("DELETE", url), url)

    async def get_history(self, document_id: int, limit: int = 50) -> list[ChatMessage]:
        """Fetch up to ``limit`` persisted messages, oldest first."""
        url = f"/documents/{document_id}/history"
        data = await self._request("GET", url, params={"limit": limit})
        return self._parse(_MESSAGE_LIST, data, url)

    async def clear_history(self, document_id: int) -> MessageAck:
        url = f"/documents/{document_id}/history"
        return self._parse(MessageAck, await self._request("DELETE", url), url)

    async def send_chat(self, request: ChatRequest) -> ChatResponse:
        data = await self._request("POST", "/chat", json=request.to_payload())
        return self._parse(ChatResponse, data, "/chat")
