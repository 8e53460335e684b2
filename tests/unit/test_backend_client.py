"""Unit tests for BackendClient request building and error mapping."""

import json

import httpx
import pytest
import pytest_check as check

from docchat.client.backend import BackendClient, BackendError
from docchat.client.config import ClientConfig
from docchat.models.schemas import ChatRequest, FileType
from tests.conftest import FakeBackend


class TestRequests:
    """Tests for the happy paths against the fake backend."""

    async def test_list_documents_parses_models(
        self, backend: FakeBackend, client: BackendClient
    ) -> None:
        """Documents are validated into Document models."""
        backend.add_document("a.pdf")
        backend.add_document("b.weird", file_type="WEIRD")

        documents = await client.list_documents()

        check.equal([d.file_type for d in documents], [FileType.PDF, FileType.OTHER])
        check.equal(documents[0].upload_date.day, 1)

    async def test_get_document_detail(self, backend: FakeBackend, client: BackendClient) -> None:
        """Document detail includes content."""
        doc = backend.add_document("a.txt", file_type="txt")

        detail = await client.get_document(doc)

        check.equal(detail.content, "text")
        check.equal(detail.file_type, FileType.TXT)

    async def test_upload_sends_multipart_file(
        self, backend: FakeBackend, client: BackendClient
    ) -> None:
        """Upload posts the file under the 'file' form field."""
        result = await client.upload_document("notes.txt", b"hello", "text/plain")

        request = backend.requests_to("POST /documents/upload")[0]
        check.is_in(b'name="file"', request.content)
        check.is_in(b"Content-Type: text/plain", request.content)
        check.equal(result.document_name, "notes.txt")

    async def test_send_chat_posts_payload(self, backend: FakeBackend, client: BackendClient) -> None:
        """Chat payload omits the unused scope key."""
        response = await client.send_chat(ChatRequest(message=" hi ", document_ids=[1, 2]))

        body = json.loads(backend.requests_to("POST /chat")[0].content)
        check.equal(body, {"message": "hi", "document_ids": [1, 2]})
        check.equal(response.response, "hello")

    async def test_search_term_is_url_encoded(
        self, backend: FakeBackend, client: BackendClient
    ) -> None:
        """Terms with slashes and spaces stay a single path segment."""
        await client.search_documents("a/b c")

        request = backend.requests[0]
        assert request.url.raw_path == b"/documents/search/a%2Fb%20c"

    async def test_health(self, client: BackendClient) -> None:
        """Health returns the raw JSON body."""
        assert await client.get_health() == {"status": "healthy"}


class TestErrors:
    """Tests for BackendError mapping."""

    async def test_http_error_carries_status_and_detail(
        self, backend: FakeBackend, client: BackendClient
    ) -> None:
        """FastAPI-style detail is surfaced."""
        with pytest.raises(BackendError) as exc_info:
            await client.delete_document(42)

        check.equal(exc_info.value.status_code, 404)
        check.equal(exc_info.value.detail, "Document not found")

    async def test_connection_error(self, config: ClientConfig) -> None:
        """Transport failures have no status code."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(refuse), base_url=config.api_base_url
        ) as http_client:
            client = BackendClient(config=config, http_client=http_client)
            with pytest.raises(BackendError) as exc_info:
                await client.get_stats()

        check.is_none(exc_info.value.status_code)
        check.is_in("Connection failed", exc_info.value.detail)

    async def test_unexpected_shape_is_backend_error(self, config: ClientConfig) -> None:
        """A body that does not match the schema is treated as a failure."""

        def bad(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(bad), base_url=config.api_base_url
        ) as http_client:
            client = BackendClient(config=config, http_client=http_client)
            with pytest.raises(BackendError, match="Unexpected response"):
                await client.list_documents()

    async def test_non_json_body_is_backend_error(self, config: ClientConfig) -> None:
        """Plain-text bodies on success are rejected."""

        def text(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy</html>")

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(text), base_url=config.api_base_url
        ) as http_client:
            client = BackendClient(config=config, http_client=http_client)
            with pytest.raises(BackendError, match="Invalid JSON"):
                await client.get_stats()


class TestLifecycle:
    """Tests for client ownership."""

    async def test_injected_client_is_not_closed(self, config: ClientConfig) -> None:
        """aclose() leaves an injected httpx client open."""
        http_client = httpx.AsyncClient()
        async with BackendClient(config=config, http_client=http_client):
            pass

        check.is_false(http_client.is_closed)
        await http_client.aclose()

    async def test_owned_client_uses_config(self, config: ClientConfig) -> None:
        """A client built from config targets the configured base URL."""
        client = BackendClient(config=config)

        check.equal(client._http.base_url.host, "backend.test")
        await client.aclose()
        check.is_true(client._http.is_closed)
