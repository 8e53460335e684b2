"""Pytest fixtures and shared test configuration.

Provides an in-memory fake of the document-chat backend served through
httpx.MockTransport, plus clients and workspaces wired to it.

Fixtures:
    - backend: The fake backend with its documents, histories and failure switches
    - client: BackendClient talking to the fake backend
    - workspace: Fully wired Workspace on top of the client
"""

import asyncio
import re
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest

from docchat.client.backend import BackendClient
from docchat.client.config import ClientConfig
from docchat.state.workspace import Workspace

BASE_URL = "http://backend.test"


class FakeBackend:
    """In-memory stand-in for the backend REST API.

    Attributes:
        fail: Route keys such as ``"POST /chat"`` that answer with ``status_code``.
        gates: One-shot gates; the next response on that route waits for the event.
        requests: Every request received, in order.
    """

    def __init__(self) -> None:
        self.documents: dict[int, dict[str, Any]] = {}
        self.histories: dict[int, list[dict[str, Any]]] = {}
        self.fail: set[str] = set()
        self.status_code = 500
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []
        self.reply = "hello"
        self.total_messages = 0
        self._next_id = 1

    def add_document(
        self,
        name: str,
        file_type: str = "pdf",
        word_count: int = 100,
        history: list[tuple[str, str]] | None = None,
    ) -> int:
        document_id = self._next_id
        self._next_id += 1
        self.documents[document_id] = {
            "id": document_id,
            "document_name": name,
            "file_type": file_type,
            "word_count": word_count,
            "upload_date": f"2024-01-{document_id:02d}T10:00:00",
            "content_length": word_count * 6,
        }
        self.histories[document_id] = [
            {"role": role, "content": content, "timestamp": f"2024-02-01T10:00:{i:02d}"}
            for i, (role, content) in enumerate(history or [])
        ]
        return document_id

    def requests_to(self, key: str) -> list[httpx.Request]:
        return [r for r in self.requests if f"{r.method} {r.url.path}" == key]

    def _stats(self) -> dict[str, Any]:
        latest = max(self.documents.values(), key=lambda d: d["id"], default=None)
        return {
            "total_documents": len(self.documents),
            "total_messages": self.total_messages,
            "total_content_size": sum(d["content_length"] for d in self.documents.values()),
            "most_recent_document": latest["document_name"] if latest else None,
            "most_recent_date": latest["upload_date"] if latest else None,
        }

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        if key in self.fail:
            response = httpx.Response(self.status_code, json={"detail": "Simulated failure"})
        else:
            response = self._route(request, key)
        # The response is computed on arrival and delivered once the gate opens
        gate = self.gates.pop(key, None)
        if gate is not None:
            await gate.wait()
        return response

    def _route(self, request: httpx.Request, key: str) -> httpx.Response:
        path = request.url.path
        if key == "GET /health":
            return httpx.Response(200, json={"status": "healthy"})
        if key == "GET /documents":
            return httpx.Response(200, json=list(self.documents.values()))
        if key == "GET /stats":
            return httpx.Response(200, json=self._stats())
        if key == "POST /documents/upload":
            match = re.search(rb'filename="([^"]+)"', request.content)
            name = match.group(1).decode() if match else "upload"
            document_id = self.add_document(name, file_type=name.rsplit(".", 1)[-1])
            return httpx.Response(
                200,
                json={
                    "document_id": document_id,
                    "document_name": name,
                    "word_count": 100,
                    "character_count": 600,
                },
            )
        if key == "POST /chat":
            self.total_messages += 2
            return httpx.Response(200, json={"response": self.reply})

        if match := re.fullmatch(r"/documents/(\d+)/history", path):
            document_id = int(match.group(1))
            if document_id not in self.documents:
                return httpx.Response(404, json={"detail": "Document not found"})
            if request.method == "GET":
                limit = int(request.url.params.get("limit", "50"))
                return httpx.Response(200, json=self.histories[document_id][-limit:])
            self.histories[document_id] = []
            return httpx.Response(200, json={"message": "Chat history cleared"})

        if match := re.fullmatch(r"/documents/search/(.+)", path):
            term = match.group(1).lower()
            hits = [
                {"id": d["id"], "document_name": d["document_name"]}
                for d in self.documents.values()
                if term in d["document_name"].lower()
            ]
            return httpx.Response(200, json=hits)

        if match := re.fullmatch(r"/documents/(\d+)", path):
            document_id = int(match.group(1))
            if document_id not in self.documents:
                return httpx.Response(404, json={"detail": "Document not found"})
            if request.method == "DELETE":
                del self.documents[document_id]
                self.histories.pop(document_id, None)
                return httpx.Response(200, json={"message": "Document deleted"})
            detail = {**self.documents[document_id], "content": "text", "file_size": 4}
            return httpx.Response(200, json=detail)

        return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
def backend() -> FakeBackend:
    """Return an empty fake backend."""
    return FakeBackend()


@pytest.fixture
def config() -> ClientConfig:
    """Return a client configuration pointing at the fake backend."""
    return ClientConfig(api_base_url=BASE_URL, request_timeout=5.0, history_limit=50)


@pytest.fixture
async def client(backend: FakeBackend, config: ClientConfig) -> AsyncGenerator[BackendClient]:
    """Create a BackendClient routed to the fake backend.

    Yields:
        BackendClient using httpx.MockTransport.
    """
    transport = httpx.MockTransport(backend.handle)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as http_client:
        yield BackendClient(config=config, http_client=http_client)


@pytest.fixture
def workspace(client: BackendClient) -> Workspace:
    """Return a Workspace wired to the fake backend."""
    return Workspace(client)


async def wait_for_request(backend: FakeBackend, key: str, count: int = 1) -> None:
    """Yield to the event loop until ``count`` requests reached ``key``."""
    for _ in range(1000):
        if len(backend.requests_to(key)) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"No request to {key}")
