"""Pydantic models for the backend request/response contract.

Models:
    - Document / DocumentDetail: Stored documents
    - ChatMessage: Individual message in a document conversation
    - ChatRequest / ChatResponse: Chat exchange payloads
    - UploadResponse: Result of a document upload
    - StatsResponse: Aggregate collection statistics
"""

from docchat.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Document,
    DocumentDetail,
    FileType,
    MessageAck,
    MessageRole,
    SearchResult,
    StatsResponse,
    UploadResponse,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Document",
    "DocumentDetail",
    "FileType",
    "MessageAck",
    "MessageRole",
    "SearchResult",
    "StatsResponse",
    "UploadResponse",
]
