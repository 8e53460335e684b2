"""Pydantic models for the document-chat backend contract.

Every JSON payload the client sends or receives goes through one of these
models, so malformed server responses fail early with a ValidationError.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FileType(str, Enum):
    """Document file types known to the backend."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> "FileType":
        if isinstance(value, str):
            lowered = value.strip().lower().lstrip(".")
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.OTHER


class MessageRole(str, Enum):
    """Speaker of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class Document(BaseModel):
    """A document known to the backend.

    Attributes:
        id: Server-assigned identifier.
        document_name: Display name (usually the uploaded filename).
        file_type: One of pdf, docx, txt or other.
        word_count: Number of words extracted on upload.
        upload_date: When the document was uploaded.
        last_accessed: When the document was last used in a chat, if ever.
        content_length: Character count of the extracted text, if reported.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    document_name: str
    file_type: FileType = FileType.OTHER
    word_count: int = Field(default=0, ge=0)
    upload_date: datetime
    last_accessed: datetime | None = None
    content_length: int | None = None

    @field_validator("file_type", mode="before")
    @classmethod
    def coerce_file_type(cls, v: object) -> FileType:
        """Map unknown or differently cased types onto FileType."""
        if isinstance(v, FileType):
            return v
        return FileType(v) if isinstance(v, str) else FileType.OTHER


class DocumentDetail(Document):
    """A document including its extracted text."""

    content: str
    file_size: int = Field(ge=0)


class ChatMessage(BaseModel):
    """A single message in a document conversation.

    Attributes:
        role: Who wrote the message.
        content: The message text.
        timestamp: Server time for persisted messages, client time otherwise.
    """

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
    timestamp: datetime


class ChatRequest(BaseModel):
    """Request payload for POST /chat.

    Exactly one of ``document_id`` (single-document chat) and
    ``document_ids`` (multi-document chat) is set.
    """

    message: str = Field(..., min_length=1)
    document_id: int | None = None
    document_ids: list[int] | None = None

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def check_scope(self) -> "ChatRequest":
        """Require exactly one document scope."""
        if (self.document_id is None) == (self.document_ids is None):
            raise ValueError("Set exactly one of document_id or document_ids")
        if self.document_ids is not None and not self.document_ids:
            raise ValueError("document_ids must not be empty")
        return self

    def to_payload(self) -> dict[str, Any]:
        """Serialize without the unused scope key."""
        return self.model_dump(exclude_none=True)


class ChatResponse(BaseModel):
    """Assistant reply returned by POST /chat."""

    response: str


class UploadResponse(BaseModel):
    """Response after a successful document upload."""

    document_id: int
    document_name: str
    word_count: int = Field(ge=0)
    character_count: int = Field(ge=0)


class StatsResponse(BaseModel):
    """Aggregate statistics over the document collection.

    Attributes:
        total_documents: Number of stored documents.
        total_messages: Number of persisted chat messages.
        total_content_size: Total extracted content size in bytes.
        most_recent_document: Name of the latest upload, if any.
        most_recent_date: Upload date of the latest document, if any.
    """

    total_documents: int = Field(default=0, ge=0)
    total_messages: int = Field(default=0, ge=0)
    total_content_size: int = Field(default=0, ge=0)
    most_recent_document: str | None = None
    most_recent_date: datetime | None = None


class SearchResult(BaseModel):
    """A document matched by GET /documents/search/{term}."""

    model_config = ConfigDict(extra="allow")

    id: int
    document_name: str
    snippet: str | None = None


class MessageAck(BaseModel):
    """Acknowledgement body returned by DELETE endpoints."""

    message: str = ""
