"""Error kinds surfaced by the client state layer.

Each backend failure is caught at the component boundary and re-raised as
one of these, chained to the underlying BackendError.
"""

from enum import Enum


class DocChatError(Exception):
    """Base class for user-facing client errors."""

    pass


class FetchError(DocChatError):
    """Raised when the document list or statistics cannot be loaded."""

    pass


class UploadRejection(str, Enum):
    """Why an upload was refused."""

    UNSUPPORTED_TYPE = "unsupported_type"
    SIZE_EXCEEDED = "size_exceeded"
    EMPTY_FILE = "empty_file"
    SERVER_ERROR = "server_error"


class UploadError(DocChatError):
    """Raised when an upload fails validation or is rejected by the server."""

    def __init__(self, message: str, reason: UploadRejection) -> None:
        super().__init__(message)
        self.reason = reason


class DeleteError(DocChatError):
    """Raised when a document cannot be deleted."""

    pass


class HistoryFetchError(DocChatError):
    """Raised when persisted chat history cannot be loaded."""

    pass


class SendError(DocChatError):
    """Raised when a chat message is not answered by the backend."""

    pass


class ClearError(DocChatError):
    """Raised when persisted chat history cannot be cleared."""

    pass
