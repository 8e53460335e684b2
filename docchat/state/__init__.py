"""Client-side session and interaction state.

Components:
    - registry: Known documents and statistics, refreshed after mutations
    - selection: Single/multi document selection state machine
    - chat_session: Per-target message log with optimistic sends
    - router: Active-tab dispatch
    - workspace: Wiring between the above
"""

from docchat.state.chat_session import ChatSession, ChatSessionManager, SessionTarget
from docchat.state.errors import (
    ClearError,
    DeleteError,
    DocChatError,
    FetchError,
    HistoryFetchError,
    SendError,
    UploadError,
    UploadRejection,
)
from docchat.state.registry import DocumentRegistry, RegistrySnapshot, validate_upload
from docchat.state.router import Tab, ViewRouter
from docchat.state.selection import (
    SelectionController,
    SelectionMode,
    SelectionPhase,
    SelectionState,
)
from docchat.state.workspace import Workspace

__all__ = [
    "ChatSession",
    "ChatSessionManager",
    "ClearError",
    "DeleteError",
    "DocChatError",
    "DocumentRegistry",
    "FetchError",
    "HistoryFetchError",
    "RegistrySnapshot",
    "SelectionController",
    "SelectionMode",
    "SelectionPhase",
    "SelectionState",
    "SendError",
    "SessionTarget",
    "Tab",
    "UploadError",
    "UploadRejection",
    "ViewRouter",
    "Workspace",
    "validate_upload",
]
