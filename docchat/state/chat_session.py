"""Chat session management for the selected documents.

A session belongs to one target (a single document or an ordered set of
documents) and is discarded when the target changes. Single-document
sessions start from the server-persisted history; multi-document sessions
start empty.

Sending is a two-phase update of the local log: the user message is staged
immediately, then committed when the backend answers or reverted when it
fails. At most one send is outstanding per session, so the staged entry is
always the last one when it is reverted.

Responses for a session that is no longer active are dropped. The manager
compares the session object a request was issued for with the current one
instead of cancelling the request.
"""

import logging
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator

from docchat.client.backend import BackendClient, BackendError
from docchat.models.schemas import ChatMessage, ChatRequest, MessageRole
from docchat.state.errors import ClearError, HistoryFetchError, SendError
from docchat.state.selection import SelectionState

logger = logging.getLogger(__name__)


class SessionTarget(BaseModel):
    """The document or documents a conversation is scoped to.

    Attributes:
        document_ids: Deduplicated ids in selection order. Order is only
            used for display.
    """

    model_config = ConfigDict(frozen=True)

    document_ids: tuple[int, ...]

    @field_validator("document_ids")
    @classmethod
    def dedupe_ids(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Drop repeated ids, keeping first occurrence."""
        if not v:
            raise ValueError("A session target needs at least one document")
        return tuple(dict.fromkeys(v))

    @property
    def is_multi(self) -> bool:
        return len(self.document_ids) > 1

    @property
    def document_id(self) -> int:
        """The first (for single targets, the only) document id."""
        return self.document_ids[0]

    @classmethod
    def single(cls, document_id: int) -> "SessionTarget":
        return cls(document_ids=(document_id,))

    @classmethod
    def from_selection(cls, state: SelectionState) -> "SessionTarget | None":
        """Derive the chat target, or None when the selection cannot drive chat."""
        if not state.chat_ready:
            return None
        return cls(document_ids=state.document_ids)

    def to_request(self, message: str) -> ChatRequest:
        if self.is_multi:
            return ChatRequest(message=message, document_ids=list(self.document_ids))
        return ChatRequest(message=message, document_id=self.document_id)


class PendingEntry:
    """A message staged in a session log awaiting commit or revert."""

    def __init__(self, session: "ChatSession", message: ChatMessage) -> None:
        self._session = session
        self.message = message
        self._settled = False

    def commit(self) -> None:
        self._settle()

    def revert(self) -> None:
        """Remove the staged message, restoring the log to its pre-stage state."""
        self._settle()
        self._session._remove_last(self.message)

    def _settle(self) -> None:
        if self._settled:
            raise RuntimeError("Pending entry already committed or reverted")
        self._settled = True


class ChatSession:
    """Message log for one target."""

    def __init__(self, target: SessionTarget) -> None:
        self.target = target
        self._messages: list[ChatMessage] = []
        self.send_in_flight = False
        self.history_loading = False

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def replace(self, messages: list[ChatMessage]) -> None:
        self._messages = list(messages)

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    def stage(self, message: ChatMessage) -> PendingEntry:
        self._messages.append(message)
        return PendingEntry(self, message)

    def clear(self) -> None:
        self._messages.clear()

    def _remove_last(self, message: ChatMessage) -> None:
        if not self._messages or self._messages[-1] is not message:
            raise RuntimeError("Staged message is no longer the most recent entry")
        self._messages.pop()


def _now() -> datetime:
    return datetime.now(UTC)


class ChatSessionManager:
    """Owns the active chat session and its backend traffic."""

    def __init__(self, client: BackendClient, history_limit: int | None = None) -> None:
        self._client = client
        self._history_limit = (
            client.config.history_limit if history_limit is None else history_limit
        )
        self._session: ChatSession | None = None

    @property
    def session(self) -> ChatSession | None:
        return self._session

    @property
    def target(self) -> SessionTarget | None:
        return self._session.target if self._session else None

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self._session.messages if self._session else ()

    def _is_active(self, session: ChatSession) -> bool:
        return session is self._session

    def deactivate(self) -> None:
        """Discard the active session; in-flight responses for it are dropped."""
        if self._session is not None:
            logger.debug("Chat deactivated")
        self._session = None

    def detach_if_stale(self, selection: SelectionState) -> None:
        """Drop the session at once if the selection no longer targets it."""
        if self._session is not None and SessionTarget.from_selection(selection) != self.target:
            self.deactivate()

    async def sync(self, selection: SelectionState) -> None:
        """Activate the target derived from a selection if it changed."""
        target = SessionTarget.from_selection(selection)
        if target == self.target:
            return
        await self.activate(target)

    async def activate(self, target: SessionTarget | None) -> None:
        """Start a fresh session for ``target``.

        Passing None deactivates chat. Single-document sessions load their
        persisted history; if another activation happens before it arrives,
        the late result is dropped.

        Raises:
            HistoryFetchError: If the history of the still-active target
                cannot be loaded. The log stays empty.
        """
        if target is None:
            self.deactivate()
            return

        session = ChatSession(target)
        self._session = session
        logger.debug(f"Activated chat for documents {list(target.document_ids)}")
        if target.is_multi:
            return

        session.history_loading = True
        try:
            history = await self.load_history(target.document_id)
        except HistoryFetchError:
            if self._is_active(session):
                raise
            logger.info(f"Ignoring history failure for inactive document {target.document_id}")
            return
        finally:
            session.history_loading = False

        if not self._is_active(session):
            logger.debug(f"Discarding stale history for document {target.document_id}")
            return
        session.replace(history)

    async def load_history(self, document_id: int, limit: int | None = None) -> list[ChatMessage]:
        """Fetch up to ``limit`` most recent persisted messages, oldest first.

        Raises:
            HistoryFetchError: If the backend request fails.
        """
        if limit is None:
            limit = self._history_limit
        try:
            history = await self._client.get_history(document_id, limit=limit)
        except BackendError as e:
            logger.warning(f"Failed to load chat history for document {document_id}: {e}")
            raise HistoryFetchError("Failed to load chat history") from e
        return history[-limit:] if limit > 0 else []

    async def send(self, text: str) -> ChatMessage | None:
        """Send a message to the active target.

        The user message appears in the log immediately and is removed again
        if the backend fails.

        Returns:
            The assistant reply, or None when the send was not attempted
            (blank text, no active target, history still loading or another
            send in flight).

        Raises:
            SendError: If the backend request fails.
        """
        session = self._session
        text = text.strip()
        if not text or session is None:
            return None
        if session.send_in_flight or session.history_loading:
            logger.debug("Send rejected: session busy")
            return None

        session.send_in_flight = True
        pending = session.stage(ChatMessage(role=MessageRole.USER, content=text, timestamp=_now()))
        try:
            response = await self._client.send_chat(session.target.to_request(text))
        except BackendError as e:
            pending.revert()
            logger.warning(f"Chat request failed: {e}")
            raise SendError("Failed to send message") from e
        finally:
            session.send_in_flight = False

        pending.commit()
        reply = ChatMessage(
            role=MessageRole.ASSISTANT,
            content=response.response,
            timestamp=_now(),
        )
        session.append(reply)
        if not self._is_active(session):
            logger.debug("Reply arrived for an inactive session")
        return reply

    async def clear_history(self) -> bool:
        """Delete the persisted history of a single-document session.

        Returns:
            True if history was cleared, False when there is no
            single-document session to clear or the session is busy
            (a send in flight or history still loading).

        Raises:
            ClearError: If the backend request fails; the log is untouched.
        """
        session = self._session
        if session is None or session.target.is_multi:
            return False
        if session.send_in_flight or session.history_loading:
            logger.debug("Clear rejected: session busy")
            return False
        try:
            await self._client.clear_history(session.target.document_id)
        except BackendError as e:
            logger.warning(f"Failed to clear history for document {session.target.document_id}: {e}")
            raise ClearError("Failed to clear chat history") from e
        session.clear()
        logger.info(f"Cleared chat history for document {session.target.document_id}")
        return True
