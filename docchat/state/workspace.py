"""Composition root for the client state.

Wires the registry, selection controller, chat session manager and view
router together and exposes the user actions the panes call.

Dependency direction:
    registry deletion -> selection drops the id -> chat session detaches
    selection change  -> chat session re-derives its target
"""

import logging

from docchat.client.backend import BackendClient
from docchat.models.schemas import ChatMessage, Document, UploadResponse
from docchat.state.chat_session import ChatSessionManager
from docchat.state.registry import DocumentRegistry, RegistrySnapshot
from docchat.state.router import Tab, ViewRouter
from docchat.state.selection import SelectionController, SelectionState

logger = logging.getLogger(__name__)


class Workspace:
    """All client state for one browser session."""

    def __init__(self, client: BackendClient, router: ViewRouter | None = None) -> None:
        self.client = client
        self.router = router or ViewRouter()
        self.registry = DocumentRegistry(client)
        self.selection = SelectionController(self.router)
        self.chat = ChatSessionManager(client)

        self.registry.on_removed(self.selection.on_document_deleted)
        self.selection.subscribe(self._on_selection_changed)

    def _on_selection_changed(self, previous: SelectionState, current: SelectionState) -> None:
        self.chat.detach_if_stale(current)

    async def _sync_chat(self) -> None:
        await self.chat.sync(self.selection.state)

    def _require_known(self, document_id: int) -> None:
        if document_id not in self.registry.ids:
            raise ValueError(f"Unknown document id: {document_id}")

    async def load(self) -> RegistrySnapshot:
        return await self.registry.refresh()

    async def upload(
        self,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> UploadResponse:
        return await self.registry.upload(filename, content, content_type)

    async def delete_document(self, document_id: int) -> None:
        try:
            await self.registry.remove(document_id)
        finally:
            await self._sync_chat()

    async def select_document(self, document_id: int) -> None:
        """Chat with a single document."""
        self._require_known(document_id)
        self.selection.select_single(document_id)
        await self._sync_chat()

    def enter_multi_select(self) -> None:
        self.selection.enter_multi_select()

    def toggle_document(self, document_id: int) -> None:
        self._require_known(document_id)
        self.selection.toggle(document_id)

    async def start_multi_chat(self) -> bool:
        """Commit the multi selection and open chat. False if nothing was selected."""
        committed = self.selection.commit_multi()
        if committed:
            await self._sync_chat()
        return committed

    async def cancel_multi_select(self) -> None:
        self.selection.cancel_multi()
        await self._sync_chat()

    async def clear_selection(self) -> None:
        self.selection.clear_selection()
        await self._sync_chat()

    async def send_message(self, text: str) -> ChatMessage | None:
        return await self.chat.send(text)

    async def clear_history(self) -> bool:
        return await self.chat.clear_history()

    def switch_tab(self, tab: Tab) -> None:
        self.router.switch_to(tab)

    def selected_documents(self) -> list[Document]:
        """Selected documents in selection order, resolved through the registry."""
        documents = (self.registry.get(i) for i in self.selection.state.document_ids)
        return [doc for doc in documents if doc is not None]
