"""NiceGUI interface: tab bar plus the documents, upload, chat and stats panes.

Every pane reads from the Workspace and calls its actions; no state lives
here beyond widget references. Errors raised by the state layer are shown
as notifications.
"""

import asyncio
import logging
from collections.abc import Awaitable

from nicegui import context, events, ui

from docchat.client.backend import BackendClient
from docchat.models.schemas import ChatMessage, Document, FileType, MessageRole
from docchat.state.errors import DocChatError
from docchat.state.router import Tab
from docchat.state.selection import SelectionPhase
from docchat.state.workspace import Workspace
from docchat.ui.formatting import format_bytes, format_date, format_time

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }
    body { background: #f5f7fb; min-height: 100vh; }
    .header { background: linear-gradient(135deg, #2563eb 0%, #4338ca 100%); }
    .card-doc { background: white; border-radius: 16px; box-shadow: 0 2px 8px rgba(0, 0, 0, 0.08); }
    .card-doc.selected { box-shadow: 0 0 0 4px #bfdbfe; background: #eff6ff; }
    .message-user {
        background: linear-gradient(135deg, #2563eb 0%, #1d4ed8 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: white;
        border: 1px solid #e5e7eb;
        color: #111827;
        border-radius: 18px 18px 18px 4px;
    }
</style>
"""

TAB_LABELS = {
    Tab.DOCUMENTS: ("Documents", "description"),
    Tab.UPLOAD: ("Upload", "upload"),
    Tab.CHAT: ("Chat", "chat"),
    Tab.STATS: ("Analytics", "bar_chart"),
}

FILE_TYPE_COLORS = {
    FileType.PDF: "red",
    FileType.DOCX: "blue",
    FileType.TXT: "green",
    FileType.OTHER: "grey",
}


async def notify_errors(action: Awaitable[object], success: str | None = None) -> bool:
    """Await a workspace action and surface any client error to the user."""
    try:
        await action
    except DocChatError as e:
        ui.notify(str(e), type="negative")
        return False
    if success:
        ui.notify(success, type="positive")
    return True


@ui.page("/")
async def docchat_page() -> None:
    """Main page."""
    ui.add_head_html(CUSTOM_CSS)
    backend = BackendClient()
    workspace = Workspace(backend)
    router = workspace.router
    context.client.on_disconnect(backend.aclose)

    search_term = ""
    tab_bar: ui.row
    content: ui.column

    def render_tabs() -> None:
        tab_bar.clear()
        counts = {
            Tab.DOCUMENTS: len(workspace.registry.documents),
            Tab.CHAT: len(workspace.selection.state.document_ids),
        }
        with tab_bar:
            for tab, (label, icon) in TAB_LABELS.items():
                text = label if not counts.get(tab) else f"{label} ({counts[tab]})"
                color = "primary" if tab is router.active_tab else "grey-7"
                ui.button(text, icon=icon, on_click=lambda t=tab: router.switch_to(t)).props(
                    f"flat color={color}"
                )

    def refresh_view() -> None:
        update_header()
        render_tabs()
        content.clear()
        with content:
            router.render()

    # === Documents pane ===

    def render_document_card(doc: Document) -> None:
        state = workspace.selection.state
        selecting = state.phase is SelectionPhase.MULTI_SELECTING
        selected = state.contains(doc.id)

        def on_toggle() -> None:
            workspace.toggle_document(doc.id)
            refresh_view()

        async def on_start_chat() -> None:
            await notify_errors(workspace.select_document(doc.id))
            refresh_view()

        async def on_delete() -> None:
            with ui.dialog() as dialog, ui.card():
                ui.label(f'Delete "{doc.document_name}"?')
                with ui.row():
                    ui.button("Cancel", on_click=lambda: dialog.submit(False)).props("flat")
                    ui.button("Delete", on_click=lambda: dialog.submit(True)).props("color=negative")
            if await dialog:
                await notify_errors(workspace.delete_document(doc.id), "Document deleted successfully")
                refresh_view()

        classes = "card-doc p-5 w-80 gap-2" + (" selected" if selected else "")
        card = ui.column().classes(classes)
        if selecting:
            # In multi-select mode the whole card toggles membership
            card.classes("cursor-pointer").on("click", on_toggle)
        with card:
            with ui.row().classes("items-center gap-2 w-full"):
                ui.icon("description").classes(f"text-{FILE_TYPE_COLORS[doc.file_type]}-600 text-2xl")
                ui.label(doc.document_name).classes("font-semibold truncate flex-grow")
                if selecting:
                    ui.icon("check_box" if selected else "check_box_outline_blank").classes(
                        "text-primary text-xl"
                    )
            ui.badge(doc.file_type.value.upper(), color=FILE_TYPE_COLORS[doc.file_type])
            ui.label(f"{doc.word_count:,} words • {format_date(doc.upload_date)}").classes(
                "text-sm text-gray-500"
            )
            if not selecting:
                with ui.row().classes("w-full justify-between pt-2"):
                    ui.button("Start Chat", icon="chat", on_click=on_start_chat).props("dense unelevated")
                    ui.button("Delete", icon="delete", on_click=on_delete).props(
                        "dense flat color=negative"
                    )

    def render_documents() -> None:
        state = workspace.selection.state
        selecting = state.phase is SelectionPhase.MULTI_SELECTING

        def on_search(e: events.ValueChangeEventArguments) -> None:
            nonlocal search_term
            search_term = e.value or ""
            refresh_view()

        async def start_chat() -> None:
            if not await workspace.start_multi_chat():
                ui.notify("Select at least one document", type="warning")
            refresh_view()

        async def cancel() -> None:
            await workspace.cancel_multi_select()
            refresh_view()

        def enter_multi() -> None:
            workspace.enter_multi_select()
            refresh_view()

        with ui.row().classes("w-full items-center justify-between"):
            with ui.column().classes("gap-0"):
                ui.label("Document Library").classes("text-2xl font-bold")
                summary = f"{len(workspace.registry.documents)} documents"
                if selecting:
                    summary += f" • {len(state.document_ids)} selected"
                ui.label(summary).classes("text-gray-500")
            with ui.row():
                if selecting:
                    ui.button(
                        f"Start Chat ({len(state.document_ids)})", icon="chat", on_click=start_chat
                    ).props(f"unelevated {'disable' if not state.document_ids else ''}")
                    ui.button("Cancel", on_click=cancel).props("flat")
                else:
                    ui.button("Select Multiple", on_click=enter_multi).props("outline")

        ui.input(placeholder="Search documents by name...", value=search_term, on_change=on_search).props(
            "clearable debounce=300"
        ).classes("w-96")

        documents = workspace.registry.filter_by_name(search_term)
        if not documents:
            with ui.column().classes("w-full items-center py-16"):
                ui.icon("folder_open").classes("text-6xl text-gray-300")
                ui.label("No documents found" if search_term else "No documents uploaded").classes(
                    "text-xl text-gray-500"
                )
            return
        with ui.row().classes("w-full gap-6"):
            for doc in documents:
                render_document_card(doc)

    # === Upload pane ===

    async def on_upload(e: events.UploadEventArguments) -> None:
        data = await e.file.read()
        result = None

        async def do_upload() -> None:
            nonlocal result
            result = await workspace.upload(e.file.name, data, e.file.content_type or None)

        if await notify_errors(do_upload()) and result is not None:
            ui.notify(f'Document "{result.document_name}" uploaded successfully', type="positive")
        refresh_view()

    def render_upload() -> None:
        ui.label("Upload Document").classes("text-2xl font-bold")
        ui.label("PDF, DOCX or TXT, up to 10MB").classes("text-gray-500")
        ui.upload(on_upload=on_upload, auto_upload=True, max_files=1).props(
            'accept=".pdf,.docx,.txt"'
        ).classes("w-full max-w-xl")

    # === Chat pane ===

    def render_message(msg: ChatMessage) -> None:
        is_user = msg.role is MessageRole.USER
        with ui.row().classes(f"w-full {'justify-end' if is_user else 'justify-start'}"):
            with ui.column().classes(f"max-w-[70%] px-4 py-3 gap-1 {'message-user' if is_user else 'message-assistant'}"):
                if is_user:
                    ui.label(msg.content).classes("text-sm whitespace-pre-wrap")
                else:
                    ui.markdown(msg.content).classes("text-sm")
                ui.label(format_time(msg.timestamp)).classes("text-[10px] opacity-70")

    def render_chat() -> None:
        target = workspace.chat.target
        session = workspace.chat.session
        if target is None or session is None:
            with ui.column().classes("w-full items-center py-16"):
                ui.icon("description").classes("text-6xl text-gray-300")
                ui.label("No Document Selected").classes("text-xl font-medium")
                ui.label("Select a document from the Documents tab to start chatting").classes(
                    "text-gray-500"
                )
            return

        selected = workspace.selected_documents()

        async def clear_history() -> None:
            await notify_errors(workspace.clear_history(), "Chat history cleared")
            refresh_view()

        async def change_document() -> None:
            await workspace.clear_selection()
            refresh_view()

        async def send() -> None:
            text = input_field.value or ""
            if not text.strip():
                return
            input_field.value = ""
            pending = asyncio.ensure_future(workspace.send_message(text))
            # Let the staged user message land in the log before rendering
            await asyncio.sleep(0)
            refresh_view()
            await notify_errors(pending)
            refresh_view()

        with ui.row().classes("w-full items-center justify-between card-doc p-5"):
            with ui.column().classes("gap-0"):
                if target.is_multi:
                    ui.label("Multi-Document Analysis").classes("text-xl font-bold")
                    ui.label(f"{len(selected)} documents selected for cross-analysis").classes("text-gray-500")
                    with ui.row().classes("gap-1 pt-2"):
                        for doc in selected:
                            ui.badge(doc.document_name, color="primary")
                elif selected:
                    doc = selected[0]
                    ui.label(doc.document_name).classes("text-xl font-bold")
                    ui.label(f"{doc.file_type.value.upper()} • {doc.word_count:,} words").classes(
                        "text-gray-500"
                    )
            with ui.row():
                if not target.is_multi and session.messages and not session.send_in_flight:
                    ui.button("Clear History", icon="delete", on_click=clear_history).props("flat")
                ui.button("Change Document", icon="close", on_click=change_document).props("flat")

        with ui.scroll_area().classes("w-full h-[500px] card-doc"):
            with ui.column().classes("w-full p-5 gap-4"):
                if session.history_loading:
                    ui.spinner(size="lg")
                    ui.label("Loading chat history...").classes("text-gray-500")
                elif not session.messages:
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
                for msg in session.messages:
                    render_message(msg)
                if session.send_in_flight:
                    ui.label("AI is thinking...").classes("text-sm text-gray-500 italic")

        with ui.row().classes("w-full gap-3 items-end"):
            input_field = (
                ui.textarea(placeholder=f"Ask a question about {'your documents' if target.is_multi else 'this document'}...")
                .props("autogrow outlined rows=2")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send)
            )
            ui.button(icon="send", on_click=send).props(
                f"round unelevated {'disable' if session.send_in_flight else ''}"
            )

    # === Stats pane ===

    def render_stats() -> None:
        stats = workspace.registry.stats
        cards = [
            ("Total Documents", str(stats.total_documents), "description"),
            ("Total Messages", str(stats.total_messages), "chat"),
            ("Storage Used", format_bytes(stats.total_content_size), "storage"),
            ("Most Recent", stats.most_recent_document or "None", "event"),
        ]
        ui.label("Analytics Dashboard").classes("text-2xl font-bold")
        with ui.row().classes("w-full gap-6"):
            for title, value, icon in cards:
                with ui.column().classes("card-doc p-5 w-60 gap-1"):
                    ui.icon(icon).classes("text-3xl text-primary")
                    ui.label(value).classes("text-2xl font-bold truncate")
                    ui.label(title).classes("text-gray-500")
        if stats.most_recent_date:
            ui.label(f"Last document uploaded: {format_date(stats.most_recent_date, with_time=True)}").classes(
                "text-gray-500"
            )

    router.register(Tab.DOCUMENTS, render_documents)
    router.register(Tab.UPLOAD, render_upload)
    router.register(Tab.CHAT, render_chat)
    router.register(Tab.STATS, render_stats)
    router.subscribe(lambda _tab: refresh_view())

    # === Layout ===
    with ui.row().classes("w-full header px-8 py-4 items-center justify-between"):
        with ui.row().classes("items-center gap-3"):
            ui.icon("description").classes("text-white text-3xl")
            ui.label("DocChat").classes("text-xl font-semibold text-white")
        stats_label = ui.label().classes("text-white/80")
    tab_bar = ui.row().classes("w-full px-8 gap-1 bg-white/60")
    content = ui.column().classes("w-full max-w-7xl mx-auto p-8 gap-6")

    def update_header() -> None:
        stats = workspace.registry.stats
        stats_label.set_text(f"{stats.total_documents} documents • {stats.total_messages} messages")

    await notify_errors(workspace.load())
    refresh_view()


def main() -> None:
    ui.run(title="DocChat", port=8080, reload=False)


if __name__ == "__main__":
    main()
