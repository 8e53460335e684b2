"""Active-tab dispatch for the four panes."""

import logging
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    DOCUMENTS = "documents"
    UPLOAD = "upload"
    CHAT = "chat"
    STATS = "stats"


class ViewRouter:
    """Maps the active tab to a pane renderer.

    Holds no state besides the active tab. Switching tabs never touches
    selection or chat state.
    """

    def __init__(self, initial: Tab = Tab.DOCUMENTS) -> None:
        self._active = initial
        self._panes: dict[Tab, Callable[[], None]] = {}
        self._listeners: list[Callable[[Tab], None]] = []

    @property
    def active_tab(self) -> Tab:
        return self._active

    def register(self, tab: Tab, pane: Callable[[], None]) -> None:
        self._panes[tab] = pane

    def subscribe(self, listener: Callable[[Tab], None]) -> None:
        self._listeners.append(listener)

    def switch_to(self, tab: Tab) -> None:
        if tab is self._active:
            return
        logger.debug(f"Switching pane {self._active.value} -> {tab.value}")
        self._active = tab
        for listener in self._listeners:
            listener(tab)

    def render(self) -> None:
        """Render the active pane.

        Raises:
            KeyError: If no pane is registered for the active tab.
        """
        self._panes[self._active]()
