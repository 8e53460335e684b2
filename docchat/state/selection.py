"""Document selection state machine.

The state is an immutable, serializable SelectionState. Transitions are
pure functions returning a new state; SelectionController holds the current
state and notifies listeners when it changes.

Phases:
    - idle: nothing selected, single mode
    - single_selected: one document, chat engaged
    - multi_selecting: a set being built, chat not engaged
    - multi_active: a committed set, chat engaged
"""

import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator

from docchat.state.router import Tab, ViewRouter

logger = logging.getLogger(__name__)


class SelectionPhase(str, Enum):
    IDLE = "idle"
    SINGLE_SELECTED = "single_selected"
    MULTI_SELECTING = "multi_selecting"
    MULTI_ACTIVE = "multi_active"


class SelectionMode(str, Enum):
    SINGLE = "single"
    MULTI = "multi"


class SelectionState(BaseModel):
    """Current selection.

    Attributes:
        phase: Where the selection is in its lifecycle.
        document_ids: Selected document ids in selection order.
    """

    model_config = ConfigDict(frozen=True)

    phase: SelectionPhase = SelectionPhase.IDLE
    document_ids: tuple[int, ...] = ()

    @model_validator(mode="after")
    def check_cardinality(self) -> "SelectionState":
        """Enforce the per-phase size of the selected set."""
        if len(set(self.document_ids)) != len(self.document_ids):
            raise ValueError("document_ids must not contain duplicates")
        count = len(self.document_ids)
        if self.phase is SelectionPhase.IDLE and count:
            raise ValueError("idle selection must be empty")
        if self.phase is SelectionPhase.SINGLE_SELECTED and count != 1:
            raise ValueError("single selection must hold exactly one document")
        if self.phase is SelectionPhase.MULTI_ACTIVE and not count:
            raise ValueError("active multi selection must not be empty")
        return self

    @property
    def mode(self) -> SelectionMode:
        if self.phase in (SelectionPhase.MULTI_SELECTING, SelectionPhase.MULTI_ACTIVE):
            return SelectionMode.MULTI
        return SelectionMode.SINGLE

    @property
    def chat_ready(self) -> bool:
        """Whether this selection may drive the chat session."""
        return self.phase in (SelectionPhase.SINGLE_SELECTED, SelectionPhase.MULTI_ACTIVE)

    def contains(self, document_id: int) -> bool:
        return document_id in self.document_ids


IDLE = SelectionState()


def select_single(state: SelectionState, document_id: int) -> SelectionState:
    return SelectionState(phase=SelectionPhase.SINGLE_SELECTED, document_ids=(document_id,))


def enter_multi_select(state: SelectionState) -> SelectionState:
    if state.phase is SelectionPhase.MULTI_SELECTING:
        return state
    return SelectionState(phase=SelectionPhase.MULTI_SELECTING)


def toggle(state: SelectionState, document_id: int) -> SelectionState:
    if state.phase is not SelectionPhase.MULTI_SELECTING:
        return state
    if state.contains(document_id):
        ids = tuple(i for i in state.document_ids if i != document_id)
    else:
        ids = (*state.document_ids, document_id)
    return SelectionState(phase=SelectionPhase.MULTI_SELECTING, document_ids=ids)


def commit_multi(state: SelectionState) -> SelectionState:
    if state.phase is not SelectionPhase.MULTI_SELECTING or not state.document_ids:
        return state
    return SelectionState(phase=SelectionPhase.MULTI_ACTIVE, document_ids=state.document_ids)


def cancel_multi(state: SelectionState) -> SelectionState:
    if state.mode is SelectionMode.MULTI:
        return IDLE
    return state


def clear_selection(state: SelectionState) -> SelectionState:
    return IDLE


def drop_document(state: SelectionState, document_id: int) -> SelectionState:
    """Remove a deleted document; an emptied selection falls back to idle."""
    if not state.contains(document_id):
        return state
    ids = tuple(i for i in state.document_ids if i != document_id)
    if not ids:
        return IDLE
    return SelectionState(phase=state.phase, document_ids=ids)


SelectionListener = Callable[[SelectionState, SelectionState], None]


class SelectionController:
    """Owns the selection state and applies transitions to it.

    Listeners receive ``(previous, current)`` after every change. Selecting
    a single document or committing a multi selection switches the router
    to the chat pane.
    """

    def __init__(self, router: ViewRouter | None = None) -> None:
        self._router = router
        self._state = IDLE
        self._listeners: list[SelectionListener] = []

    @property
    def state(self) -> SelectionState:
        return self._state

    def subscribe(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    def _apply(self, new_state: SelectionState) -> bool:
        if new_state == self._state:
            return False
        previous, self._state = self._state, new_state
        logger.debug(
            f"Selection {previous.phase.value}{list(previous.document_ids)} -> "
            f"{new_state.phase.value}{list(new_state.document_ids)}"
        )
        for listener in self._listeners:
            listener(previous, new_state)
        return True

    def _show_chat(self) -> None:
        if self._router is not None:
            self._router.switch_to(Tab.CHAT)

    def select_single(self, document_id: int) -> None:
        self._apply(select_single(self._state, document_id))
        self._show_chat()

    def enter_multi_select(self) -> None:
        self._apply(enter_multi_select(self._state))

    def toggle(self, document_id: int) -> None:
        self._apply(toggle(self._state, document_id))

    def commit_multi(self) -> bool:
        """Commit the set being built. Returns False when there was nothing to commit."""
        new_state = commit_multi(self._state)
        if new_state.phase is not SelectionPhase.MULTI_ACTIVE or new_state is self._state:
            return False
        self._apply(new_state)
        self._show_chat()
        return True

    def cancel_multi(self) -> None:
        self._apply(cancel_multi(self._state))

    def clear_selection(self) -> None:
        self._apply(clear_selection(self._state))

    def on_document_deleted(self, document_id: int) -> None:
        self._apply(drop_document(self._state, document_id))
