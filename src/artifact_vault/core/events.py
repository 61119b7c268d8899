import logging
from dataclasses import dataclass
from typing import Callable, List, Union

from artifact_vault.core.client import ImageFile
from artifact_vault.models.state import AppState

logger = logging.getLogger(__name__)


# --- Intents ---


@dataclass(frozen=True)
class AppStarted:
    pass


@dataclass(frozen=True)
class NewEntryRequested:
    pass


@dataclass(frozen=True)
class EntrySelectedForView:
    artifact_id: str


@dataclass(frozen=True)
class EntrySelectedForEdit:
    artifact_id: str


@dataclass(frozen=True)
class DraftChanged:
    field: str
    value: str


@dataclass(frozen=True)
class ImageChosen:
    image: ImageFile


@dataclass(frozen=True)
class SubmitCreate:
    pass


@dataclass(frozen=True)
class SubmitUpdate:
    pass


@dataclass(frozen=True)
class DeleteRequested:
    artifact_id: str


@dataclass(frozen=True)
class CancelRequested:
    pass


@dataclass(frozen=True)
class BackRequested:
    pass


@dataclass(frozen=True)
class RefreshRequested:
    pass


@dataclass(frozen=True)
class ErrorDismissed:
    pass


Event = Union[
    AppStarted,
    NewEntryRequested,
    EntrySelectedForView,
    EntrySelectedForEdit,
    DraftChanged,
    ImageChosen,
    SubmitCreate,
    SubmitUpdate,
    DeleteRequested,
    CancelRequested,
    BackRequested,
    RefreshRequested,
    ErrorDismissed,
]


# --- Listeners ---


class StateListeners:
    """Manage callbacks fired after the state machine handles an event."""

    def __init__(self):
        self._on_change: List[Callable[[AppState, Event], None]] = []

    def on_change(self, callback: Callable[[AppState, Event], None]):
        """
        Register a callback executed after every dispatched event.

        Parameters
        ----------
        callback : Callable[[AppState, Event], None]
            Handler invoked with the updated state and the event that caused it.

        Returns
        -------
        Callable[[AppState, Event], None]
            The registered callback, supporting decorator syntax.
        """
        self._on_change.append(callback)
        return callback

    def emit_change(self, state: AppState, event: Event):
        for hook in self._on_change:
            try:
                hook(state, event)
            except Exception as e:
                logger.warning(f"on_change hook failed: {e}")
