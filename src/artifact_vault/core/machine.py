"""
Application state machine for the artifact client.

Every user intent goes through ``ArtifactStateMachine.dispatch``. The machine
owns the ``AppState`` aggregate, sequences calls to the ``ArtifactClient`` and
applies the failure policy:

-   **Fallback data**: if the initial list fetch fails the collection is
    populated with demonstration artifacts so the client stays usable.
-   **Non-blocking submits**: a failed create, update or upload is recorded in
    the notification slot, yet the form is still reset and the list shown.
-   **Sticky deletes**: a deleted artifact disappears from the collection even
    when the service call fails.

The visible state may therefore drift from the service after a failure; the
next successful refresh brings it back in line.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Dict, Optional, Union

import pydantic

from artifact_vault.core.client import ArtifactClient, ImageFile
from artifact_vault.core.errors import (
    ConfirmationDeclined,
    NotFoundError,
    ValidationError,
    describe_error,
)
from artifact_vault.core.events import (
    AppStarted,
    BackRequested,
    CancelRequested,
    DeleteRequested,
    DraftChanged,
    EntrySelectedForEdit,
    EntrySelectedForView,
    ErrorDismissed,
    Event,
    ImageChosen,
    NewEntryRequested,
    RefreshRequested,
    StateListeners,
    SubmitCreate,
    SubmitUpdate,
)
from artifact_vault.core.fallback import demo_artifacts, is_demo_id
from artifact_vault.core.results import OperationResult, attempt
from artifact_vault.core.validation import validate_draft, validate_draft_field
from artifact_vault.models.artifact import Artifact, ArtifactDraft
from artifact_vault.models.state import AppState, ErrorInfo, ViewState

logger = logging.getLogger(__name__)

Confirmer = Callable[[str], Union[bool, Awaitable[bool]]]

FORM_STATES = (ViewState.CREATE, ViewState.EDIT)
SELECTION_SOURCE_STATES = (ViewState.LIST, ViewState.VIEW)


def decline_all(message: str) -> bool:
    """Default confirmer: refuse every destructive action."""
    return False


class ArtifactStateMachine:
    """
    Reducer-style owner of the client's UI state.

    Parameters
    ----------
    client : ArtifactClient
        Client used for every network call.
    confirm : Confirmer, optional
        Callable asked before a delete. It receives a prompt and returns
        (or resolves to) ``True`` to proceed. Defaults to declining.
    state : AppState, optional
        Initial state, mainly for tests. Defaults to an empty ``LIST`` state.
    """

    def __init__(
        self,
        client: ArtifactClient,
        confirm: Optional[Confirmer] = None,
        state: Optional[AppState] = None,
    ):
        self.client = client
        self.confirm = confirm or decline_all
        self.state = state if state is not None else AppState()
        self.listeners = StateListeners()
        self._handlers: Dict[type, Callable[..., Awaitable[None]]] = {
            AppStarted: self._on_app_started,
            NewEntryRequested: self._on_new_entry,
            EntrySelectedForView: self._on_select_for_view,
            EntrySelectedForEdit: self._on_select_for_edit,
            DraftChanged: self._on_draft_changed,
            ImageChosen: self._on_image_chosen,
            SubmitCreate: self._on_submit_create,
            SubmitUpdate: self._on_submit_update,
            DeleteRequested: self._on_delete,
            CancelRequested: self._on_cancel,
            BackRequested: self._on_back,
            RefreshRequested: self._on_refresh,
            ErrorDismissed: self._on_error_dismissed,
        }

    async def dispatch(self, event: Event) -> AppState:
        """
        Apply one intent and return the resulting state.

        Events that are not valid in the current view state leave the state
        untouched. Service failures are recorded in ``state.last_error`` and
        never raised.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event: {event!r}")
        logger.debug(f"Dispatching {type(event).__name__} in {self.state.view_state.value}")
        await handler(event)
        self.listeners.emit_change(self.state, event)
        return self.state

    def image_url(self, artifact_id: str) -> str:
        return self.client.image_url(artifact_id)

    # --- Internal helpers ---

    def _ignore(self, event: Event, reason: str) -> None:
        logger.warning(
            f"Ignoring {type(event).__name__} in {self.state.view_state.value}: {reason}"
        )

    def _begin(self) -> None:
        self.state.is_loading = True
        self.state.last_error = None

    def _record(self, error: ErrorInfo) -> None:
        # The first failure of a sequence is the one worth showing.
        if self.state.last_error is None:
            self.state.last_error = error
        logger.warning(error.message)

    def _upsert(self, artifact: Artifact) -> None:
        for index, existing in enumerate(self.state.artifacts):
            if existing.id == artifact.id:
                self.state.artifacts[index] = artifact
                return
        self.state.artifacts.append(artifact)

    def _remove(self, artifact_id: str) -> None:
        self.state.artifacts = [
            artifact for artifact in self.state.artifacts if artifact.id != artifact_id
        ]

    def _reset_form(self) -> None:
        self.state.draft = ArtifactDraft()
        self.state.pending_image = None
        self.state.selected_artifact_id = None
        self.state.view_state = ViewState.LIST

    async def _refresh(self) -> OperationResult:
        """Re-read the collection; on failure keep what is cached."""
        result = await attempt("refresh artifacts", self.client.list_artifacts())
        if not result.ok:
            self._record(result.error)
            return result

        self.state.artifacts = list(result.value)
        if self.state.is_fallback_mode:
            logger.info("Artifact service reachable again; leaving fallback mode")
        self.state.is_fallback_mode = False

        selected = self.state.selected_artifact_id
        if (
            selected is not None
            and self.state.view_state == ViewState.VIEW
            and self.state.find(selected) is None
        ):
            self.state.selected_artifact_id = None
            self.state.view_state = ViewState.LIST
        return result

    async def _upload(self, artifact_id: str, image: ImageFile) -> None:
        result = await attempt(
            "image upload", self.client.upload_image(artifact_id, image)
        )
        if result.ok:
            self._upsert(result.value)
        else:
            self._record(result.error)

    async def _require_confirmation(self, message: str) -> None:
        answer = self.confirm(message)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            raise ConfirmationDeclined(message)

    def _validated_draft(self, operation: str) -> Optional[ArtifactDraft]:
        try:
            validate_draft(self.state.draft)
        except ValidationError as e:
            self.state.last_error = describe_error(e, operation)
            return None
        return self.state.draft.model_copy()

    # --- Handlers ---

    async def _on_app_started(self, event: AppStarted) -> None:
        self._begin()
        self.state.view_state = ViewState.LIST
        self.state.selected_artifact_id = None
        try:
            result = await attempt("load artifacts", self.client.list_artifacts())
            if result.ok:
                self.state.artifacts = list(result.value)
                self.state.is_fallback_mode = False
            else:
                logger.warning(
                    f"Initial artifact fetch failed, showing demo data: "
                    f"{result.error.message}"
                )
                self.state.artifacts = demo_artifacts()
                self.state.is_fallback_mode = True
                self.state.last_error = result.error
        finally:
            self.state.is_loading = False

    async def _on_new_entry(self, event: NewEntryRequested) -> None:
        if self.state.view_state != ViewState.LIST:
            self._ignore(event, "new entries start from the list")
            return
        self.state.draft = ArtifactDraft()
        self.state.pending_image = None
        self.state.selected_artifact_id = None
        self.state.view_state = ViewState.CREATE

    def _select(self, event: Event, artifact_id: str, operation: str) -> Optional[Artifact]:
        if self.state.view_state not in SELECTION_SOURCE_STATES:
            self._ignore(event, "finish or cancel the form first")
            return None
        artifact = self.state.find(artifact_id)
        if artifact is None:
            self.state.last_error = describe_error(
                NotFoundError(f"No artifact with id '{artifact_id}' in the list."),
                operation,
            )
            return None
        self.state.selected_artifact_id = artifact.id
        return artifact

    async def _on_select_for_view(self, event: EntrySelectedForView) -> None:
        if self._select(event, event.artifact_id, "view") is not None:
            self.state.view_state = ViewState.VIEW

    async def _on_select_for_edit(self, event: EntrySelectedForEdit) -> None:
        artifact = self._select(event, event.artifact_id, "edit")
        if artifact is None:
            return
        self.state.draft = ArtifactDraft.from_artifact(artifact)
        self.state.pending_image = None
        self.state.view_state = ViewState.EDIT

    async def _on_draft_changed(self, event: DraftChanged) -> None:
        if self.state.view_state not in FORM_STATES:
            self._ignore(event, "no form is open")
            return
        try:
            validate_draft_field(event.field)
        except ValidationError as e:
            self.state.last_error = describe_error(e, "edit draft")
            return
        try:
            setattr(self.state.draft, event.field, event.value)
        except pydantic.ValidationError:
            self.state.last_error = describe_error(
                ValidationError(f"{event.field.capitalize()} must be text."), "edit draft"
            )

    async def _on_image_chosen(self, event: ImageChosen) -> None:
        if self.state.view_state not in FORM_STATES:
            self._ignore(event, "no form is open")
            return
        self.state.pending_image = event.image

    async def _on_submit_create(self, event: SubmitCreate) -> None:
        if self.state.view_state != ViewState.CREATE:
            self._ignore(event, "create is only submitted from the create form")
            return
        draft = self._validated_draft("create")
        if draft is None:
            return

        image = self.state.pending_image
        self._begin()
        try:
            result = await attempt("create", self.client.create_artifact(draft))
            if result.ok:
                created = result.value
                self._upsert(created)
                if image is not None:
                    await self._upload(created.id, image)
            else:
                self._record(result.error)
            self._reset_form()
            await self._refresh()
        finally:
            self.state.is_loading = False

    async def _on_submit_update(self, event: SubmitUpdate) -> None:
        if self.state.view_state != ViewState.EDIT:
            self._ignore(event, "update is only submitted from the edit form")
            return
        artifact_id = self.state.selected_artifact_id
        if artifact_id is None:
            self._ignore(event, "no artifact selected")
            return
        draft = self._validated_draft("update")
        if draft is None:
            return

        image = self.state.pending_image
        self._begin()
        try:
            result = await attempt(
                "update", self.client.update_artifact(artifact_id, draft)
            )
            if result.ok:
                self._upsert(result.value)
                if image is not None:
                    await self._upload(artifact_id, image)
            else:
                self._record(result.error)
            self._reset_form()
            await self._refresh()
        finally:
            self.state.is_loading = False

    async def _on_delete(self, event: DeleteRequested) -> None:
        artifact_id = event.artifact_id
        artifact = self.state.find(artifact_id)
        label = artifact.name if artifact is not None else artifact_id
        try:
            await self._require_confirmation(f"Delete '{label}' permanently?")
        except ConfirmationDeclined:
            logger.debug(f"Delete of {artifact_id} declined")
            return

        self._begin()
        try:
            if is_demo_id(artifact_id):
                self._remove(artifact_id)
            else:
                result = await attempt(
                    "delete", self.client.delete_artifact(artifact_id)
                )
                self._remove(artifact_id)
                if result.ok:
                    await self._refresh()
                    self._remove(artifact_id)
                else:
                    self._record(result.error)
        finally:
            self.state.is_loading = False

        if self.state.selected_artifact_id == artifact_id:
            self._reset_form()

    async def _on_cancel(self, event: CancelRequested) -> None:
        if self.state.view_state not in FORM_STATES:
            self._ignore(event, "no form is open")
            return
        self._reset_form()
        self._begin()
        try:
            await self._refresh()
        finally:
            self.state.is_loading = False

    async def _on_back(self, event: BackRequested) -> None:
        if self.state.view_state != ViewState.VIEW:
            self._ignore(event, "back only leaves the detail view")
            return
        self.state.selected_artifact_id = None
        self.state.view_state = ViewState.LIST

    async def _on_refresh(self, event: RefreshRequested) -> None:
        self._begin()
        try:
            await self._refresh()
        finally:
            self.state.is_loading = False

    async def _on_error_dismissed(self, event: ErrorDismissed) -> None:
        self.state.last_error = None
