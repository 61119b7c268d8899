from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from artifact_vault.models.artifact import Artifact, ArtifactDraft

if TYPE_CHECKING:
    from artifact_vault.core.client import ImageFile


class ViewState(str, Enum):
    LIST = "LIST"
    CREATE = "CREATE"
    EDIT = "EDIT"
    VIEW = "VIEW"


@dataclass(frozen=True)
class ErrorInfo:
    """A formatted failure waiting in the notification slot."""

    category: str
    message: str
    operation: str


@dataclass
class AppState:
    """
    Aggregate UI state owned by the state machine.

    The presentation layer reads this object but only the machine mutates it.
    ``artifacts`` keeps the order the service returned.
    """

    view_state: ViewState = ViewState.LIST
    artifacts: List[Artifact] = field(default_factory=list)
    selected_artifact_id: Optional[str] = None
    draft: ArtifactDraft = field(default_factory=ArtifactDraft)
    pending_image: Optional["ImageFile"] = None
    is_loading: bool = False
    last_error: Optional[ErrorInfo] = None
    is_fallback_mode: bool = False

    def find(self, artifact_id: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.id == artifact_id:
                return artifact
        return None

    @property
    def selected_artifact(self) -> Optional[Artifact]:
        if self.selected_artifact_id is None:
            return None
        return self.find(self.selected_artifact_id)

    @property
    def can_submit(self) -> bool:
        return bool(self.draft.name.strip()) and not self.is_loading
