"""
The `models` module defines the artifact records exchanged with the remote
service and the aggregate UI state owned by the state machine.
"""

from __future__ import annotations

from artifact_vault.models.artifact import (
    Artifact,
    ArtifactDraft,
    DominantColor,
    FingerprintData,
    Irregularities,
)
from artifact_vault.models.state import AppState, ErrorInfo, ViewState

__all__ = [
    "AppState",
    "Artifact",
    "ArtifactDraft",
    "DominantColor",
    "ErrorInfo",
    "FingerprintData",
    "Irregularities",
    "ViewState",
]
