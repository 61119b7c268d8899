"""
Artifact Vault: a terminal client for managing artifact records on a remote service.

This package provides the public API for Artifact Vault: the typed service
client, the application state machine that sequences its calls, and the
records they exchange.
"""

# Models
from artifact_vault.models.artifact import Artifact, ArtifactDraft, FingerprintData
from artifact_vault.models.state import AppState, ErrorInfo, ViewState

# Core
from artifact_vault.core.client import ArtifactClient, ImageFile
from artifact_vault.core.errors import (
    ConfirmationDeclined,
    NotFoundError,
    TransportError,
    ValidationError,
    VaultError,
)
from artifact_vault.core.fallback import demo_artifacts
from artifact_vault.core.machine import ArtifactStateMachine
from artifact_vault.core.settings import VaultSettings

__all__ = [
    # Records
    "Artifact",
    "ArtifactDraft",
    "FingerprintData",
    # State
    "AppState",
    "ErrorInfo",
    "ViewState",
    "ArtifactStateMachine",
    # Client
    "ArtifactClient",
    "ImageFile",
    "VaultSettings",
    "demo_artifacts",
    # Errors
    "VaultError",
    "ValidationError",
    "NotFoundError",
    "TransportError",
    "ConfirmationDeclined",
]
