from __future__ import annotations

from typing import TYPE_CHECKING

from artifact_vault.core.errors import ValidationError
from artifact_vault.models.artifact import ArtifactDraft

if TYPE_CHECKING:
    from artifact_vault.core.client import ImageFile

MAX_NAME_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 4096

ALLOWED_IMAGE_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/bmp",
        "image/tiff",
        "image/webp",
    }
)

DRAFT_FIELDS = ("name", "description")


def validate_draft(draft: ArtifactDraft) -> None:
    if not isinstance(draft.name, str):
        raise ValidationError(f"name must be a string, got {type(draft.name)}")
    if not draft.name.strip():
        raise ValidationError("Artifact name cannot be empty.")
    if len(draft.name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Artifact name exceeds max length {MAX_NAME_LENGTH}.")
    if len(draft.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description exceeds max length {MAX_DESCRIPTION_LENGTH}."
        )


def validate_draft_field(field: str) -> None:
    if field not in DRAFT_FIELDS:
        raise ValidationError(
            f"Unknown draft field '{field}'. Expected one of: {', '.join(DRAFT_FIELDS)}."
        )


def validate_image(image: "ImageFile", max_bytes: int) -> None:
    if not image.content:
        raise ValidationError(f"Image '{image.filename}' is empty.")
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            f"Unsupported image type '{image.content_type}' for '{image.filename}'."
        )
    if len(image.content) > max_bytes:
        raise ValidationError(
            f"Image '{image.filename}' is {len(image.content)} bytes; "
            f"the limit is {max_bytes} bytes."
        )
