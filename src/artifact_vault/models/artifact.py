import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


def _as_number(value: Any) -> Optional[float]:
    # Fingerprints are display-only; anything non-numeric shows as N/A.
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_mapping(value: Any, label: str) -> Any:
    if value is None or isinstance(value, (dict, BaseModel)):
        return value
    logger.warning(f"Ignoring malformed {label}: {value!r}")
    return None


class Irregularities(BaseModel):
    """Shape irregularity metrics computed by the remote service."""

    model_config = ConfigDict(extra="ignore")

    circularity_score: Optional[float] = None
    edge_jaggedness: Optional[float] = None

    @field_validator("circularity_score", "edge_jaggedness", mode="before")
    @classmethod
    def _lenient_score(cls, value):
        return _as_number(value)


class DominantColor(BaseModel):
    """
    Dominant color of the artifact image, normally an (hue, saturation, value)
    triple. Extra channels are kept as sent.
    """

    model_config = ConfigDict(extra="ignore")

    hsv: Optional[List[float]] = None

    @field_validator("hsv", mode="before")
    @classmethod
    def _lenient_hsv(cls, value):
        if not isinstance(value, (list, tuple)) or not value:
            return None
        numbers = [_as_number(component) for component in value]
        if any(number is None for number in numbers):
            return None
        return numbers


class FingerprintData(BaseModel):
    """
    Computer-vision fingerprint extracted from an artifact's image.

    The client never computes these values; they arrive from the service after
    an image upload has been processed. Malformed parts are dropped rather than
    rejected so that one odd record never fails a whole listing.
    """

    model_config = ConfigDict(extra="ignore")

    irregularities: Optional[Irregularities] = None
    dominant_color: Optional[DominantColor] = None

    @field_validator("irregularities", "dominant_color", mode="before")
    @classmethod
    def _lenient_section(cls, value, info):
        return _as_mapping(value, info.field_name)

    @property
    def is_complete(self) -> bool:
        """True when every displayed metric is present."""
        return (
            self.irregularities is not None
            and self.irregularities.circularity_score is not None
            and self.irregularities.edge_jaggedness is not None
            and self.dominant_color is not None
            and self.dominant_color.hsv is not None
        )


class ArtifactDraft(BaseModel):
    """
    Working copy of the editable fields of an artifact.

    Drafts are what the create and update requests send. They are kept apart
    from cached ``Artifact`` records so that editing a form never mutates the
    list state.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = ""
    description: str = ""

    @classmethod
    def from_artifact(cls, artifact: "Artifact") -> "ArtifactDraft":
        return cls(name=artifact.name, description=artifact.description)

    def to_payload(self) -> dict:
        return {"name": self.name, "description": self.description}


class Artifact(BaseModel):
    """
    A named physical-object record managed by the remote artifact service.

    Attributes:
        id (str): Server-assigned identifier, or a ``demo-`` prefixed
                  placeholder for fallback data.
        name (str): Human-readable name of the object.
        description (str): Free-text description, empty when not provided.
        fingerprint_data (Optional[FingerprintData]): Metrics extracted from the
                  uploaded image, absent until the service has processed one.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    fingerprint_data: Optional[FingerprintData] = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Services backed by integer primary keys send numeric ids.
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value):
        return "" if value is None else value

    @field_validator("fingerprint_data", mode="before")
    @classmethod
    def _lenient_fingerprint(cls, value):
        return _as_mapping(value, "fingerprint_data")

    def with_draft(self, draft: ArtifactDraft) -> "Artifact":
        """Return a copy with the draft's editable fields applied."""
        return self.model_copy(
            update={"name": draft.name, "description": draft.description}
        )

    def __repr__(self) -> str:
        return f"<Artifact id='{self.id}' name='{self.name}'>"

    def __str__(self) -> str:
        return f"Artifact(id={self.id}, name={self.name})"
