"""Display helpers shared by the terminal views."""

from __future__ import annotations

import math
from typing import Dict, Optional

from artifact_vault.models.artifact import Artifact, FingerprintData

NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "No description"
NO_FINGERPRINT = "No fingerprinting data available."
IMAGE_PLACEHOLDER = "[no image available]"


def format_score(value: Optional[float]) -> str:
    """Three decimals for a metric, ``N/A`` when the service did not send one."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value:.3f}"


def format_hsv(hsv) -> str:
    if not hsv:
        return NOT_AVAILABLE
    # Halves round up rather than to even.
    return ", ".join(str(math.floor(component + 0.5)) for component in hsv)


def fingerprint_rows(data: Optional[FingerprintData]) -> Optional[Dict[str, str]]:
    """
    Label/value pairs for the fingerprint panel.

    Returns None when the artifact has no fingerprint at all, so the caller can
    show a single placeholder line instead of a table of ``N/A`` values.
    """
    if data is None:
        return None
    irregularities = data.irregularities
    color = data.dominant_color
    return {
        "Irregularity": format_score(
            irregularities.circularity_score if irregularities else None
        ),
        "Edge Jaggedness": format_score(
            irregularities.edge_jaggedness if irregularities else None
        ),
        "Color (HSV)": format_hsv(color.hsv if color else None),
    }


def describe(artifact: Artifact) -> str:
    return artifact.description or NO_DESCRIPTION


def format_image_status(url: str, content: Optional[bytes]) -> str:
    if content is None:
        return IMAGE_PLACEHOLDER
    return f"{url} ({len(content)} bytes)"
