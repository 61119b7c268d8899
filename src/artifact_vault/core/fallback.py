"""
Demonstration data shown when the artifact service cannot be reached.

The ids carry a ``demo-`` prefix so the state machine can tell them apart from
server-issued ids and keep deletes of demo records local.
"""

from __future__ import annotations

from typing import Any, Dict, List

from artifact_vault.models.artifact import Artifact

DEMO_ID_PREFIX = "demo-"

_DEMO_RECORDS: List[Dict[str, Any]] = [
    {
        "id": f"{DEMO_ID_PREFIX}amphora",
        "name": "Terracotta Amphora",
        "description": "Two-handled storage jar with a narrow neck, Aegean origin.",
        "fingerprint_data": {
            "irregularities": {"circularity_score": 0.712, "edge_jaggedness": 0.184},
            "dominant_color": {"hsv": [18.4, 142.0, 171.6]},
        },
    },
    {
        "id": f"{DEMO_ID_PREFIX}bronze-coin",
        "name": "Bronze Coin",
        "description": "Worn bronze coin with a laureate head on the obverse.",
        "fingerprint_data": {
            "irregularities": {"circularity_score": 0.934, "edge_jaggedness": 0.061},
            "dominant_color": {"hsv": [32.2, 96.5, 118.9]},
        },
    },
    {
        "id": f"{DEMO_ID_PREFIX}flint-blade",
        "name": "Flint Blade",
        "description": "Knapped flint blade fragment with retouched edge.",
        "fingerprint_data": {
            "irregularities": {"circularity_score": 0.287, "edge_jaggedness": 0.642},
            "dominant_color": {"hsv": [104.7, 21.3, 88.0]},
        },
    },
]


def demo_artifacts() -> List[Artifact]:
    """
    Return the fixed demonstration artifacts.

    Every call builds new model instances, so callers may mutate the result
    without affecting later calls.

    Returns
    -------
    List[Artifact]
        Three artifacts with complete fingerprint data and ``demo-`` ids.
    """
    return [Artifact.model_validate(record) for record in _DEMO_RECORDS]


def is_demo_id(artifact_id: str) -> bool:
    return artifact_id.startswith(DEMO_ID_PREFIX)
