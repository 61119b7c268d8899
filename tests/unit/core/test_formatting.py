from artifact_vault.core.formatting import (
    IMAGE_PLACEHOLDER,
    NO_DESCRIPTION,
    describe,
    fingerprint_rows,
    format_hsv,
    format_image_status,
    format_score,
)
from artifact_vault.models.artifact import Artifact, FingerprintData


def test_format_score() -> None:
    assert format_score(0.71234) == "0.712"
    assert format_score(0) == "0.000"
    assert format_score(None) == "N/A"


def test_format_hsv_rounds_half_up() -> None:
    assert format_hsv((12.5, 200.2, 99.7)) == "13, 200, 100"
    assert format_hsv((0.5, 1.5, 2.5)) == "1, 2, 3"
    assert format_hsv(None) == "N/A"


def test_fingerprint_rows_fill_missing_metrics() -> None:
    assert fingerprint_rows(None) is None

    partial = FingerprintData.model_validate(
        {"irregularities": {"circularity_score": 0.5}}
    )
    assert fingerprint_rows(partial) == {
        "Irregularity": "0.500",
        "Edge Jaggedness": "N/A",
        "Color (HSV)": "N/A",
    }


def test_describe_and_image_status() -> None:
    assert describe(Artifact(id="1", name="Pot")) == NO_DESCRIPTION
    assert describe(Artifact(id="1", name="Pot", description="Red")) == "Red"
    assert format_image_status("http://x/images/1", None) == IMAGE_PLACEHOLDER
    assert format_image_status("http://x/images/1", b"abc") == "http://x/images/1 (3 bytes)"
