import pytest
from typer.testing import CliRunner

from artifact_vault.core.client import ArtifactClient, ImageFile
from artifact_vault.core.machine import ArtifactStateMachine
from tests.helpers.fake_service import BASE_URL, FakeArtifactService

# Smallest valid PNG header; the fake service never decodes it.
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


# --- Core Fixtures ---


@pytest.fixture
def service() -> FakeArtifactService:
    """
    A fake artifact service seeded with two artifacts, ids "1" and "2".
    """
    return FakeArtifactService(
        [
            {"name": "Clay Lamp", "description": "Oil lamp, wheel-made."},
            {
                "name": "Glass Bead",
                "description": "",
                "fingerprint_data": {
                    "irregularities": {
                        "circularity_score": 0.95,
                        "edge_jaggedness": 0.02,
                    },
                    "dominant_color": {"hsv": [200.0, 120.4, 180.6]},
                },
            },
        ]
    )


@pytest.fixture
def client(service: FakeArtifactService) -> ArtifactClient:
    """An ArtifactClient whose requests are answered by the fake service."""
    return ArtifactClient(BASE_URL, timeout=5.0, transport=service.transport())


@pytest.fixture
def make_machine(client: ArtifactClient):
    """
    Factory for state machines sharing the fake-service client.
    ``confirm`` defaults to approving every delete.
    """

    def _make(confirm=None) -> ArtifactStateMachine:
        return ArtifactStateMachine(client, confirm=confirm or (lambda message: True))

    return _make


@pytest.fixture
def png_image() -> ImageFile:
    return ImageFile(filename="coin.png", content=PNG_BYTES, content_type="image/png")


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
