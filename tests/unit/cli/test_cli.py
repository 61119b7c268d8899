import json
from unittest.mock import patch

from artifact_vault.cli import app
from artifact_vault.core.client import ArtifactClient
from artifact_vault.core.machine import ArtifactStateMachine
from artifact_vault.core.settings import VaultSettings
from tests.helpers.fake_service import BASE_URL


def _patched_machine(service):
    def _build(settings, confirm=None):
        client = ArtifactClient(BASE_URL, transport=service.transport())
        return ArtifactStateMachine(client, confirm=confirm)

    return patch("artifact_vault.cli.build_machine", side_effect=_build)


def test_list_renders_service_artifacts(cli_runner, service) -> None:
    with _patched_machine(service):
        result = cli_runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "Clay Lamp" in result.stdout
    assert "Glass Bead" in result.stdout
    assert "demo data" not in result.stdout


def test_list_json_output(cli_runner, service) -> None:
    with _patched_machine(service):
        result = cli_runner.invoke(app, ["list", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [item["id"] for item in data] == ["1", "2"]
    assert data[1]["fingerprint_data"]["dominant_color"]["hsv"] == [200.0, 120.4, 180.6]


def test_list_falls_back_to_demo_data(cli_runner, service) -> None:
    service.offline = True
    with _patched_machine(service):
        result = cli_runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "demo data" in result.stdout
    assert "Service unavailable" in result.stdout
    assert "Bronze Coin" in result.stdout


def test_show_renders_details_with_placeholder_image(cli_runner, service) -> None:
    with _patched_machine(service):
        result = cli_runner.invoke(app, ["show", "2"])

    assert result.exit_code == 0
    assert "Glass Bead" in result.stdout
    assert "0.950" in result.stdout
    assert "200, 120, 181" in result.stdout
    assert "no image available" in result.stdout


def test_show_unknown_artifact_exits_nonzero(cli_runner, service) -> None:
    with _patched_machine(service):
        result = cli_runner.invoke(app, ["show", "99"])

    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_demo_command_prints_demo_set(cli_runner) -> None:
    result = cli_runner.invoke(app, ["demo", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert len(data) >= 2
    assert all(item["id"].startswith("demo-") for item in data)


def test_global_options_override_settings(cli_runner, service, monkeypatch) -> None:
    monkeypatch.setenv("ARTIFACT_VAULT_API_URL", "http://from-env.test")
    captured = {}

    def _build(settings: VaultSettings, confirm=None):
        captured["settings"] = settings
        client = ArtifactClient(BASE_URL, transport=service.transport())
        return ArtifactStateMachine(client)

    with patch("artifact_vault.cli.build_machine", side_effect=_build):
        result = cli_runner.invoke(
            app, ["--api-url", "http://override.test/", "--timeout", "3", "list"]
        )

    assert result.exit_code == 0
    assert captured["settings"].api_url == "http://override.test"
    assert captured["settings"].timeout_seconds == 3.0
