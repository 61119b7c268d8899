import httpx

from artifact_vault.core.errors import (
    NotFoundError,
    TransportError,
    ValidationError,
    describe_error,
)


def test_describe_error_uses_category_labels() -> None:
    cases = [
        (ValidationError("Artifact name cannot be empty."), "validation", "Invalid input"),
        (NotFoundError("Artifact '9' not found"), "not_found", "Not found"),
        (TransportError("HTTP 503"), "transport", "Service unavailable"),
    ]
    for exc, category, label in cases:
        info = describe_error(exc, "create")
        assert info.category == category
        assert info.operation == "create"
        assert info.message.startswith(f"{label}: create failed.")
        assert exc.message in info.message


def test_describe_error_formats_raw_httpx_errors() -> None:
    request = httpx.Request("GET", "http://vault.test/artifacts")
    info = describe_error(httpx.ConnectError("refused", request=request), "refresh")

    assert info.category == "transport"
    assert info.message == "Service unavailable: refresh failed. ConnectError: refused"


def test_describe_error_handles_unknown_exceptions() -> None:
    info = describe_error(RuntimeError(), "delete")
    assert info.category == "transport"
    assert info.message.endswith("RuntimeError")
