from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name, "")
    if raw.strip() == "":
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if raw == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if raw == "":
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _env_log_level(name: str, default: str) -> str:
    value = _env_str(name, default).upper()
    return value if value in LOG_LEVELS else default


@dataclass(frozen=True)
class VaultSettings:
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = 30.0
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "VaultSettings":
        return cls(
            api_url=_env_str("ARTIFACT_VAULT_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout_seconds=_env_float("ARTIFACT_VAULT_TIMEOUT_SECONDS", 30.0),
            max_upload_bytes=_env_int(
                "ARTIFACT_VAULT_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES
            ),
            log_level=_env_log_level("ARTIFACT_VAULT_LOG_LEVEL", "WARNING"),
        )

    def with_overrides(
        self,
        *,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        log_level: Optional[str] = None,
    ) -> "VaultSettings":
        """Return a copy with any explicitly given values replaced."""
        changes = {}
        if api_url:
            changes["api_url"] = api_url.rstrip("/")
        if timeout_seconds is not None and timeout_seconds > 0:
            changes["timeout_seconds"] = timeout_seconds
        if log_level and log_level.upper() in LOG_LEVELS:
            changes["log_level"] = log_level.upper()
        return replace(self, **changes)
