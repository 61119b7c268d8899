from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar

import httpx

from artifact_vault.core.errors import VaultError, describe_error
from artifact_vault.models.state import ErrorInfo

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of one client call: either a value or a formatted error."""

    value: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, exc: BaseException, operation: str) -> "OperationResult[T]":
        return cls(error=describe_error(exc, operation))


async def attempt(operation: str, call: Awaitable[T]) -> OperationResult[T]:
    """
    Await a client call and capture service failures as a result value.

    Only ``VaultError`` and ``httpx.HTTPError`` are captured; programming errors
    propagate.
    """
    try:
        return OperationResult.success(await call)
    except (VaultError, httpx.HTTPError) as exc:
        return OperationResult.failure(exc, operation)
