"""Error taxonomy shared by the client and the state machine.

The client raises these; the state machine converts them into ``ErrorInfo``
notifications so that no raw transport error reaches the user unformatted.
"""

from __future__ import annotations

from typing import Optional

import httpx

from artifact_vault.models.state import ErrorInfo


class VaultError(Exception):
    """Base class for failures surfaced by the artifact client."""

    category = "error"

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(VaultError):
    """Raised for bad input, e.g. an empty name or an unsupported image."""

    category = "validation"


class NotFoundError(VaultError):
    """Raised when operating on a record the service no longer knows."""

    category = "not_found"


class TransportError(VaultError):
    """Raised when the service is unreachable or answers with a server error."""

    category = "transport"


class ConfirmationDeclined(Exception):
    """The user declined a destructive action. Not an error."""


CATEGORY_LABELS = {
    ValidationError.category: "Invalid input",
    NotFoundError.category: "Not found",
    TransportError.category: "Service unavailable",
}


def describe_error(exc: BaseException, operation: str) -> ErrorInfo:
    """
    Build a user-facing notification for a failed operation.

    Parameters
    ----------
    exc : BaseException
        The failure. Unrecognised exceptions are reported as transport errors.
    operation : str
        Short name of the operation that failed, e.g. ``"create"``.

    Returns
    -------
    ErrorInfo
        Category, formatted message and operation name.
    """
    if isinstance(exc, VaultError):
        category = exc.category
        detail = exc.message
    elif isinstance(exc, httpx.HTTPError):
        category = TransportError.category
        detail = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
    else:
        category = TransportError.category
        detail = str(exc) or type(exc).__name__

    label = CATEGORY_LABELS.get(category, "Error")
    return ErrorInfo(
        category=category,
        message=f"{label}: {operation} failed. {detail}",
        operation=operation,
    )
