"""
Artifact service client.

The only component that performs network I/O. Each operation maps to one
endpoint of the remote artifact service and either returns parsed models or
raises one of the typed errors in ``artifact_vault.core.errors``. Nothing here
retries; callers decide what a failure means.

Usage:
    async with ArtifactClient(settings.api_url) as client:
        artifacts = await client.list_artifacts()
        created = await client.create_artifact(ArtifactDraft(name="Roman Coin"))
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

import httpx
import pydantic

from artifact_vault.core.errors import NotFoundError, TransportError, ValidationError
from artifact_vault.core.settings import DEFAULT_MAX_UPLOAD_BYTES, VaultSettings
from artifact_vault.core.validation import validate_draft, validate_image
from artifact_vault.models.artifact import Artifact, ArtifactDraft

logger = logging.getLogger(__name__)

VALIDATION_STATUS_CODES = (400, 413, 415, 422)


@dataclass(frozen=True)
class ImageFile:
    """An image chosen for upload, held in memory until it is sent."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )

    @property
    def size(self) -> int:
        return len(self.content)


def _error_detail(response: httpx.Response) -> str:
    """Extract the service's own error message, falling back to the raw body."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
            if value:
                return str(value)
    text = response.text.strip()
    return text[:200] if text else f"HTTP {response.status_code}"


def _summarize_payload_error(exc: Exception) -> str:
    """One-line description of a malformed payload, without pydantic's dump."""
    if isinstance(exc, pydantic.ValidationError):
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "record"
        return f"field '{location}': {first.get('msg', 'invalid value')}"
    return "response body is not valid JSON"


class ArtifactClient:
    """
    Async client for the artifact service.

    Handles:
    - One lazily created ``httpx.AsyncClient`` shared by all calls
    - Mapping HTTP statuses to ``ValidationError``, ``NotFoundError`` and
      ``TransportError``
    - Parsing responses into ``Artifact`` models

    The base URL is injected at construction; the client never reads the
    process environment.

    Parameters
    ----------
    base_url : str
        Service address, e.g. ``http://localhost:8000``.
    timeout : float, default 30.0
        Per-request timeout in seconds.
    max_upload_bytes : int, optional
        Largest image accepted for upload.
    transport : httpx.AsyncBaseTransport, optional
        Transport override, used to fake the service in tests.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        *,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_upload_bytes = max_upload_bytes
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: VaultSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ArtifactClient":
        return cls(
            settings.api_url,
            settings.timeout_seconds,
            max_upload_bytes=settings.max_upload_bytes,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            try:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout),
                    follow_redirects=True,
                    transport=self._transport,
                )
            except httpx.InvalidURL as e:
                raise TransportError(
                    f"Invalid artifact service URL '{self.base_url}': {e}"
                ) from e
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "ArtifactClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # --- Transport ---

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        logger.debug(f"{method} {self.base_url}{path}")
        try:
            return await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{method} {path} timed out after {self.timeout}s"
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"Could not reach artifact service at {self.base_url}: {e}"
            ) from e
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid request URL for {method} {path}: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, resource: str) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = _error_detail(response)
        if status == 404:
            raise NotFoundError(f"{resource} not found: {detail}", status_code=status)
        if status in VALIDATION_STATUS_CODES:
            raise ValidationError(detail, status_code=status)
        raise TransportError(
            f"Artifact service returned HTTP {status}: {detail}", status_code=status
        )

    @staticmethod
    def _parse_artifact(response: httpx.Response) -> Artifact:
        try:
            return Artifact.model_validate(response.json())
        except ValueError as e:
            raise TransportError(
                f"Unexpected artifact payload from service: {_summarize_payload_error(e)}",
                status_code=response.status_code,
            ) from e

    # --- Operations ---

    async def list_artifacts(self) -> List[Artifact]:
        """
        Fetch the full artifact collection.

        ``GET /artifacts``. Records that cannot be parsed at all (for example
        a missing ``name``) are skipped and logged so the rest of the
        collection still loads.

        Returns
        -------
        List[Artifact]
            Every parseable artifact, in service order.

        Raises
        ------
        TransportError
            On network failure, any error status, or a body that is not a list.
        """
        response = await self._request("GET", "/artifacts")
        if response.status_code >= 400:
            raise TransportError(
                f"Artifact service returned HTTP {response.status_code}: "
                f"{_error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError("Artifact list is not valid JSON.") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportError(
                f"Expected a list of artifacts, got {type(data).__name__}"
            )

        artifacts = []
        for index, item in enumerate(data):
            try:
                artifacts.append(Artifact.model_validate(item))
            except pydantic.ValidationError as e:
                logger.warning(
                    f"Skipping artifact #{index} in listing: {_summarize_payload_error(e)}"
                )
        return artifacts

    async def create_artifact(self, draft: ArtifactDraft) -> Artifact:
        """
        Create an artifact; the service assigns its id.

        ``POST /artifacts``

        Parameters
        ----------
        draft : ArtifactDraft
            Name and description to store. The name must not be empty.

        Returns
        -------
        Artifact
            The stored record, including its new id.

        Raises
        ------
        ValidationError
            If the name is empty or the service rejects the draft.
        TransportError
            On any other failure.
        """
        validate_draft(draft)
        response = await self._request("POST", "/artifacts", json=draft.to_payload())
        if response.status_code == 404:
            raise TransportError(
                f"Artifact service has no /artifacts endpoint at {self.base_url}",
                status_code=404,
            )
        self._raise_for_status(response, "Artifact collection")
        created = self._parse_artifact(response)
        logger.info(f"Created artifact {created.id} ({created.name})")
        return created

    async def update_artifact(self, artifact_id: str, draft: ArtifactDraft) -> Artifact:
        """
        Replace the editable fields of an artifact.

        ``PUT /artifacts/{id}``

        Raises
        ------
        NotFoundError
            If the service does not know the id.
        ValidationError
            If the name is empty or the service rejects the draft.
        TransportError
            On any other failure.
        """
        validate_draft(draft)
        response = await self._request(
            "PUT", f"/artifacts/{artifact_id}", json=draft.to_payload()
        )
        self._raise_for_status(response, f"Artifact '{artifact_id}'")
        updated = self._parse_artifact(response)
        logger.info(f"Updated artifact {updated.id}")
        return updated

    async def delete_artifact(self, artifact_id: str) -> None:
        """
        Delete an artifact. An artifact that is already gone counts as deleted.

        ``DELETE /artifacts/{id}``

        Raises
        ------
        TransportError
            On network failure or a server error.
        """
        response = await self._request("DELETE", f"/artifacts/{artifact_id}")
        if response.status_code == 404:
            logger.debug(f"Artifact {artifact_id} was already deleted")
            return
        if response.status_code >= 400:
            raise TransportError(
                f"Artifact service returned HTTP {response.status_code}: "
                f"{_error_detail(response)}",
                status_code=response.status_code,
            )
        logger.info(f"Deleted artifact {artifact_id}")

    async def upload_image(self, artifact_id: str, image: ImageFile) -> Artifact:
        """
        Attach an image to an existing artifact.

        ``POST /artifacts/{id}/upload`` with a single multipart ``file`` field.

        Parameters
        ----------
        artifact_id : str
            Target artifact; it must already exist on the service.
        image : ImageFile
            The image to send.

        Returns
        -------
        Artifact
            The updated record, usually carrying fresh fingerprint data.

        Raises
        ------
        ValidationError
            For unsupported file types or sizes.
        NotFoundError
            If the artifact does not exist.
        TransportError
            On any other failure.
        """
        validate_image(image, self.max_upload_bytes)
        files = {"file": (image.filename, image.content, image.content_type)}
        response = await self._request(
            "POST", f"/artifacts/{artifact_id}/upload", files=files
        )
        self._raise_for_status(response, f"Artifact '{artifact_id}'")
        updated = self._parse_artifact(response)
        logger.info(f"Uploaded {image.filename} ({image.size} bytes) to {artifact_id}")
        return updated

    def image_url(self, artifact_id: str) -> str:
        """URL of the stored image for an artifact. No I/O."""
        return f"{self.base_url}/images/{artifact_id}"

    async def fetch_image(self, artifact_id: str) -> Optional[bytes]:
        """
        Download the stored image bytes.

        ``GET /images/{id}``

        Returns
        -------
        Optional[bytes]
            The raw bytes, or None when the artifact has no image.

        Raises
        ------
        TransportError
            On network failure or a server error.
        """
        response = await self._request("GET", f"/images/{artifact_id}")
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise TransportError(
                f"Image request returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.content
