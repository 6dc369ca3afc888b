"""HTTP client for the credential verification backend.

Wraps three endpoints:
  1. ``GET  /api/v1/credentials/formats`` -- supported-format catalog
  2. ``POST /api/v1/credentials/upload``  -- multipart submission + analysis
  3. ``GET  /health``                     -- liveness probe

Every response is decoded from the backend's common envelope and translated
into either a typed payload or one of the errors in
:mod:`credverify.upload.exceptions`.  Uploads are never retried; only the
idempotent catalog GET is.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from credverify.constants import (
    FORMATS_PATH,
    GENERIC_UPLOAD_ERROR,
    HEALTH_PATH,
    UPLOAD_PATH,
)
from credverify.models import ClientConfig, SelectedFile
from credverify.upload.exceptions import (
    CatalogUnavailableError,
    MalformedResponseError,
    TransferFailedError,
    TransferRejectedError,
)
from credverify.upload.schemas import (
    ApiEnvelope,
    FileInfoResult,
    FormatCatalog,
    HealthStatus,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CredentialServiceClient:
    """Async client for the verification backend.

    Usage::

        async with CredentialServiceClient(ClientConfig()) as client:
            catalog = await client.fetch_format_catalog()
            result = await client.submit_file(selected, "uploaded from CLI")

    An existing :class:`httpx.AsyncClient` may be injected (tests pass one
    built on :class:`httpx.MockTransport`); the caller then owns its
    lifecycle.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ------------------------------------------------------------------
    # Format catalog
    # ------------------------------------------------------------------

    async def fetch_format_catalog(self) -> FormatCatalog:
        """Fetch the supported-format catalog.

        Transport errors are retried up to ``catalog_retries`` attempts with
        exponential backoff.

        Raises:
            CatalogUnavailableError: On network failure, non-2xx status or
                an undecodable body.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max(1, self._config.catalog_retries)),
                wait=wait_exponential(multiplier=0.5, max=4),
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await self._http.get(FORMATS_PATH)
        except httpx.HTTPError as exc:
            raise CatalogUnavailableError(f"Could not reach format catalog: {exc}") from exc

        if response.is_error:
            raise CatalogUnavailableError(
                f"Format catalog returned HTTP {response.status_code}"
            )
        try:
            envelope = _decode_envelope(response)
            if not envelope.success:
                raise CatalogUnavailableError(
                    envelope.message or "Format catalog request was rejected"
                )
            return _decode_payload(envelope, FormatCatalog)
        except MalformedResponseError as exc:
            raise CatalogUnavailableError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def submit_file(
        self, file: SelectedFile, description: str | None = None
    ) -> FileInfoResult:
        """Send *file* and *description* as multipart form data.

        Args:
            file: The selected file; its bytes are read here, off the
                event loop.
            description: Free-text description sent alongside the file.
                Defaults to ``config.upload_description``.

        Returns:
            The backend's analysis of the file.

        Raises:
            TransferRejectedError: Non-2xx status or ``success: false``.
            TransferFailedError: Network-level failure, or the local file
                could not be read.
            MalformedResponseError: 2xx body that is not a valid
                FileInfoResult envelope.
        """
        if description is None:
            description = self._config.upload_description

        try:
            content = await asyncio.to_thread(file.read_bytes)
        except OSError as exc:
            raise TransferFailedError(exc) from exc

        try:
            response = await self._http.post(
                UPLOAD_PATH,
                files={"file": (file.name, content, file.content_type)},
                data={"description": description},
            )
        except httpx.HTTPError as exc:
            logger.warning("Upload of %s failed at transport level: %s", file.name, exc)
            raise TransferFailedError(exc) from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Upload of %s rejected with HTTP %d: %s",
                file.name,
                response.status_code,
                message,
            )
            raise TransferRejectedError(message, status_code=response.status_code)

        envelope = _decode_envelope(response)
        if not envelope.success:
            raise TransferRejectedError(
                envelope.message or GENERIC_UPLOAD_ERROR,
                status_code=response.status_code,
            )
        result = _decode_payload(envelope, FileInfoResult)
        logger.info(
            "Uploaded %s -> %s (%s, confidence %.2f)",
            file.name,
            result.file_id,
            result.detected_format,
            result.format_confidence,
        )
        return result

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def check_health(self) -> HealthStatus:
        """Probe ``GET /health``.

        Raises:
            TransferFailedError: Backend unreachable.
            TransferRejectedError: Non-2xx response or ``success: false``.
            MalformedResponseError: Undecodable body.
        """
        try:
            response = await self._http.get(HEALTH_PATH)
        except httpx.HTTPError as exc:
            raise TransferFailedError(exc) from exc
        if response.is_error:
            raise TransferRejectedError(_error_message(response), response.status_code)
        envelope = _decode_envelope(response)
        if not envelope.success:
            raise TransferRejectedError(
                envelope.message or "Health check was rejected",
                status_code=response.status_code,
            )
        return _decode_payload(envelope, HealthStatus)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> CredentialServiceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()


# ---------------------------------------------------------------------------
# Response decoding helpers
# ---------------------------------------------------------------------------


def _decode_envelope(response: httpx.Response) -> ApiEnvelope:
    try:
        return ApiEnvelope.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise MalformedResponseError(
            f"Unexpected response body from {response.request.url.path}"
        ) from exc


def _decode_payload(envelope: ApiEnvelope, model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate(envelope.data)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Response data is not a valid {model.__name__}: "
            f"{exc.error_count()} validation error(s)"
        ) from exc


def _error_message(response: httpx.Response) -> str:
    """Pull the backend's ``message`` out of an error response, if any."""
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return GENERIC_UPLOAD_ERROR
