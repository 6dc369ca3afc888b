"""Shared pytest fixtures for credverify tests.

Provides canned backend payloads, credential files on disk, and a factory
for CredentialServiceClient instances wired to an httpx.MockTransport so no
test touches the network.
"""

from __future__ import annotations

import asyncio
import copy
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from credverify.models import ClientConfig, SelectedFile
from credverify.upload.client import CredentialServiceClient

TEST_BASE_URL = "http://testserver"

SD_JWT_RESULT: dict[str, Any] = {
    "fileName": "credential.json",
    "fileId": "f-0001",
    "fileSize": 5120,
    "contentType": "application/json",
    "detectedFormat": "SD-JWT",
    "formatConfidence": 0.92,
    "structure": {
        "rootType": "object",
        "totalFields": 4,
        "topLevelKeys": ["iss", "vct", "sd"],
        "isValid": True,
        "encoding": "UTF-8",
    },
    "status": "VALID",
    "validationMessages": ["Issuer claim present", "Disclosures decoded"],
    "processedAt": "2025-01-15 10:30:00",
}

FORMAT_CATALOG: dict[str, Any] = {
    "supported": {
        "SD-JWT": "Selective Disclosure JWT",
        "W3C-VC-1.1": "W3C Verifiable Credentials 1.1",
        "ISO-mDL": "ISO Mobile Driving License",
        "CBOR": "Concise Binary Object Representation",
    },
    "maxFileSize": "10MB",
    "acceptedContentTypes": [
        "application/json",
        "text/plain",
        "application/jwt",
        "application/cbor",
    ],
}

HEALTH_UP: dict[str, Any] = {
    "status": "UP",
    "application": "UniVC",
    "version": "1.0.0",
    "timestamp": 1736937000000,
}


def envelope(data: Any, success: bool = True, message: str = "ok") -> dict[str, Any]:
    """Wrap *data* the way every backend endpoint does."""
    return {
        "success": success,
        "message": message,
        "data": data,
        "timestamp": "2025-01-15T10:30:00",
    }


def sd_jwt_result(**overrides: Any) -> dict[str, Any]:
    payload = copy.deepcopy(SD_JWT_RESULT)
    payload.update(overrides)
    return payload


Handler = Callable[[httpx.Request], Any]


def mock_http(handler: Handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by *handler*."""
    return httpx.AsyncClient(base_url=TEST_BASE_URL, transport=httpx.MockTransport(handler))


def build_client(
    http: httpx.AsyncClient, **config_overrides: Any
) -> CredentialServiceClient:
    """CredentialServiceClient on an injected *http* client; the caller closes *http*."""
    settings: dict[str, Any] = {
        "base_url": TEST_BASE_URL,
        "progress_interval": 0.01,
        "catalog_retries": 2,
    }
    settings.update(config_overrides)
    return CredentialServiceClient(ClientConfig(**settings), http_client=http)


def respond(status: int, body: Any) -> httpx.Response:
    """Fresh response; dict/list bodies are JSON, str/bytes are sent raw."""
    if isinstance(body, (dict, list)) or body is None:
        return httpx.Response(status, json=body)
    return httpx.Response(status, content=body)


class FakeBackend:
    """Routes requests to canned responses and records what it received.

    Each route is a ``(status, body)`` pair; a fresh httpx.Response is built
    per request.  ``upload_error`` makes uploads raise instead of answer.
    ``upload_gate`` can be cleared to hold upload responses until the test
    sets it, which keeps a transfer in flight.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.upload: tuple[int, Any] = (
            200,
            envelope(SD_JWT_RESULT, message="File processed successfully"),
        )
        self.catalog: tuple[int, Any] = (
            200,
            envelope(FORMAT_CATALOG, message="Supported formats"),
        )
        self.health: tuple[int, Any] = (
            200,
            envelope(HEALTH_UP, message="Application is running"),
        )
        self.upload_error: Exception | None = None
        self.catalog_error: Exception | None = None
        self.upload_gate = asyncio.Event()
        self.upload_gate.set()

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/v1/credentials/upload":
            await self.upload_gate.wait()
            if self.upload_error is not None:
                raise self.upload_error
            return respond(*self.upload)
        if path == "/api/v1/credentials/formats":
            if self.catalog_error is not None:
                raise self.catalog_error
            return respond(*self.catalog)
        if path == "/health":
            return respond(*self.health)
        return respond(404, envelope(None, success=False, message="Not found"))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def client(backend: FakeBackend):
    """Client wired to the fake backend; closed after the test."""
    async with mock_http(backend) as http:
        yield build_client(http)


@pytest.fixture
def credential_file(tmp_path: Path) -> Path:
    """A ~5 KB JSON credential on disk."""
    path = tmp_path / "credential.json"
    body = {"iss": "https://issuer.example", "vct": "IdentityCredential", "sd": ["x" * 64] * 70}
    path.write_text(json.dumps(body))
    return path


@pytest.fixture
def selected(credential_file: Path) -> SelectedFile:
    return SelectedFile.from_path(credential_file)


@pytest.fixture
def oversized() -> SelectedFile:
    """An 11 MB file that never needs to exist on disk."""
    return SelectedFile(
        name="huge.json",
        size=11 * 1024 * 1024,
        content_type="application/json",
        path=Path("/nonexistent/huge.json"),
    )
