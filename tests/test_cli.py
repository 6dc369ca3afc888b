"""CLI tests: upload, formats and health commands against a fake backend."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from credverify.cli import app
from credverify.constants import UPLOAD_PATH
from credverify.upload.client import CredentialServiceClient

from conftest import FakeBackend, envelope

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    logger = logging.getLogger("credverify")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def cli_backend(monkeypatch) -> FakeBackend:
    """Route every client the CLI builds to a FakeBackend."""
    backend = FakeBackend()

    def _client_factory(config):
        http = httpx.AsyncClient(
            base_url=config.base_url, transport=httpx.MockTransport(backend)
        )
        return CredentialServiceClient(config, http_client=http)

    monkeypatch.setattr("credverify.cli.CredentialServiceClient", _client_factory)
    return backend


def _invoke(tmp_path: Path, *args: str):
    return runner.invoke(
        app,
        ["--server", "http://testserver", "--config", str(tmp_path / "none.json"), *args],
    )


class TestUploadCommand:
    def test_successful_upload(self, tmp_path, cli_backend, credential_file):
        result = _invoke(tmp_path, "upload", str(credential_file), "-m", "cli test")
        assert result.exit_code == 0, result.output
        assert "SD-JWT" in result.output
        assert "92.0%" in result.output
        assert "VALID" in result.output
        (request,) = cli_backend.calls_to(UPLOAD_PATH)
        assert b"cli test" in request.content

    def test_show_formats(self, tmp_path, cli_backend, credential_file):
        result = _invoke(tmp_path, "upload", str(credential_file), "--show-formats")
        assert result.exit_code == 0, result.output
        assert "Selective Disclosure JWT" in result.output

    def test_server_error(self, tmp_path, cli_backend, credential_file):
        cli_backend.upload = (
            500,
            envelope(None, success=False, message="Unexpected error: parser crashed"),
        )
        result = _invoke(tmp_path, "upload", str(credential_file))
        assert result.exit_code == 1
        assert "Unexpected error: parser crashed" in result.output

    def test_oversized_file_never_reaches_backend(self, tmp_path, cli_backend):
        big = tmp_path / "big.json"
        with open(big, "wb") as f:
            f.truncate(11 * 1024 * 1024)
        result = _invoke(tmp_path, "upload", str(big))
        assert result.exit_code == 1
        assert "10MB" in result.output
        assert cli_backend.requests == []

    def test_unusual_extension_warns(self, tmp_path, cli_backend):
        doc = tmp_path / "scan.pdf"
        doc.write_bytes(b"%PDF-1.7")
        result = _invoke(tmp_path, "upload", str(doc))
        assert "Warning" in result.output
        assert ".pdf" in result.output

    def test_missing_file(self, tmp_path, cli_backend):
        result = _invoke(tmp_path, "upload", str(tmp_path / "absent.json"))
        assert result.exit_code != 0


class TestFormatsCommand:
    def test_lists_formats(self, tmp_path, cli_backend):
        result = _invoke(tmp_path, "formats")
        assert result.exit_code == 0, result.output
        assert "ISO Mobile Driving License" in result.output

    def test_catalog_unavailable(self, tmp_path, cli_backend):
        cli_backend.catalog = (500, envelope(None, success=False, message="down"))
        result = _invoke(tmp_path, "formats")
        assert result.exit_code == 1
        assert "Could not load supported formats" in result.output


class TestHealthCommand:
    def test_online(self, tmp_path, cli_backend):
        result = _invoke(tmp_path, "health")
        assert result.exit_code == 0, result.output
        assert "Backend Online" in result.output

    def test_down(self, tmp_path, cli_backend):
        cli_backend.health = (200, envelope({"status": "DOWN"}))
        result = _invoke(tmp_path, "health")
        assert result.exit_code == 1
        assert "Backend Error" in result.output

    def test_offline(self, tmp_path, monkeypatch):
        def _refuse(request):
            raise httpx.ConnectError("connection refused")

        def _client_factory(config):
            http = httpx.AsyncClient(
                base_url=config.base_url, transport=httpx.MockTransport(_refuse)
            )
            return CredentialServiceClient(config, http_client=http)

        monkeypatch.setattr("credverify.cli.CredentialServiceClient", _client_factory)
        result = _invoke(tmp_path, "health")
        assert result.exit_code == 1
        assert "Backend Offline" in result.output
