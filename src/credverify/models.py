"""Data models and enums for the credential upload workflow.

Workflow-side state lives here as plain dataclasses.  Backend payloads are
decoded with the pydantic models in :mod:`credverify.upload.schemas`.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from credverify.constants import (
    ACCEPTED_EXTENSIONS,
    DEFAULT_BASE_URL,
    DEFAULT_UPLOAD_DESCRIPTION,
    MAX_FILE_SIZE_BYTES,
)

if TYPE_CHECKING:
    from credverify.upload.schemas import FileInfoResult


# mimetypes has no entry for these credential encodings
_EXTRA_CONTENT_TYPES: dict[str, str] = {
    ".jwt": "application/jwt",
    ".cbor": "application/cbor",
    ".json": "application/json",
    ".txt": "text/plain",
}


class UploadPhase(str, Enum):
    """Phase reported alongside the progress percentage."""

    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class WorkflowState(str, Enum):
    """States of the upload workflow (mirrors UploadWorkflowSM state values)."""

    IDLE = "idle"
    SELECTED = "selected"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class SelectedFile:
    """A file chosen for submission.

    The file body is not held in memory; ``path`` is the raw handle and is
    only read when the transfer starts.
    """

    name: str
    size: int
    content_type: str
    path: Path

    @classmethod
    def from_path(cls, path: Path | str) -> SelectedFile:
        """Build a SelectedFile from a filesystem path (stat only, no read)."""
        path = Path(path)
        return cls(
            name=path.name,
            size=path.stat().st_size,
            content_type=guess_content_type(path.name),
            path=path,
        )

    @property
    def extension(self) -> str:
        return Path(self.name).suffix.lower()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True, slots=True)
class UploadProgress:
    """Progress of a single attempt.  Replaced wholesale, never mutated."""

    percent: int = 0
    phase: UploadPhase = UploadPhase.IDLE
    message: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.percent <= 100:
            raise ValueError(f"percent must be within 0-100, got {self.percent}")


IDLE_PROGRESS = UploadProgress()


@dataclass(frozen=True, slots=True)
class WorkflowSnapshot:
    """Everything the view layer needs to render the current attempt.

    ``selected_file``, ``progress`` and ``result``/``error`` describe the
    same attempt and are always replaced together.
    """

    state: WorkflowState = WorkflowState.IDLE
    selected_file: SelectedFile | None = None
    progress: UploadProgress = IDLE_PROGRESS
    result: FileInfoResult | None = None
    error: str | None = None
    attempt: int = 0

    @property
    def in_flight(self) -> bool:
        return self.state is WorkflowState.UPLOADING


@dataclass
class ClientConfig:
    """Configuration for the verification service client and workflow.

    Controls the backend location, the client-side size ceiling, HTTP
    timeouts, catalog retry budget, and the advisory progress estimator.
    """

    base_url: str = DEFAULT_BASE_URL
    max_file_size: int = MAX_FILE_SIZE_BYTES
    timeout_seconds: float = 30.0
    catalog_retries: int = 3
    upload_description: str = DEFAULT_UPLOAD_DESCRIPTION
    progress_interval: float = 0.1
    progress_step: int = 10
    progress_cap: int = 90
    accepted_extensions: list[str] = field(default_factory=lambda: list(ACCEPTED_EXTENSIONS))


@dataclass
class AppState:
    """Shared state across all CLI commands. Initialized in app callback."""

    config: ClientConfig
    verbose: bool = False


def guess_content_type(filename: str) -> str:
    """Best-effort content type for *filename*; falls back to octet-stream."""
    suffix = Path(filename).suffix.lower()
    if suffix in _EXTRA_CONTENT_TYPES:
        return _EXTRA_CONTENT_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"
