"""Pydantic v2 models for the verification backend's JSON payloads.

Every endpoint wraps its payload in the same envelope::

    {"success": true, "message": "...", "data": {...}, "timestamp": "..."}

Field names on the wire are camelCase; the models expose snake_case
attributes and accept either form.  Separate from credverify.models
(dataclasses), which hold workflow-side state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ApiEnvelope(_WireModel):
    """Common response wrapper returned by every backend endpoint."""

    success: bool
    message: str | None = None
    data: Any = None
    timestamp: Any = None


class FileStructure(_WireModel):
    """Structural summary of the submitted document."""

    root_type: str = Field(alias="rootType")
    total_fields: int = Field(alias="totalFields")
    top_level_keys: tuple[str, ...] = Field(default=(), alias="topLevelKeys")
    # Jackson drops the "is" prefix from boolean getters, so the backend sends "valid"
    is_valid: bool = Field(default=False, validation_alias=AliasChoices("isValid", "valid"))
    encoding: str | None = None

    @field_validator("top_level_keys", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


class FileInfoResult(_WireModel):
    """Server-side analysis of one submitted credential file."""

    file_name: str = Field(alias="fileName")
    file_id: str = Field(alias="fileId")
    file_size: int = Field(alias="fileSize")
    content_type: str | None = Field(default=None, alias="contentType")
    detected_format: str = Field(alias="detectedFormat")
    format_confidence: float = Field(ge=0.0, le=1.0, alias="formatConfidence")
    structure: FileStructure
    status: str
    validation_messages: tuple[str, ...] = Field(default=(), alias="validationMessages")
    processed_at: datetime = Field(alias="processedAt")

    @field_validator("validation_messages", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("processed_at", mode="before")
    @classmethod
    def _accept_backend_timestamp(cls, value: Any) -> Any:
        # Backend serialises LocalDateTime as "yyyy-MM-dd HH:mm:ss"
        if isinstance(value, str) and len(value) >= 19 and value[10] == " ":
            return value[:10] + "T" + value[11:]
        return value


class FormatCatalog(_WireModel):
    """Formats the backend can detect, plus its upload constraints."""

    supported: dict[str, str] = Field(default_factory=dict)
    max_file_size: str | None = Field(default=None, alias="maxFileSize")
    accepted_content_types: tuple[str, ...] = Field(default=(), alias="acceptedContentTypes")


class HealthStatus(_WireModel):
    """Payload of ``GET /health``."""

    status: str
    application: str | None = None
    version: str | None = None
    timestamp: int | None = None

    @property
    def is_up(self) -> bool:
        return self.status == "UP"
