"""Presentation rules for backend analysis results.

Pure functions that map raw result fields to display tiers.  Nothing here
alters stored data; callers pick colours and icons from the returned enums.
"""

from __future__ import annotations

from enum import Enum


class ConfidenceSeverity(str, Enum):
    """Badge tier for a format-detection confidence score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class StatusSeverity(str, Enum):
    """Icon tier for a validity status string."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


HIGH_CONFIDENCE_THRESHOLD = 0.9
MEDIUM_CONFIDENCE_THRESHOLD = 0.7

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def confidence_severity(confidence: float) -> ConfidenceSeverity:
    """``HIGH`` at 0.9 and above, ``MEDIUM`` at 0.7 and above, else ``LOW``."""
    if confidence >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceSeverity.HIGH
    if confidence >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceSeverity.MEDIUM
    return ConfidenceSeverity.LOW


def status_severity(status: str | None) -> StatusSeverity:
    """Map a backend status to an icon tier.

    Unrecognised values (including ``UNKNOWN`` and ``None``) are neutral;
    this never raises.
    """
    if status == "VALID":
        return StatusSeverity.POSITIVE
    if status == "INVALID":
        return StatusSeverity.NEGATIVE
    return StatusSeverity.NEUTRAL


def format_confidence(confidence: float) -> str:
    """Render a 0-1 score as a percentage with one decimal, e.g. ``92.0%``."""
    return f"{confidence * 100:.1f}%"


def format_file_size(num_bytes: int) -> str:
    """Human-readable size in base-1024 units.

    >>> format_file_size(0)
    '0 Bytes'
    >>> format_file_size(1536)
    '1.5 KB'
    """
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[index]}"


def health_label(status: str | None, error: str | None = None) -> str:
    """Status line for the backend health indicator."""
    if error:
        return "Backend Offline"
    if status == "UP":
        return "Backend Online"
    return "Backend Error"
