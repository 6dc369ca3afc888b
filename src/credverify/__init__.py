"""Client for submitting credential files to a verification service."""

__version__ = "0.1.0"

from credverify.models import (
    ClientConfig,
    SelectedFile,
    UploadPhase,
    UploadProgress,
    WorkflowSnapshot,
    WorkflowState,
)

__all__ = [
    "ClientConfig",
    "SelectedFile",
    "UploadPhase",
    "UploadProgress",
    "WorkflowSnapshot",
    "WorkflowState",
    "__version__",
]
