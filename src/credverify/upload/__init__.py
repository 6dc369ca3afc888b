"""Upload workflow for the credential verification backend.

Public API
----------
.. autoclass:: CredentialServiceClient
.. autoclass:: UploadWorkflow
.. autoclass:: UploadWorkflowSM
.. autoclass:: ProgressEstimator
.. autoclass:: UploadProgressDisplay
"""

from credverify.upload.client import CredentialServiceClient
from credverify.upload.exceptions import (
    CatalogUnavailableError,
    CredentialUploadError,
    InvalidStateError,
    MalformedResponseError,
    SizeLimitExceededError,
    TransferFailedError,
    TransferRejectedError,
)
from credverify.upload.fsm import UploadWorkflowSM, create_fsm, next_state
from credverify.upload.progress import ProgressEstimator, UploadProgressDisplay
from credverify.upload.schemas import (
    FileInfoResult,
    FileStructure,
    FormatCatalog,
    HealthStatus,
)
from credverify.upload.workflow import UploadWorkflow, is_accepted_extension

__all__ = [
    "CatalogUnavailableError",
    "CredentialServiceClient",
    "CredentialUploadError",
    "FileInfoResult",
    "FileStructure",
    "FormatCatalog",
    "HealthStatus",
    "InvalidStateError",
    "MalformedResponseError",
    "ProgressEstimator",
    "SizeLimitExceededError",
    "TransferFailedError",
    "TransferRejectedError",
    "UploadProgressDisplay",
    "UploadWorkflow",
    "UploadWorkflowSM",
    "create_fsm",
    "is_accepted_extension",
    "next_state",
]
