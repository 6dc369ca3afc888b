"""Project-wide named constants.

Values mirror what the verification backend enforces, so the client can
reject obviously bad input before any network call.
"""

# Backend multipart limit is 10 MB (DataSize.ofMegabytes(10) -> 10 * 1024 * 1024).
MAX_FILE_SIZE_BYTES: int = 10 * 1024 * 1024

# Advisory selection filter only; the backend decides what it can parse.
ACCEPTED_EXTENSIONS: tuple[str, ...] = (".json", ".jwt", ".txt", ".cbor")

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_UPLOAD_DESCRIPTION = "File uploaded via web interface"
GENERIC_UPLOAD_ERROR = "Failed to upload file"
UPLOAD_CANCELLED_MESSAGE = "Upload cancelled"

FORMATS_PATH = "/api/v1/credentials/formats"
UPLOAD_PATH = "/api/v1/credentials/upload"
HEALTH_PATH = "/health"
