"""Error taxonomy for the template library and its sync layer."""

from typing import Optional


class LegalSecretaryError(Exception):
    """Base class for application errors."""


class StorageError(LegalSecretaryError):
    """Raised when local durable storage cannot be read or written."""


class SyncError(LegalSecretaryError):
    """Raised when the remote store answers with a non-success status or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None, status_text: str = ""):
        super().__init__(message)
        self.status = status
        self.status_text = status_text


class DecompressionError(LegalSecretaryError):
    """Raised when a compressed payload cannot be restored."""


class BackupImportError(LegalSecretaryError):
    """Raised when a backup file is invalid or corrupted."""


class BackupParseError(BackupImportError):
    """Raised when a backup file is not valid JSON."""


class AIServiceError(LegalSecretaryError):
    """Raised when the generative model is unavailable or returns an unusable answer."""


class AIUnavailableError(AIServiceError):
    """Raised when no generative model is configured."""
