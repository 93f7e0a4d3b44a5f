"""Domain error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to the user. The API layer turns them into ``{"error": message}``.
"""
from typing import Optional


class AppError(Exception):
    """Base class for errors surfaced to the user."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Bad input shape, size or type. Raised before any side effect."""

    status_code = 400


class AuthError(AppError):
    """Missing or invalid credential."""

    status_code = 401


class NotFoundError(AppError):
    """Missing entity, or one that belongs to another owner."""

    status_code = 404


class StorageError(AppError):
    """Object storage failure."""

    def __init__(self, message: str, cause: Optional[Exception] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.cause = cause


class UploadError(StorageError):
    pass


class DownloadError(StorageError):
    pass


class DeleteError(StorageError):
    pass


class InvalidPathError(StorageError):
    status_code = 400


class ExportError(AppError):
    """PDF or archive assembly failure."""


class SmsError(AppError):
    status_code = 400
