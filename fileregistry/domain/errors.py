"""
Error Handling Module

Defines domain exceptions and error categories for the file registry.
Domain exceptions are pure and have no external dependencies.
Application exceptions translate them into API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    INVALID_REQUEST = "invalid_request"
    SYSTEM_ERROR = "system_error"


# User-facing messages. They never mention storage paths or identifiers.
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested link does not point to a stored file.",
        "action": "Check the link or ask the sender to upload the file again.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "Link Expired",
        "message": "The link has expired. Files are kept for 48 hours after upload.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class RecordNotFoundError(DomainError):
    """Raised when no file record exists for an identifier."""
    pass


class LinkExpiredError(DomainError):
    """Raised when a file record exists but its retention window has passed."""
    pass


class DuplicateKeyError(DomainError):
    """
    Raised by a store when an inserted identifier is already taken.

    Internal to the upload path: the registry retries with a new identifier.
    """
    pass


class PersistenceError(DomainError):
    """Raised when the record store is unreachable or returns malformed data."""
    pass


class UploadFailureKind(Enum):
    """Distinguishes upload failures so callers can alert on orphaned bytes."""

    STORAGE_MOVE = "storage_move"
    PERSISTENCE_AFTER_MOVE = "persistence_after_move"
    IDENTIFIER_EXHAUSTED = "identifier_exhausted"


class UploadError(DomainError):
    """Base class for upload failures."""

    kind: UploadFailureKind = UploadFailureKind.STORAGE_MOVE


class StorageMoveError(UploadError):
    """
    Raised when staged bytes could not be moved into permanent storage.

    The upload is aborted before any record is written.
    """

    kind = UploadFailureKind.STORAGE_MOVE


class OrphanedStorageError(UploadError):
    """
    Raised when bytes were moved into storage but no record was written.

    The moved file is left in place; ``storage_path`` is kept for operators
    and must never be sent to clients.
    """

    kind = UploadFailureKind.PERSISTENCE_AFTER_MOVE

    def __init__(
        self,
        message: str,
        storage_path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.storage_path = storage_path


class IdentifierExhaustedError(OrphanedStorageError):
    """Raised when every identifier attempt collided with an existing record."""

    kind = UploadFailureKind.IDENTIFIER_EXHAUSTED


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    The technical message is kept for logs only.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
