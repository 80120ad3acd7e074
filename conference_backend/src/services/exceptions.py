"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Raised when the bearer credential is missing or cannot be verified."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated requester is not an organizer of the conference."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state."""

    status_code = 409

    def __init__(self, message: str, existing_id: Optional[str] = None):
        self.existing_id = existing_id
        super().__init__(message)


class InternalError(ServiceError):
    """Raised for unexpected store or runtime failures."""

    status_code = 500


class BatchCommitError(InternalError):
    """Raised when one chunk of a batched mutation fails to commit.

    Chunks committed before the failing one stay committed; ``committed``
    tells how many documents were already written or removed.
    """

    def __init__(
        self,
        stage: str,
        chunk_index: int,
        committed: int,
        cause: Optional[BaseException] = None,
    ):
        self.stage = stage
        self.chunk_index = chunk_index
        self.committed = committed
        self.cause = cause
        super().__init__(
            f"Batch commit failed during '{stage}' at chunk {chunk_index} "
            f"({committed} documents already committed)"
        )
