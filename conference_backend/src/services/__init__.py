"""
Service layer for business logic.

This module exports the lifecycle services for use in API endpoints,
the scheduler and command-line scripts.
"""

from conference_backend.src.services.authorization_service import (
    AuthorizationService,
    AuthorizedContext,
    CredentialResolver,
)
from conference_backend.src.services.batched_mutator import BatchedMutator
from conference_backend.src.services.dashboard_service import DashboardService
from conference_backend.src.services.delete_service import DeleteService
from conference_backend.src.services.duplicate_service import DuplicateService
from conference_backend.src.services.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BatchCommitError,
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from conference_backend.src.services.platform_config_service import PlatformConfigService

__all__ = [
    "AuthorizationService",
    "AuthorizedContext",
    "CredentialResolver",
    "BatchedMutator",
    "DashboardService",
    "DeleteService",
    "DuplicateService",
    "PlatformConfigService",
    "ServiceError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
    "BatchCommitError",
]
