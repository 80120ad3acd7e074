"""
Authorization gate for conference lifecycle operations.

Resolves the bearer credential of a request to the requester's email and
checks that the requester organizes the target conference.

Design:
- Credentials are HS256 JWTs signed with JWT_SECRET_KEY; the ``email``
  claim identifies the requester
- Organizer membership compares trimmed, lowercased emails
- The gate performs reads only
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from conference_backend.src.services.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from conference_backend.src.store import collections
from conference_backend.src.store.base import DocumentStore
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("services")

TOKEN_ALGORITHM = "HS256"
BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header value.

    Returns:
        The token, or None if the header is missing or malformed
    """
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class CredentialResolver:
    """
    Verifies bearer credentials and extracts the requester email.

    Attributes:
        jwt_secret: HS256 signing secret
        expiry_minutes: Lifetime of credentials issued by issue_token()
    """

    def __init__(self, jwt_secret: str, expiry_minutes: int = 60):
        self.jwt_secret = jwt_secret
        self.expiry_minutes = expiry_minutes

    def resolve_email(self, token: Optional[str]) -> Optional[str]:
        """
        Verify ``token`` and return its email claim.

        Returns:
            Lowercased email, or None when the token is missing, expired,
            badly signed, or carries no email
        """
        if not token or not self.jwt_secret:
            return None
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[TOKEN_ALGORITHM])
        except JWTError as e:
            logger.warning(f"Bearer credential rejected: {e}")
            return None

        email = str(payload.get("email") or "").strip().lower()
        return email or None

    def issue_token(self, email: str, expires_in_minutes: Optional[int] = None) -> str:
        """Sign a credential for ``email`` (operators and tests)."""
        now = datetime.now(timezone.utc)
        minutes = self.expiry_minutes if expires_in_minutes is None else expires_in_minutes
        payload = {
            "sub": email,
            "email": email,
            "iat": now,
            "exp": now + timedelta(minutes=minutes),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=TOKEN_ALGORITHM)


@dataclass
class AuthorizedContext:
    """Outcome of a successful organizer check."""

    conference_id: str
    requester_email: str
    conference: Dict[str, Any]


def is_organizer(conference: Dict[str, Any], email: str) -> bool:
    organizers = conference.get("organizerEmails") or []
    wanted = email.strip().lower()
    return any(str(o or "").strip().lower() == wanted for o in organizers)


class AuthorizationService:
    """
    Gate run before any manual lifecycle operation.

    Order of checks: credential (401), conference id (400), conference
    existence (404), organizer membership (403).
    """

    def __init__(self, store: DocumentStore, resolver: CredentialResolver):
        self.store = store
        self.resolver = resolver

    def authenticate(self, authorization: Optional[str]) -> str:
        """
        Resolve an Authorization header value to the requester email.

        Raises:
            AuthenticationError: If the credential is missing or invalid
        """
        email = self.resolver.resolve_email(extract_bearer_token(authorization))
        if not email:
            raise AuthenticationError("Unauthorized")
        return email

    def authorize_organizer(self, requester_email: str, conference_id: Any) -> AuthorizedContext:
        """
        Check that ``requester_email`` organizes ``conference_id``.

        Raises:
            ValidationError: If conference_id is missing
            NotFoundError: If the conference does not exist
            AuthorizationError: If the requester is not an organizer
        """
        conference_id = str(conference_id or "").strip()
        if not conference_id:
            raise ValidationError("Missing conferenceId", field="conferenceId")

        document = self.store.get(collections.CONFERENCE, conference_id)
        if document is None:
            raise NotFoundError("Conference", conference_id)

        if not is_organizer(document.data, requester_email):
            logger.warning(
                "Requester is not an organizer of the conference",
                extra={"conference_id": conference_id, "requester_email": requester_email},
            )
            raise AuthorizationError("Forbidden")

        return AuthorizedContext(
            conference_id=conference_id,
            requester_email=requester_email,
            conference=document.data,
        )

    def authorize(self, authorization: Optional[str], conference_id: Any) -> AuthorizedContext:
        """Authenticate then authorize in one call."""
        email = self.authenticate(authorization)
        return self.authorize_organizer(email, conference_id)
