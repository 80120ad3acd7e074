"""
FastAPI dependency providers.

Process-wide singletons (document store, credential resolver) are created
lazily from settings. Tests replace them through app.dependency_overrides.
"""

from typing import Optional

from fastapi import Depends

from conference_backend.src.config.settings import AppSettings, get_settings
from conference_backend.src.services.authorization_service import CredentialResolver
from conference_backend.src.store.base import DocumentStore
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("store")

_document_store: Optional[DocumentStore] = None


def build_document_store(settings: AppSettings) -> DocumentStore:
    """
    Create the document store selected by CONFERENCE_STORE_BACKEND.

    Args:
        settings: Application settings

    Returns:
        A DocumentStore adapter
    """
    if settings.store_backend == "firestore":
        from conference_backend.src.store.firestore_store import FirestoreDocumentStore
        store = FirestoreDocumentStore(
            project_id=settings.firestore_project_id or None,
            database=settings.firestore_database or None,
        )
    elif settings.store_backend == "sql":
        from conference_backend.src.db.database import SessionLocal, init_db
        from conference_backend.src.store.sql_store import SqlDocumentStore
        init_db()
        store = SqlDocumentStore(SessionLocal)
    else:
        from conference_backend.src.store.memory_store import InMemoryDocumentStore
        store = InMemoryDocumentStore()

    logger.info(f"Document store initialized ({settings.store_backend})")
    return store


def get_document_store() -> DocumentStore:
    """Process-wide document store."""
    global _document_store
    if _document_store is None:
        _document_store = build_document_store(get_settings())
    return _document_store


def reset_document_store() -> None:
    """Forget the cached store (used on shutdown and by tests)."""
    global _document_store
    _document_store = None


def get_credential_resolver(
    settings: AppSettings = Depends(get_settings),
) -> CredentialResolver:
    """Credential resolver configured from JWT settings."""
    return CredentialResolver(
        jwt_secret=settings.jwt_secret_key,
        expiry_minutes=settings.jwt_token_expiry_minutes,
    )
