"""
SQLAlchemy models for the conference backend.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Imported here so Alembic sees the tables on Base.metadata
from conference_backend.src.models.document import StoredDocument

__all__ = [
    "Base",
    "StoredDocument",
]
