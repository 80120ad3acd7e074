"""
Configuration module for the conference backend.

Provides centralized configuration for:
- Bearer credential verification
- Document store selection
- Daily dashboard sweep scheduling
"""

from conference_backend.src.config.settings import (
    AppSettings,
    FIRESTORE_BATCH_SAFE_LIMIT,
    get_settings,
)

__all__ = [
    "AppSettings",
    "FIRESTORE_BATCH_SAFE_LIMIT",
    "get_settings",
]
