"""
Utility modules for the conference backend.
"""

from conference_backend.src.utils.logging_config import get_logger, init_logging

__all__ = [
    "get_logger",
    "init_logging",
]
