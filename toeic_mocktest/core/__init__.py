"""
Core module containing configuration, stores, errors and utilities
"""

from .config import config
from .database import get_db_manager, close_db_manager
from .exceptions import (
    MockTestError,
    NotFoundError,
    ValidationError,
    NotReadyError,
    ConflictError,
    AccessDeniedError,
    AuthenticationError
)

__all__ = [
    "config",
    "get_db_manager",
    "close_db_manager",
    "MockTestError",
    "NotFoundError",
    "ValidationError",
    "NotReadyError",
    "ConflictError",
    "AccessDeniedError",
    "AuthenticationError"
]
