"""
Shared utilities for ReadIt

This package contains common utilities used by the service and its scripts.
"""

from .logger import setup_logging, init_logging, get_logger
from .security import (
    hash_password,
    verify_password,
    generate_session_id,
    generate_reset_token,
    validate_email,
)

__all__ = [
    "setup_logging",
    "init_logging",
    "get_logger",
    "hash_password",
    "verify_password",
    "generate_session_id",
    "generate_reset_token",
    "validate_email",
]

__version__ = "1.0.0"
