"""
Shared data schemas for ReadIt
"""

from .user import UserRegisterSchema, FieldErrorSchema, UserResponseSchema, AuthResultSchema

__all__ = [
    "UserRegisterSchema",
    "FieldErrorSchema",
    "UserResponseSchema",
    "AuthResultSchema",
]

__version__ = "1.0.0"
