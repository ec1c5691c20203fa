"""
User data schemas for ReadIt

Pydantic models for authentication input and results.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class UserRegisterSchema(BaseModel):
    """Registration input; validated by the auth service, not by pydantic"""
    email: str
    username: str
    password: str


class FieldErrorSchema(BaseModel):
    """A validation failure tied to a single input field"""
    field: str
    message: str


class UserResponseSchema(BaseModel):
    """Public projection of a user record (never carries the password hash)"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    username: str
    created_at: datetime
    updated_at: datetime


class AuthResultSchema(BaseModel):
    """
    Outcome of an authentication operation

    Exactly one of ``user`` and ``errors`` is set.
    """
    errors: Optional[List[FieldErrorSchema]] = None
    user: Optional[UserResponseSchema] = None

    @property
    def success(self) -> bool:
        return not self.errors and self.user is not None

    @classmethod
    def failure(cls, field: str, message: str) -> "AuthResultSchema":
        return cls(errors=[FieldErrorSchema(field=field, message=message)])

    @classmethod
    def ok(cls, user) -> "AuthResultSchema":
        return cls(user=UserResponseSchema.model_validate(user))
