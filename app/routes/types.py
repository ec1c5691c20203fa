"""
GraphQL object and input types
"""

from datetime import datetime
from typing import List, Optional

import strawberry

from shared.schemas.user import AuthResultSchema


@strawberry.type
class User:
    id: int
    email: str
    username: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user) -> "User":
        return cls(
            id=user.id,
            email=user.email,
            username=user.username,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@strawberry.type
class FieldError:
    field: str
    message: str


@strawberry.type
class UserResponse:
    errors: Optional[List[FieldError]] = None
    user: Optional[User] = None

    @classmethod
    def from_result(cls, result: AuthResultSchema) -> "UserResponse":
        if result.errors:
            return cls(errors=[FieldError(field=e.field, message=e.message) for e in result.errors])
        return cls(user=User.from_model(result.user))


@strawberry.input
class EmailUsernamePasswordInput:
    email: str
    username: str
    password: str


@strawberry.type
class Post:
    id: int
    title: str
    text: str
    creator_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, post) -> "Post":
        return cls(
            id=post.id,
            title=post.title,
            text=post.text,
            creator_id=post.creator_id,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


__all__ = [
    "User",
    "FieldError",
    "UserResponse",
    "EmailUsernamePasswordInput",
    "Post",
]
