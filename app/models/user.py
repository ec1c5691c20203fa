"""
User Models
Database model definitions for user entities
"""

from typing import Any, Mapping
from datetime import datetime
from dataclasses import dataclass


@dataclass
class User:
    """User database model"""
    id: int
    email: str
    username: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "User":
        """Build from an asyncpg record"""
        return cls(
            id=record['id'],
            email=record['email'],
            username=record['username'],
            password_hash=record['password_hash'],
            created_at=record['created_at'],
            updated_at=record['updated_at'],
        )
