"""
Post Models
"""

from typing import Any, Mapping, Optional
from datetime import datetime
from dataclasses import dataclass


@dataclass
class Post:
    """Post database model"""
    id: int
    title: str
    text: str
    creator_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Post":
        return cls(
            id=record['id'],
            title=record['title'],
            text=record['text'],
            creator_id=record['creator_id'],
            created_at=record['created_at'],
            updated_at=record['updated_at'],
        )
