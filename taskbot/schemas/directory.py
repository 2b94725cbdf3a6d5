"""Directory and favorite records."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from taskbot.schemas.task import as_utc


class DirectoryEntry(BaseModel):
    """A workspace member as rendered in People and Pinned."""

    slack_user_id: str
    team_id: str = ""
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name OR email.

        A missing field is skipped rather than failing the whole row.
        """
        q = (query or "").strip().lower()
        if not q:
            return True
        return q in (self.name or "").lower() or q in (self.email or "").lower()


class FavoriteRecord(BaseModel):
    """A pin edge: ``manager_user_id`` follows ``favorite_user_id``."""

    manager_user_id: str
    favorite_user_id: str
    team_id: str = ""
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value):
        return as_utc(value)
