"""Task and progress update records."""
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from taskbot.models.task import TaskStatus


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps (SQLite) as UTC."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskRecord(BaseModel):
    """A task row as read from the store."""

    id: UUID
    user_id: str
    team_id: str = ""
    title: str
    status: TaskStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @field_validator("created_at", "completed_at", "deleted_at")
    @classmethod
    def normalize_timestamps(cls, value):
        return as_utc(value)

    @model_validator(mode="after")
    def check_status_timestamps(self) -> "TaskRecord":
        if (self.status == TaskStatus.COMPLETED) != (self.completed_at is not None):
            raise ValueError("completed_at must be set exactly when status is completed")
        if (self.status == TaskStatus.DELETED) != (self.deleted_at is not None):
            raise ValueError("deleted_at must be set exactly when status is deleted")
        return self


class UpdateRecord(BaseModel):
    """A progress update row as read from the store."""

    id: UUID
    task_id: UUID
    user_id: str
    team_id: str = ""
    content: str
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value):
        return as_utc(value)
