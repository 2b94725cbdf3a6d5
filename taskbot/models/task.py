"""Task and progress update models."""
from datetime import datetime, timezone
from enum import Enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text

from taskbot.database import Base
from taskbot.db.types import GUID


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task lifecycle status. Transitions are one-way out of ACTIVE."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DELETED = "deleted"


class Task(Base):
    """A personal task owned by one Slack user."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "(status = 'completed') = (completed_at IS NOT NULL)",
            name="ck_tasks_completed_at",
        ),
        CheckConstraint(
            "(status = 'deleted') = (deleted_at IS NOT NULL)",
            name="ck_tasks_deleted_at",
        ),
        Index("ix_tasks_owner", "user_id", "team_id"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(String(32), nullable=False)
    team_id = Column(String(32), nullable=False, default="")  # "" in single-tenant mode
    title = Column(String(3000), nullable=False)
    status = Column(String(20), nullable=False, default=TaskStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class ProgressUpdate(Base):
    """An immutable progress note attached to a task."""

    __tablename__ = "updates"
    __table_args__ = (Index("ix_updates_owner", "user_id", "team_id"),)

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    task_id = Column(GUID(), ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(String(32), nullable=False)
    team_id = Column(String(32), nullable=False, default="")
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
