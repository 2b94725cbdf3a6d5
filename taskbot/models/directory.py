"""Workspace directory and favorite (pin) models."""
from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlalchemy.sql import func
import uuid

from taskbot.database import Base
from taskbot.db.types import GUID


class DirectoryUser(Base):
    """A workspace member mirrored from the Slack roster."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("slack_user_id", "team_id", name="uq_users_slack_user_team"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    slack_user_id = Column(String(32), nullable=False, index=True)
    team_id = Column(String(32), nullable=False, default="")
    name = Column(String(255), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    synced_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Favorite(Base):
    """A pin edge: manager_user_id follows favorite_user_id."""

    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint(
            "manager_user_id",
            "favorite_user_id",
            "team_id",
            name="uq_favorites_manager_favorite_team",
        ),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    manager_user_id = Column(String(32), nullable=False, index=True)
    favorite_user_id = Column(String(32), nullable=False)
    team_id = Column(String(32), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
