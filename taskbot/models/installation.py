"""Slack installation model (multi-tenant mode)."""
from sqlalchemy import Column, DateTime, String
import uuid

from taskbot.database import Base
from taskbot.db.types import EncryptedString, GUID
from taskbot.models.task import utcnow


class Installation(Base):
    """One row per installed workspace, replaced wholesale on reinstall."""

    __tablename__ = "installations"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4, index=True)
    team_id = Column(String(32), unique=True, nullable=False, index=True)  # enterprise id for org installs
    team_name = Column(String(255), nullable=True)
    enterprise_id = Column(String(32), nullable=True)
    app_id = Column(String(32), nullable=True)
    bot_token = Column(EncryptedString(512), nullable=False)
    bot_id = Column(String(32), nullable=True)
    bot_user_id = Column(String(32), nullable=True)
    bot_scopes = Column(String(1024), nullable=True)
    installer_user_id = Column(String(32), nullable=True)
    installed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
