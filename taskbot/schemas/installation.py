"""Installation records."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from taskbot.schemas.task import as_utc


class InstallationRecord(BaseModel):
    """Installation row with the decrypted bot token."""

    team_id: str
    team_name: Optional[str] = None
    enterprise_id: Optional[str] = None
    app_id: Optional[str] = None
    bot_token: str
    bot_id: Optional[str] = None
    bot_user_id: Optional[str] = None
    bot_scopes: Optional[str] = None
    installer_user_id: Optional[str] = None
    installed_at: datetime

    class Config:
        from_attributes = True

    @field_validator("installed_at")
    @classmethod
    def normalize_installed_at(cls, value):
        return as_utc(value)
