"""Custom exceptions."""
from typing import Optional


class TaskBotError(Exception):
    """Base class for errors that fail a single interaction."""

    default_detail = "Request could not be completed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(TaskBotError):
    """A required row is missing."""

    default_detail = "Resource not found"


class InstallationNotFoundError(NotFoundError):
    """No installation stored for a workspace."""

    default_detail = "No installation found"

    def __init__(self, team_id: Optional[str] = None, detail: Optional[str] = None):
        self.team_id = team_id
        if detail is None and team_id:
            detail = f"No installation found for team {team_id}"
        super().__init__(detail)


class TenantRequiredError(TaskBotError):
    """Multi-tenant mode received a payload without a team id."""

    default_detail = "Interaction payload carries no team id"
