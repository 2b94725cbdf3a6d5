"""Opaque payloads carried through Slack button values and modal metadata.

Slack keeps no view history, so navigation context rides along in two places:

* button ``value`` strings, encoded as ``"<id>:<origin>"``;
* a modal's ``private_metadata``, which holds the user whose tasks the modal
  belongs to (bare id in single-tenant mode, JSON once a tenant is involved).

Decoding is forgiving: anything that does not parse is treated
as a bare target id.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ViewMode(str, Enum):
    """Screens the bot can render."""

    MY_TASKS = "my_tasks"
    PEOPLE = "people"
    PINNED = "pinned"
    PERSON_TASKS = "person_tasks"
    UPDATES = "updates"


# Views a pin toggle can return to
PIN_ORIGINS = (ViewMode.PEOPLE, ViewMode.PINNED)


@dataclass(frozen=True)
class ButtonValue:
    """A target id tagged with the view that rendered the button."""

    target_id: str
    origin: Optional[ViewMode] = None

    def encode(self) -> str:
        if self.origin is None:
            return self.target_id
        return f"{self.target_id}:{self.origin.value}"

    @classmethod
    def decode(cls, raw: Optional[str]) -> "ButtonValue":
        # Second field is the origin; anything after it is ignored
        fields = (raw or "").split(":")
        target_id = fields[0]
        tag = fields[1] if len(fields) > 1 else ""
        try:
            origin = ViewMode(tag) if tag else None
        except ValueError:
            origin = None
        return cls(target_id=target_id, origin=origin)


@dataclass(frozen=True)
class ModalState:
    """Whose tasks a modal (or its Back button) points at."""

    target_user_id: str
    team_id: Optional[str] = None

    def encode(self) -> str:
        if self.team_id is None:
            return self.target_user_id
        return json.dumps({"targetUserId": self.target_user_id, "teamId": self.team_id})

    @classmethod
    def decode(cls, raw: Optional[str], team_id: Optional[str] = None) -> "ModalState":
        """Parse ``raw``; ``team_id`` fills in when the token carries none."""
        raw = raw or ""
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            return cls(target_user_id=raw, team_id=team_id)
        return cls(
            target_user_id=str(data.get("targetUserId") or ""),
            team_id=data.get("teamId", team_id),
        )


@dataclass(frozen=True)
class TaskFormState:
    """private_metadata of the add-task form."""

    team_id: Optional[str] = None

    def encode(self) -> str:
        return self.team_id or ""

    @classmethod
    def decode(cls, raw: Optional[str]) -> "TaskFormState":
        return cls(team_id=raw or None)


@dataclass(frozen=True)
class UpdateFormState:
    """private_metadata of the add-update form: the task being updated."""

    task_id: str
    team_id: Optional[str] = None

    def encode(self) -> str:
        return json.dumps({"taskId": self.task_id, "teamId": self.team_id})

    @classmethod
    def decode(cls, raw: Optional[str]) -> "UpdateFormState":
        raw = raw or ""
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
        if not isinstance(data, dict):
            return cls(task_id=raw)
        return cls(task_id=str(data.get("taskId") or ""), team_id=data.get("teamId"))


@dataclass(frozen=True)
class NavigationContext:
    """Where a modal is being rendered and the single hop it came from."""

    current_view: ViewMode
    origin_view: Optional[ViewMode] = None
    origin_id: Optional[str] = None

    @property
    def can_go_back(self) -> bool:
        return self.origin_view == ViewMode.PERSON_TASKS
