"""Mirror the Slack workspace roster into the directory table."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from taskbot.services.store_service import TaskStore

logger = logging.getLogger(__name__)

SLACKBOT_USER_ID = "USLACKBOT"
USERS_PAGE_SIZE = 200


def is_syncable(member: Dict[str, Any]) -> bool:
    """Humans only: no bots, no deactivated accounts, no Slackbot."""
    if member.get("is_bot") or member.get("deleted"):
        return False
    return member.get("id") not in (None, "", SLACKBOT_USER_ID)


class DirectorySync:
    """Fetch ``users.list`` and upsert every human member."""

    def __init__(self, store: TaskStore):
        self.store = store
        # Strong references so pending syncs are not garbage collected
        self._pending: Set[asyncio.Task] = set()

    async def sync(self, client, team_id: Optional[str] = None) -> int:
        """Upsert the roster keyed on (slack user id, team id); returns rows written.

        Follows ``users.list`` cursors until the roster is exhausted. A member
        whose upsert fails is logged and skipped.
        """
        written = 0
        cursor = None
        while True:
            response = await client.users_list(limit=USERS_PAGE_SIZE, cursor=cursor)
            for member in response.get("members") or []:
                if not is_syncable(member):
                    continue
                if await self._upsert_member(member, team_id):
                    written += 1
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                break
        logger.info("Directory synced", extra={"team_id": team_id, "members": written})
        return written

    async def _upsert_member(self, member: Dict[str, Any], team_id: Optional[str]) -> bool:
        profile = member.get("profile") or {}
        try:
            await self.store.upsert_directory_entry(
                member["id"],
                name=member.get("real_name") or profile.get("real_name") or member.get("name"),
                email=profile.get("email"),
                team_id=team_id,
            )
        except SQLAlchemyError:
            logger.exception(
                "Directory upsert failed, skipping member",
                extra={"team_id": team_id, "slack_user_id": member["id"]},
            )
            return False
        return True

    async def _sync_logged(self, client, team_id: Optional[str]) -> None:
        try:
            await self.sync(client, team_id)
        except Exception:
            logger.exception("Background directory sync failed", extra={"team_id": team_id})

    def spawn(self, client, team_id: Optional[str] = None) -> asyncio.Task:
        """Start a sync without waiting for it; failures only reach the log."""
        task = asyncio.create_task(self._sync_logged(client, team_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task
