"""SQLAlchemy-backed Slack installation store (multi-tenant mode)."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from slack_sdk.oauth.installation_store import Bot, Installation as SlackInstallation
from slack_sdk.oauth.installation_store.async_installation_store import AsyncInstallationStore
from sqlalchemy.ext.asyncio import async_sessionmaker

from taskbot.core.exceptions import InstallationNotFoundError
from taskbot.crud.installation import installation as installation_crud
from taskbot.schemas.installation import InstallationRecord

logger = logging.getLogger(__name__)


def installation_key(
    enterprise_id: Optional[str],
    team_id: Optional[str],
    is_enterprise_install: Optional[bool] = False,
) -> str:
    """Org-wide installs are stored under the enterprise id."""
    if is_enterprise_install and enterprise_id:
        return enterprise_id
    return team_id or ""


class SQLAlchemyInstallationStore(AsyncInstallationStore):
    """One row per workspace; reinstalling replaces the row.

    A team-level lookup with no row raises ``InstallationNotFoundError``
    instead of returning None. Lookups for a specific user return None unless
    that user performed the install, since Bolt asks for per-user tokens on
    every request.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    @property
    def logger(self) -> logging.Logger:
        return logger

    async def async_save(self, installation: SlackInstallation) -> None:
        team_id = installation_key(
            installation.enterprise_id,
            installation.team_id,
            installation.is_enterprise_install,
        )
        team_name = (
            installation.enterprise_name
            if installation.is_enterprise_install
            else installation.team_name
        )
        scopes = installation.bot_scopes
        if scopes is not None and not isinstance(scopes, str):
            scopes = ",".join(scopes)

        async with self.session_factory() as db:
            await installation_crud.save(
                db,
                values={
                    "team_id": team_id,
                    "team_name": team_name,
                    "enterprise_id": installation.enterprise_id,
                    "app_id": installation.app_id,
                    "bot_token": installation.bot_token,
                    "bot_id": installation.bot_id,
                    "bot_user_id": installation.bot_user_id,
                    "bot_scopes": scopes,
                    "installer_user_id": installation.user_id,
                    "installed_at": datetime.now(timezone.utc),
                },
            )
        logger.info("Installed for workspace", extra={"team_id": team_id, "team_name": team_name})

    async def async_save_bot(self, bot: Bot) -> None:
        # Bot rows live inside the installation row saved by async_save
        return None

    async def _get_record(self, team_id: str) -> InstallationRecord:
        async with self.session_factory() as db:
            row = await installation_crud.get_by_team(db, team_id=team_id)
        if row is None:
            raise InstallationNotFoundError(team_id)
        return InstallationRecord.model_validate(row)

    async def async_find_installation(
        self,
        *,
        enterprise_id: Optional[str],
        team_id: Optional[str],
        user_id: Optional[str] = None,
        is_enterprise_install: Optional[bool] = False,
    ) -> Optional[SlackInstallation]:
        key = installation_key(enterprise_id, team_id, is_enterprise_install)
        if user_id is not None:
            try:
                record = await self._get_record(key)
            except InstallationNotFoundError:
                return None
            if record.installer_user_id != user_id:
                return None
        else:
            record = await self._get_record(key)

        return SlackInstallation(
            app_id=record.app_id,
            enterprise_id=record.enterprise_id,
            team_id=team_id if not is_enterprise_install else None,
            team_name=record.team_name,
            bot_token=record.bot_token,
            bot_id=record.bot_id,
            bot_user_id=record.bot_user_id,
            bot_scopes=record.bot_scopes or "",
            user_id=record.installer_user_id or "",
            is_enterprise_install=bool(is_enterprise_install),
            installed_at=record.installed_at.timestamp(),
        )

    async def async_find_bot(
        self,
        *,
        enterprise_id: Optional[str],
        team_id: Optional[str],
        is_enterprise_install: Optional[bool] = False,
    ) -> Optional[Bot]:
        installation = await self.async_find_installation(
            enterprise_id=enterprise_id,
            team_id=team_id,
            is_enterprise_install=is_enterprise_install,
        )
        return installation.to_bot()

    async def async_delete_installation(
        self,
        *,
        enterprise_id: Optional[str],
        team_id: Optional[str],
        user_id: Optional[str] = None,
    ) -> None:
        key = enterprise_id if enterprise_id and not team_id else team_id
        async with self.session_factory() as db:
            await installation_crud.remove_by_team(db, team_id=key or "")
        logger.info("Installation deleted", extra={"team_id": key})

    async def async_delete_bot(
        self,
        *,
        enterprise_id: Optional[str],
        team_id: Optional[str],
    ) -> None:
        await self.async_delete_installation(enterprise_id=enterprise_id, team_id=team_id)
