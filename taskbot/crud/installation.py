"""Installation CRUD operations."""
from typing import Any, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskbot.crud.base import CRUDBase
from taskbot.models.installation import Installation


class CRUDInstallation(CRUDBase[Installation, dict, dict]):
    """CRUD operations for Installation."""

    async def get_by_team(self, db: AsyncSession, *, team_id: str) -> Optional[Installation]:
        result = await db.execute(select(Installation).where(Installation.team_id == team_id))
        return result.scalar_one_or_none()

    async def save(self, db: AsyncSession, *, values: Dict[str, Any]) -> None:
        """Insert or replace the installation of ``values["team_id"]``."""
        await self.upsert(
            db,
            values=values,
            conflict_columns=("team_id",),
            update_columns=[column for column in values if column != "team_id"],
        )

    async def remove_by_team(self, db: AsyncSession, *, team_id: str) -> None:
        await db.execute(delete(Installation).where(Installation.team_id == team_id))
        await db.commit()


installation = CRUDInstallation(Installation)
