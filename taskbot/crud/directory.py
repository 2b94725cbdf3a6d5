"""Directory and favorite CRUD operations."""
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskbot.crud.base import CRUDBase
from taskbot.models.directory import DirectoryUser, Favorite


class CRUDDirectoryUser(CRUDBase[DirectoryUser, dict, dict]):
    """CRUD operations for DirectoryUser."""

    async def get_by_team(self, db: AsyncSession, *, team_id: str) -> List[DirectoryUser]:
        """Whole roster of a workspace ordered by name."""
        return await self.get_multi(
            db,
            filters={"team_id": team_id},
            order_by=[DirectoryUser.name.asc()],
        )

    async def get_by_slack_ids(
        self,
        db: AsyncSession,
        *,
        slack_user_ids: Sequence[str],
        team_id: str,
    ) -> List[DirectoryUser]:
        """Roster entries for the given ids ordered by name."""
        if not slack_user_ids:
            return []
        result = await db.execute(
            select(DirectoryUser)
            .where(
                DirectoryUser.slack_user_id.in_(list(slack_user_ids)),
                DirectoryUser.team_id == team_id,
            )
            .order_by(DirectoryUser.name.asc())
        )
        return list(result.scalars().all())

    async def get_by_slack_id(
        self,
        db: AsyncSession,
        *,
        slack_user_id: str,
        team_id: str,
    ) -> Optional[DirectoryUser]:
        result = await db.execute(
            select(DirectoryUser).where(
                DirectoryUser.slack_user_id == slack_user_id,
                DirectoryUser.team_id == team_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_member(
        self,
        db: AsyncSession,
        *,
        slack_user_id: str,
        team_id: str,
        name: Optional[str],
        email: Optional[str],
    ) -> None:
        await self.upsert(
            db,
            values={
                "slack_user_id": slack_user_id,
                "team_id": team_id,
                "name": name,
                "email": email,
            },
            conflict_columns=("slack_user_id", "team_id"),
            update_columns=("name", "email"),
        )


class CRUDFavorite(CRUDBase[Favorite, dict, dict]):
    """CRUD operations for Favorite."""

    async def get_by_manager(
        self,
        db: AsyncSession,
        *,
        manager_user_id: str,
        team_id: str,
    ) -> List[Favorite]:
        return await self.get_multi(
            db,
            filters={"manager_user_id": manager_user_id, "team_id": team_id},
            order_by=[Favorite.created_at],
        )

    async def pin(
        self,
        db: AsyncSession,
        *,
        manager_user_id: str,
        favorite_user_id: str,
        team_id: str,
    ) -> None:
        """Create the edge; a duplicate pin is a no-op."""
        await self.upsert(
            db,
            values={
                "manager_user_id": manager_user_id,
                "favorite_user_id": favorite_user_id,
                "team_id": team_id,
            },
            conflict_columns=("manager_user_id", "favorite_user_id", "team_id"),
        )

    async def unpin(
        self,
        db: AsyncSession,
        *,
        manager_user_id: str,
        favorite_user_id: str,
        team_id: str,
    ) -> None:
        await db.execute(
            delete(Favorite).where(
                Favorite.manager_user_id == manager_user_id,
                Favorite.favorite_user_id == favorite_user_id,
                Favorite.team_id == team_id,
            )
        )
        await db.commit()


directory_user = CRUDDirectoryUser(DirectoryUser)
favorite = CRUDFavorite(Favorite)
