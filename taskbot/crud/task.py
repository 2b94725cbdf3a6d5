"""Task and progress update CRUD operations."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskbot.crud.base import CRUDBase
from taskbot.models.task import ProgressUpdate, Task, TaskStatus, utcnow


class CRUDTask(CRUDBase[Task, dict, dict]):
    """CRUD operations for Task."""

    async def get_scoped(self, db: AsyncSession, *, id: UUID, team_id: str) -> Optional[Task]:
        """A task by id, only when it belongs to ``team_id``."""
        result = await db.execute(select(Task).where(Task.id == id, Task.team_id == team_id))
        return result.scalar_one_or_none()

    async def get_by_owner(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        team_id: str,
    ) -> List[Task]:
        """All tasks of one user, newest first."""
        return await self.get_multi(
            db,
            filters={"user_id": user_id, "team_id": team_id},
            order_by=[Task.created_at.desc()],
        )

    async def transition(
        self,
        db: AsyncSession,
        *,
        id: UUID,
        user_id: str,
        team_id: str,
        status: TaskStatus,
        at: datetime = None,
    ) -> bool:
        """Move an active task to COMPLETED or DELETED.

        Returns False when no active task owned by ``user_id`` matched.
        """
        at = at or utcnow()
        values = {"status": status.value}
        if status == TaskStatus.COMPLETED:
            values["completed_at"] = at
        elif status == TaskStatus.DELETED:
            values["deleted_at"] = at
        else:
            raise ValueError(f"Cannot transition a task to {status.value}")

        result = await db.execute(
            update(Task)
            .where(
                Task.id == id,
                Task.user_id == user_id,
                Task.team_id == team_id,
                Task.status == TaskStatus.ACTIVE.value,
            )
            .values(**values)
        )
        await db.commit()
        return result.rowcount > 0


class CRUDProgressUpdate(CRUDBase[ProgressUpdate, dict, dict]):
    """CRUD operations for ProgressUpdate."""

    async def get_by_task(self, db: AsyncSession, *, task_id: UUID, team_id: str) -> List[ProgressUpdate]:
        """Updates of one task within a tenant, newest first."""
        return await self.get_multi(
            db,
            filters={"task_id": task_id, "team_id": team_id},
            order_by=[ProgressUpdate.created_at.desc()],
        )

    async def get_task_ids_by_owner(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        team_id: str,
    ) -> List[UUID]:
        """Parent task id of every update one user wrote."""
        result = await db.execute(
            select(ProgressUpdate.task_id).where(
                ProgressUpdate.user_id == user_id,
                ProgressUpdate.team_id == team_id,
            )
        )
        return list(result.scalars().all())


task = CRUDTask(Task)
progress_update = CRUDProgressUpdate(ProgressUpdate)
