"""Store client used by view builders and action handlers.

Every method opens its own session, so independent reads can be awaited
concurrently with ``asyncio.gather``. Rows are converted to records once,
here, on their way out.

Failure policy:

* listing reads log a ``SQLAlchemyError`` and return an empty result, which
  renders as the "no rows" placeholders;
* required single-row reads raise ``NotFoundError``;
* writes are not retried and propagate.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskbot.core.exceptions import NotFoundError
from taskbot.crud.directory import directory_user, favorite
from taskbot.crud.task import progress_update, task
from taskbot.models.task import TaskStatus
from taskbot.schemas.directory import DirectoryEntry, FavoriteRecord
from taskbot.schemas.task import TaskRecord, UpdateRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def tenant_key(team_id: Optional[str]) -> str:
    """Storage value of the tenant scope ("" when running single-tenant)."""
    return team_id or ""


def as_uuid(value: Union[str, UUID]) -> UUID:
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


class TaskStore:
    """Filtered reads and single-row writes over the bot's tables."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def _listing(self, name: str, query: Callable[[AsyncSession], Awaitable[List[T]]]) -> List[T]:
        try:
            async with self.session_factory() as db:
                return await query(db)
        except SQLAlchemyError:
            logger.exception("Store read failed, rendering empty result", extra={"query": name})
            return []

    # Tasks

    async def list_tasks(self, user_id: str, team_id: Optional[str] = None) -> List[TaskRecord]:
        """Tasks owned by ``user_id`` ordered by created_at descending."""
        rows = await self._listing(
            "list_tasks",
            lambda db: task.get_by_owner(db, user_id=user_id, team_id=tenant_key(team_id)),
        )
        return [TaskRecord.model_validate(row) for row in rows]

    async def list_update_task_ids(self, user_id: str, team_id: Optional[str] = None) -> List[UUID]:
        """Parent task id of each update written by ``user_id``."""
        return await self._listing(
            "list_update_task_ids",
            lambda db: progress_update.get_task_ids_by_owner(
                db, user_id=user_id, team_id=tenant_key(team_id)
            ),
        )

    async def get_task(self, task_id: Union[str, UUID], team_id: Optional[str] = None) -> TaskRecord:
        """A task of this tenant; another tenant's task is not found."""
        async with self.session_factory() as db:
            row = await task.get_scoped(db, id=as_uuid(task_id), team_id=tenant_key(team_id))
        if row is None:
            raise NotFoundError(f"Task {task_id} not found")
        return TaskRecord.model_validate(row)

    async def list_updates_for_task(
        self,
        task_id: Union[str, UUID],
        team_id: Optional[str] = None,
    ) -> List[UpdateRecord]:
        """Updates of a tenant's task ordered by created_at descending."""
        task_uuid = as_uuid(task_id)
        rows = await self._listing(
            "list_updates_for_task",
            lambda db: progress_update.get_by_task(db, task_id=task_uuid, team_id=tenant_key(team_id)),
        )
        return [UpdateRecord.model_validate(row) for row in rows]

    async def create_task(self, user_id: str, title: str, team_id: Optional[str] = None) -> TaskRecord:
        async with self.session_factory() as db:
            row = await task.create(
                db,
                obj_in={
                    "user_id": user_id,
                    "team_id": tenant_key(team_id),
                    "title": title,
                    "status": TaskStatus.ACTIVE.value,
                },
            )
        logger.info("Task created", extra={"task_id": str(row.id), "user_id": user_id})
        return TaskRecord.model_validate(row)

    async def add_update(
        self,
        task_id: Union[str, UUID],
        user_id: str,
        content: str,
        team_id: Optional[str] = None,
    ) -> UpdateRecord:
        async with self.session_factory() as db:
            row = await progress_update.create(
                db,
                obj_in={
                    "task_id": as_uuid(task_id),
                    "user_id": user_id,
                    "team_id": tenant_key(team_id),
                    "content": content,
                },
            )
        return UpdateRecord.model_validate(row)

    async def complete_task(self, task_id: Union[str, UUID], user_id: str, team_id: Optional[str] = None) -> bool:
        return await self._transition(task_id, user_id, team_id, TaskStatus.COMPLETED)

    async def delete_task(self, task_id: Union[str, UUID], user_id: str, team_id: Optional[str] = None) -> bool:
        return await self._transition(task_id, user_id, team_id, TaskStatus.DELETED)

    async def _transition(self, task_id, user_id, team_id, status: TaskStatus) -> bool:
        async with self.session_factory() as db:
            changed = await task.transition(
                db,
                id=as_uuid(task_id),
                user_id=user_id,
                team_id=tenant_key(team_id),
                status=status,
            )
        if not changed:
            logger.info(
                "Task transition skipped, no active task matched",
                extra={"task_id": str(task_id), "status": status.value},
            )
        return changed

    # Directory

    async def list_directory(self, team_id: Optional[str] = None) -> List[DirectoryEntry]:
        rows = await self._listing(
            "list_directory",
            lambda db: directory_user.get_by_team(db, team_id=tenant_key(team_id)),
        )
        return [DirectoryEntry.model_validate(row) for row in rows]

    async def list_directory_by_ids(
        self,
        slack_user_ids: Sequence[str],
        team_id: Optional[str] = None,
    ) -> List[DirectoryEntry]:
        rows = await self._listing(
            "list_directory_by_ids",
            lambda db: directory_user.get_by_slack_ids(
                db, slack_user_ids=slack_user_ids, team_id=tenant_key(team_id)
            ),
        )
        return [DirectoryEntry.model_validate(row) for row in rows]

    async def get_directory_entry(self, slack_user_id: str, team_id: Optional[str] = None) -> Optional[DirectoryEntry]:
        """Roster entry used for modal titles; None when unknown."""
        async with self.session_factory() as db:
            row = await directory_user.get_by_slack_id(
                db, slack_user_id=slack_user_id, team_id=tenant_key(team_id)
            )
        return DirectoryEntry.model_validate(row) if row is not None else None

    async def upsert_directory_entry(
        self,
        slack_user_id: str,
        name: Optional[str],
        email: Optional[str],
        team_id: Optional[str] = None,
    ) -> None:
        async with self.session_factory() as db:
            await directory_user.upsert_member(
                db,
                slack_user_id=slack_user_id,
                team_id=tenant_key(team_id),
                name=name,
                email=email,
            )

    # Favorites

    async def list_pins(self, manager_user_id: str, team_id: Optional[str] = None) -> List[FavoriteRecord]:
        rows = await self._listing(
            "list_pins",
            lambda db: favorite.get_by_manager(
                db, manager_user_id=manager_user_id, team_id=tenant_key(team_id)
            ),
        )
        return [FavoriteRecord.model_validate(row) for row in rows]

    async def list_pinned_ids(self, manager_user_id: str, team_id: Optional[str] = None) -> List[str]:
        return [pin.favorite_user_id for pin in await self.list_pins(manager_user_id, team_id)]

    async def pin(self, manager_user_id: str, favorite_user_id: str, team_id: Optional[str] = None) -> None:
        async with self.session_factory() as db:
            await favorite.pin(
                db,
                manager_user_id=manager_user_id,
                favorite_user_id=favorite_user_id,
                team_id=tenant_key(team_id),
            )

    async def unpin(self, manager_user_id: str, favorite_user_id: str, team_id: Optional[str] = None) -> None:
        async with self.session_factory() as db:
            await favorite.unpin(
                db,
                manager_user_id=manager_user_id,
                favorite_user_id=favorite_user_id,
                team_id=tenant_key(team_id),
            )

    async def count_updates(self, user_id: str, team_id: Optional[str] = None) -> Dict[UUID, int]:
        """Updates per task for ``user_id``, counted in memory."""
        counts: Dict[UUID, int] = {}
        for task_id in await self.list_update_task_ids(user_id, team_id):
            counts[task_id] = counts.get(task_id, 0) + 1
        return counts
