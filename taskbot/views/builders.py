"""View builders: rows in, Block Kit layout out.

Builders only read. Each one fetches what it needs from the injected store
(independent reads concurrently), partitions and sorts in memory and returns
an ordered list of blocks, or a full modal view.
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from taskbot.models.task import TaskStatus
from taskbot.schemas.directory import DirectoryEntry
from taskbot.schemas.payloads import ButtonValue, ModalState, NavigationContext, TaskFormState, UpdateFormState, ViewMode
from taskbot.schemas.task import TaskRecord
from taskbot.services.store_service import TaskStore
from taskbot.views.formatting import (
    actions,
    build_nav_bar,
    button,
    divider,
    format_date,
    header,
    mrkdwn,
    placeholder,
    plain_text,
)

Block = Dict[str, Any]

# Slack caps modal titles at 24 characters
MODAL_TITLE_LIMIT = 24
PERSON_TASKS_SUFFIX = "'s Tasks"
PERSON_NAME_LIMIT = MODAL_TITLE_LIMIT - len(PERSON_TASKS_SUFFIX)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def partition_tasks(tasks: List[TaskRecord]) -> Tuple[List[TaskRecord], List[TaskRecord], List[TaskRecord]]:
    """Split into (active, completed, deleted).

    Active keeps fetch order; completed and deleted are re-sorted newest
    first by their own timestamp.
    """
    active = [t for t in tasks if t.status == TaskStatus.ACTIVE]
    completed = sorted(
        (t for t in tasks if t.status == TaskStatus.COMPLETED),
        key=lambda t: t.completed_at or _EPOCH,
        reverse=True,
    )
    deleted = sorted(
        (t for t in tasks if t.status == TaskStatus.DELETED),
        key=lambda t: t.deleted_at or _EPOCH,
        reverse=True,
    )
    return active, completed, deleted


def _task_section(task: TaskRecord, label: str, when: Optional[datetime]) -> Block:
    return {
        "type": "section",
        "fields": [
            mrkdwn(f"*{task.title}*"),
            mrkdwn(f"{label}: {format_date(when)}"),
        ],
    }


def _view_updates_button(task: TaskRecord, count: int) -> Block:
    return button(f"💬 View Updates ({count})", "view_updates", value=str(task.id))


def _person_section(user: DirectoryEntry, accessory: Block) -> Block:
    return {
        "type": "section",
        "text": mrkdwn(f"*{user.name or 'Unknown'}*\n{user.email or '_no email_'}"),
        "accessory": accessory,
    }


class ViewBuilder:
    """Renders the home tab modes and the modals."""

    def __init__(self, store: TaskStore):
        self.store = store

    async def build_view(
        self,
        mode: ViewMode,
        viewer_id: str,
        team_id: Optional[str] = None,
        search_query: str = "",
    ) -> List[Block]:
        """Layout for ``mode``. For PERSON_TASKS ``viewer_id`` is the target user."""
        mode = ViewMode(mode)
        if mode == ViewMode.PEOPLE:
            return await self.build_people(viewer_id, team_id, search_query)
        if mode == ViewMode.PINNED:
            return await self.build_pinned(viewer_id, team_id)
        if mode == ViewMode.PERSON_TASKS:
            return await self.build_person_tasks(viewer_id, team_id)
        return await self.build_my_tasks(viewer_id, team_id)

    async def home_view(
        self,
        mode: ViewMode,
        viewer_id: str,
        team_id: Optional[str] = None,
        search_query: str = "",
    ) -> Dict[str, Any]:
        blocks = await self.build_view(mode, viewer_id, team_id, search_query)
        return {"type": "home", "blocks": blocks}

    async def _tasks_with_counts(self, user_id: str, team_id: Optional[str]):
        tasks, counts = await asyncio.gather(
            self.store.list_tasks(user_id, team_id),
            self.store.count_updates(user_id, team_id),
        )
        return tasks, counts

    async def build_my_tasks(self, viewer_id: str, team_id: Optional[str] = None) -> List[Block]:
        blocks: List[Block] = [
            build_nav_bar(),
            divider(),
            actions(button("➕ Add New Task", "add_task", style="primary")),
            divider(),
        ]

        tasks, counts = await self._tasks_with_counts(viewer_id, team_id)
        active, completed, deleted = partition_tasks(tasks)

        blocks.append(header("🔵 Active Tasks"))
        if not active:
            blocks.append(placeholder("No active tasks. Add one above!"))
        for task in active:
            count = counts.get(task.id, 0)
            blocks.append(_task_section(task, "📅 Created", task.created_at))
            buttons = []
            if count > 0:
                buttons.append(_view_updates_button(task, count))
            buttons.extend(
                [
                    button("📝 Add Update", "update_progress", value=str(task.id)),
                    button("✅ Complete", "complete_task", value=str(task.id), style="primary"),
                    button("🗑 Delete", "delete_task", value=str(task.id), style="danger"),
                ]
            )
            blocks.append(actions(*buttons))
            blocks.append(divider())

        blocks.append(header("✅ Completed Tasks"))
        if not completed:
            blocks.append(placeholder("No completed tasks yet."))
        for task in completed:
            count = counts.get(task.id, 0)
            blocks.append(_task_section(task, "🏁 Completed", task.completed_at))
            if count > 0:
                blocks.append(actions(_view_updates_button(task, count)))
            blocks.append(divider())

        blocks.append(header("🗑 Deleted Tasks"))
        if not deleted:
            blocks.append(placeholder("No deleted tasks."))
        for task in deleted:
            blocks.append(_task_section(task, "🗑 Deleted", task.deleted_at))
            blocks.append(divider())

        return blocks

    async def build_people(
        self,
        viewer_id: str,
        team_id: Optional[str] = None,
        search_query: str = "",
    ) -> List[Block]:
        search_input: Dict[str, Any] = {
            "type": "plain_text_input",
            "action_id": "people_search",
            "placeholder": plain_text("Search by name or email..."),
        }
        if search_query:
            search_input["initial_value"] = search_query

        blocks: List[Block] = [
            build_nav_bar(),
            divider(),
            header("👥 People"),
            {
                "type": "input",
                "block_id": "people_search_block",
                "dispatch_action": True,
                "element": search_input,
                "label": plain_text("🔍 Search"),
                "optional": True,
            },
            divider(),
        ]

        users, pinned = await asyncio.gather(
            self.store.list_directory(team_id),
            self.store.list_pinned_ids(viewer_id, team_id),
        )
        pinned_ids = set(pinned)
        filtered = [user for user in users if user.matches(search_query)]

        if not filtered:
            blocks.append(placeholder("No users found matching your search."))
            return blocks

        for user in filtered:
            is_pinned = user.slack_user_id in pinned_ids
            toggle = button(
                "Unpin" if is_pinned else "📌 Pin",
                "unpin_employee" if is_pinned else "pin_employee",
                value=ButtonValue(user.slack_user_id, ViewMode.PEOPLE).encode(),
            )
            blocks.append(_person_section(user, toggle))
            blocks.append(actions(button("View Tasks", "view_person_tasks", value=user.slack_user_id)))
            blocks.append(divider())

        return blocks

    async def build_pinned(self, viewer_id: str, team_id: Optional[str] = None) -> List[Block]:
        blocks: List[Block] = [
            build_nav_bar(),
            divider(),
            header("📌 Pinned Employees"),
        ]

        pinned_ids = await self.store.list_pinned_ids(viewer_id, team_id)
        if not pinned_ids:
            blocks.append(placeholder("You haven't pinned anyone yet. Go to People to pin someone."))
            return blocks

        for user in await self.store.list_directory_by_ids(pinned_ids, team_id):
            unpin = button(
                "Unpin",
                "unpin_employee",
                value=ButtonValue(user.slack_user_id, ViewMode.PINNED).encode(),
            )
            blocks.append(_person_section(user, unpin))
            blocks.append(actions(button("View Tasks", "view_pinned_tasks", value=user.slack_user_id)))
            blocks.append(divider())

        return blocks

    async def build_person_tasks(self, target_user_id: str, team_id: Optional[str] = None) -> List[Block]:
        """Someone's active and completed tasks, read-only."""
        tasks, counts = await self._tasks_with_counts(target_user_id, team_id)
        active, completed, _ = partition_tasks(tasks)
        blocks: List[Block] = []

        blocks.append(header("🔵 Active Tasks"))
        if not active:
            blocks.append(placeholder("No active tasks."))
        for task in active:
            count = counts.get(task.id, 0)
            blocks.append(_task_section(task, "📅 Created", task.created_at))
            if count > 0:
                blocks.append(actions(_view_updates_button(task, count)))
            blocks.append(divider())

        blocks.append(header("✅ Completed Tasks"))
        if not completed:
            blocks.append(placeholder("No completed tasks yet."))
        for task in completed:
            count = counts.get(task.id, 0)
            blocks.append(_task_section(task, "🏁 Completed", task.completed_at))
            if count > 0:
                blocks.append(actions(_view_updates_button(task, count)))
            blocks.append(divider())

        return blocks

    # Modals

    async def person_tasks_modal(self, target_user_id: str, team_id: Optional[str] = None) -> Dict[str, Any]:
        target, blocks = await asyncio.gather(
            self.store.get_directory_entry(target_user_id, team_id),
            self.build_person_tasks(target_user_id, team_id),
        )
        name = ((target.name if target else None) or "User")[:PERSON_NAME_LIMIT]
        return {
            "type": "modal",
            "title": plain_text(f"{name}{PERSON_TASKS_SUFFIX}"),
            "close": plain_text("Close"),
            "private_metadata": ModalState(target_user_id, team_id).encode(),
            "blocks": blocks,
        }

    async def updates_modal(
        self,
        task_id: UUID,
        nav: NavigationContext,
        team_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Update list of one task, with "← Back" when reached from a modal."""
        task, updates = await asyncio.gather(
            self.store.get_task(task_id, team_id),
            self.store.list_updates_for_task(task_id, team_id),
        )
        # Whose task list "Back" returns to; the task owner when the origin was lost
        owner_id = (nav.origin_id if nav.can_go_back else None) or task.user_id
        blocks: List[Block] = []

        if nav.can_go_back:
            back = button("← Back", "back_to_person_tasks", value=ModalState(owner_id, team_id).encode())
            blocks.append(actions(back))
            blocks.append(divider())

        if not updates:
            blocks.append(placeholder("No updates yet."))
        for update in updates:
            blocks.append({"type": "section", "text": mrkdwn(f"*{format_date(update.created_at)}*\n{update.content}")})
            blocks.append(divider())

        return {
            "type": "modal",
            "title": plain_text((task.title or "Updates")[:MODAL_TITLE_LIMIT]),
            "private_metadata": ModalState(owner_id, team_id).encode(),
            "blocks": blocks,
        }

    @staticmethod
    def add_task_modal(team_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "type": "modal",
            "callback_id": "submit_task",
            "private_metadata": TaskFormState(team_id).encode(),
            "title": plain_text("Add Task"),
            "submit": plain_text("Create"),
            "blocks": [
                {
                    "type": "input",
                    "block_id": "task",
                    "element": {
                        "type": "plain_text_input",
                        "action_id": "name",
                        "placeholder": plain_text("What do you need to do?"),
                    },
                    "label": plain_text("Task Name"),
                }
            ],
        }

    @staticmethod
    def add_update_modal(task_id: str, team_id: Optional[str] = None) -> Dict[str, Any]:
        return {
            "type": "modal",
            "callback_id": "submit_update",
            "private_metadata": UpdateFormState(task_id, team_id).encode(),
            "title": plain_text("Add Progress Update"),
            "submit": plain_text("Save"),
            "blocks": [
                {
                    "type": "input",
                    "block_id": "update",
                    "element": {
                        "type": "plain_text_input",
                        "multiline": True,
                        "action_id": "content",
                        "placeholder": plain_text("What progress have you made?"),
                    },
                    "label": plain_text("Progress Update"),
                }
            ],
        }
