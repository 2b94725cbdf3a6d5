"""Slack event, action and view-submission handlers.

Every handler acknowledges first (Slack's three second budget), performs at
most one store mutation and then re-renders the home tab or a modal.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import uuid4

from structlog.contextvars import bind_contextvars, unbind_contextvars

from taskbot.config import Settings, settings as default_settings
from taskbot.core.exceptions import TenantRequiredError
from taskbot.middleware.metrics import slack_action_duration_seconds, slack_actions_total
from taskbot.schemas.payloads import (
    PIN_ORIGINS,
    ButtonValue,
    ModalState,
    NavigationContext,
    TaskFormState,
    UpdateFormState,
    ViewMode,
)
from taskbot.services.directory_sync import DirectorySync
from taskbot.services.store_service import TaskStore
from taskbot.views.builders import ViewBuilder

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[None]]


def get_team_id(body: Dict[str, Any]) -> str:
    """Workspace id of an event or interaction payload ("" when absent)."""
    return body.get("team_id") or (body.get("team") or {}).get("id") or ""


def get_action_value(body: Dict[str, Any]) -> str:
    action = (body.get("actions") or [{}])[0]
    return action.get("value") or ""


class ActionDispatcher:
    """Routes Slack interactions to handlers."""

    ACTIONS: Dict[str, str] = {
        "nav_my_tasks": "handle_nav_my_tasks",
        "nav_people": "handle_nav_people",
        "nav_pinned": "handle_nav_pinned",
        "add_task": "handle_add_task",
        "update_progress": "handle_update_progress",
        "view_updates": "handle_view_updates",
        "back_to_person_tasks": "handle_back_to_person_tasks",
        "complete_task": "handle_complete_task",
        "delete_task": "handle_delete_task",
        "people_search": "handle_people_search",
        "view_person_tasks": "handle_view_person_tasks",
        "view_pinned_tasks": "handle_view_person_tasks",
        "pin_employee": "handle_pin_employee",
        "unpin_employee": "handle_unpin_employee",
    }

    VIEWS: Dict[str, str] = {
        "submit_task": "handle_submit_task",
        "submit_update": "handle_submit_update",
    }

    def __init__(
        self,
        store: TaskStore,
        views: Optional[ViewBuilder] = None,
        directory_sync: Optional[DirectorySync] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.views = views or ViewBuilder(store)
        self.directory_sync = directory_sync or DirectorySync(store)
        self.settings = settings or default_settings

    # Wiring

    def register(self, app) -> None:
        """Attach every listener to a Bolt ``AsyncApp``."""
        for action_id, method in self.ACTIONS.items():
            app.action(action_id)(self.listener(action_id, getattr(self, method)))
        for callback_id, method in self.VIEWS.items():
            app.view(callback_id)(self.listener(callback_id, getattr(self, method)))
        app.event("app_home_opened")(self.listener("app_home_opened", self.handle_app_home_opened))

    def listener(self, name: str, handler: Handler) -> Handler:
        """Wrap ``handler`` with a logging context and metrics."""

        async def run(ack, body, client):
            bind_contextvars(
                trace_id=str(uuid4()),
                action_id=name,
                user_id=(body.get("user") or {}).get("id") or (body.get("event") or {}).get("user"),
            )
            started = time.perf_counter()
            outcome = "error"
            try:
                await handler(ack, body, client)
                outcome = "ok"
            finally:
                slack_actions_total.labels(action=name, outcome=outcome).inc()
                slack_action_duration_seconds.labels(action=name).observe(time.perf_counter() - started)
                unbind_contextvars("trace_id", "action_id", "user_id")

        return run

    def resolve_team_id(self, body: Dict[str, Any]) -> Optional[str]:
        """Tenant scope of an interaction: required multi-tenant, None otherwise."""
        if not self.settings.MULTI_TENANT:
            return None
        team_id = get_team_id(body)
        if not team_id:
            raise TenantRequiredError()
        return team_id

    def _carried_team_id(self, carried: Optional[str], body: Dict[str, Any]) -> Optional[str]:
        """Tenant id from opaque state, falling back to the payload's."""
        if not self.settings.MULTI_TENANT:
            return None
        return carried or self.resolve_team_id(body)

    async def publish_home(
        self,
        client,
        user_id: str,
        team_id: Optional[str],
        mode: ViewMode = ViewMode.MY_TASKS,
        search_query: str = "",
    ) -> None:
        view = await self.views.home_view(mode, user_id, team_id, search_query)
        await client.views_publish(user_id=user_id, view=view)

    # Home

    async def handle_app_home_opened(self, ack, body, client) -> None:
        user_id = body["event"]["user"]
        team_id = self.resolve_team_id(body)
        self.directory_sync.spawn(client, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.MY_TASKS)

    async def handle_nav_my_tasks(self, ack, body, client) -> None:
        await ack()
        await self.publish_home(client, body["user"]["id"], self.resolve_team_id(body), ViewMode.MY_TASKS)

    async def handle_nav_people(self, ack, body, client) -> None:
        await ack()
        await self.publish_home(client, body["user"]["id"], self.resolve_team_id(body), ViewMode.PEOPLE)

    async def handle_nav_pinned(self, ack, body, client) -> None:
        await ack()
        await self.publish_home(client, body["user"]["id"], self.resolve_team_id(body), ViewMode.PINNED)

    async def handle_people_search(self, ack, body, client) -> None:
        await ack()
        await self.publish_home(
            client,
            body["user"]["id"],
            self.resolve_team_id(body),
            ViewMode.PEOPLE,
            search_query=get_action_value(body),
        )

    # Tasks

    async def handle_add_task(self, ack, body, client) -> None:
        await ack()
        team_id = self.resolve_team_id(body)
        await client.views_open(trigger_id=body["trigger_id"], view=self.views.add_task_modal(team_id))

    async def handle_submit_task(self, ack, body, client) -> None:
        await ack()
        view = body["view"]
        title = (view["state"]["values"]["task"]["name"].get("value") or "").strip()
        team_id = self._carried_team_id(TaskFormState.decode(view.get("private_metadata")).team_id, body)
        user_id = body["user"]["id"]

        await self.store.create_task(user_id, title, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.MY_TASKS)

    async def handle_update_progress(self, ack, body, client) -> None:
        await ack()
        team_id = self.resolve_team_id(body)
        modal = self.views.add_update_modal(get_action_value(body), team_id)
        await client.views_open(trigger_id=body["trigger_id"], view=modal)

    async def handle_submit_update(self, ack, body, client) -> None:
        await ack()
        view = body["view"]
        state = UpdateFormState.decode(view.get("private_metadata"))
        content = view["state"]["values"]["update"]["content"].get("value") or ""
        team_id = self._carried_team_id(state.team_id, body)
        user_id = body["user"]["id"]

        await self.store.add_update(state.task_id, user_id, content, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.MY_TASKS)

    async def handle_complete_task(self, ack, body, client) -> None:
        await ack()
        user_id = body["user"]["id"]
        team_id = self.resolve_team_id(body)
        await self.store.complete_task(get_action_value(body), user_id, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.MY_TASKS)

    async def handle_delete_task(self, ack, body, client) -> None:
        await ack()
        user_id = body["user"]["id"]
        team_id = self.resolve_team_id(body)
        await self.store.delete_task(get_action_value(body), user_id, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.MY_TASKS)

    # Pins

    async def handle_pin_employee(self, ack, body, client) -> None:
        await ack()
        user_id = body["user"]["id"]
        team_id = self.resolve_team_id(body)
        target = ButtonValue.decode(get_action_value(body))
        await self.store.pin(user_id, target.target_id, team_id)
        await self.publish_home(client, user_id, team_id, ViewMode.PEOPLE)

    async def handle_unpin_employee(self, ack, body, client) -> None:
        await ack()
        user_id = body["user"]["id"]
        team_id = self.resolve_team_id(body)
        target = ButtonValue.decode(get_action_value(body))
        await self.store.unpin(user_id, target.target_id, team_id)
        return_to = target.origin if target.origin in PIN_ORIGINS else ViewMode.PEOPLE
        await self.publish_home(client, user_id, team_id, return_to)

    # Modals

    async def handle_view_person_tasks(self, ack, body, client) -> None:
        await ack()
        team_id = self.resolve_team_id(body)
        modal = await self.views.person_tasks_modal(get_action_value(body), team_id)
        await client.views_open(trigger_id=body["trigger_id"], view=modal)

    async def handle_view_updates(self, ack, body, client) -> None:
        """Open the update list, or swap it into the current modal.

        Slack only stacks a few modals, so from inside a person's task modal
        the content is replaced in place and the person is remembered for
        the Back button.
        """
        await ack()
        team_id = self.resolve_team_id(body)
        current = body.get("view") or {}
        from_modal = current.get("type") == "modal"

        if from_modal:
            parent = ModalState.decode(current.get("private_metadata"), team_id)
            nav = NavigationContext(ViewMode.UPDATES, ViewMode.PERSON_TASKS, parent.target_user_id)
        else:
            nav = NavigationContext(ViewMode.UPDATES)

        modal = await self.views.updates_modal(get_action_value(body), nav, team_id)
        if from_modal:
            await client.views_update(view_id=current["id"], view=modal)
        else:
            await client.views_open(trigger_id=body["trigger_id"], view=modal)

    async def handle_back_to_person_tasks(self, ack, body, client) -> None:
        await ack()
        state = ModalState.decode(get_action_value(body))
        team_id = self._carried_team_id(state.team_id, body)
        modal = await self.views.person_tasks_modal(state.target_user_id, team_id)
        await client.views_update(view_id=body["view"]["id"], view=modal)
