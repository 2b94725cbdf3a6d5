"""Slack Bolt application factory."""
from __future__ import annotations

import logging
from typing import Optional

from slack_bolt.async_app import AsyncApp
from slack_bolt.oauth.async_oauth_settings import AsyncOAuthSettings
from slack_sdk.oauth.installation_store.async_installation_store import AsyncInstallationStore

from taskbot.config import Settings, settings as default_settings
from taskbot.database import AsyncSessionLocal
from taskbot.handlers.dispatcher import ActionDispatcher
from taskbot.integrations.installation_store import SQLAlchemyInstallationStore
from taskbot.services.store_service import TaskStore

logger = logging.getLogger(__name__)

INSTALL_PATH = "/slack/install"
REDIRECT_PATH = "/slack/oauth_redirect"


def create_slack_app(
    store: Optional[TaskStore] = None,
    *,
    settings: Optional[Settings] = None,
    installation_store: Optional[AsyncInstallationStore] = None,
    dispatcher: Optional[ActionDispatcher] = None,
) -> AsyncApp:
    """Build the Bolt app for the configured tenancy mode and register handlers."""
    settings = settings or default_settings
    store = store or TaskStore(AsyncSessionLocal)

    if settings.MULTI_TENANT:
        if not (settings.SLACK_CLIENT_ID and settings.SLACK_CLIENT_SECRET):
            raise ValueError("SLACK_CLIENT_ID and SLACK_CLIENT_SECRET are required in multi-tenant mode")
        oauth_settings = AsyncOAuthSettings(
            client_id=settings.SLACK_CLIENT_ID,
            client_secret=settings.SLACK_CLIENT_SECRET,
            scopes=settings.SLACK_SCOPES,
            installation_store=installation_store or SQLAlchemyInstallationStore(AsyncSessionLocal),
            install_path=INSTALL_PATH,
            redirect_uri_path=REDIRECT_PATH,
        )
        bolt_app = AsyncApp(
            signing_secret=settings.SLACK_SIGNING_SECRET,
            oauth_settings=oauth_settings,
        )
    else:
        if not settings.SLACK_BOT_TOKEN:
            raise ValueError("SLACK_BOT_TOKEN is required in single-tenant mode")
        bolt_app = AsyncApp(
            token=settings.SLACK_BOT_TOKEN,
            signing_secret=settings.SLACK_SIGNING_SECRET,
        )

    dispatcher = dispatcher or ActionDispatcher(store, settings=settings)
    dispatcher.register(bolt_app)

    @bolt_app.error
    async def handle_errors(error, body):
        logger.error(
            "Slack interaction failed",
            exc_info=error,
            extra={
                "team_id": (body or {}).get("team_id") or ((body or {}).get("team") or {}).get("id"),
                "payload_type": (body or {}).get("type"),
            },
        )

    return bolt_app
