"""Script to create tables and mirror the Slack roster into the directory."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from slack_sdk.web.async_client import AsyncWebClient

from taskbot.config import settings
from taskbot.database import AsyncSessionLocal, close_db, init_db
from taskbot.integrations.installation_store import SQLAlchemyInstallationStore
from taskbot.services.directory_sync import DirectorySync
from taskbot.services.store_service import TaskStore


async def sync_directory(team_id=None):
    """Sync one workspace: the static token, or the stored install of team_id."""
    await init_db()
    try:
        if settings.MULTI_TENANT:
            if not team_id:
                raise SystemExit("usage: sync_directory.py TEAM_ID (multi-tenant mode)")
            bot = await SQLAlchemyInstallationStore(AsyncSessionLocal).async_find_bot(
                enterprise_id=None, team_id=team_id
            )
            token = bot.bot_token
        else:
            token = settings.SLACK_BOT_TOKEN
            team_id = None

        synced = await DirectorySync(TaskStore(AsyncSessionLocal)).sync(AsyncWebClient(token=token), team_id)
        print(f"✓ Synced {synced} members")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(sync_directory(sys.argv[1] if len(sys.argv) > 1 else None))
