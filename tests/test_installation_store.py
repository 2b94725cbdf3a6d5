"""Tests for the SQLAlchemy installation store."""
import pytest
from slack_sdk.oauth.installation_store import Installation as SlackInstallation

from taskbot.core.exceptions import InstallationNotFoundError
from taskbot.integrations.installation_store import SQLAlchemyInstallationStore, installation_key


def _installation(token="xoxb-first", team_name="Acme", user_id="U_ADMIN"):
    return SlackInstallation(
        app_id="A1",
        enterprise_id=None,
        team_id="T1",
        team_name=team_name,
        bot_token=token,
        bot_id="B1",
        bot_user_id="U_BOT",
        bot_scopes=["chat:write", "users:read"],
        user_id=user_id,
    )


@pytest.fixture
def installation_store(session_factory):
    return SQLAlchemyInstallationStore(session_factory)


def test_installation_key():
    assert installation_key(None, "T1") == "T1"
    assert installation_key("E1", "T1", is_enterprise_install=True) == "E1"
    assert installation_key("E1", None) == ""


@pytest.mark.asyncio
async def test_save_and_find(installation_store):
    await installation_store.async_save(_installation())

    found = await installation_store.async_find_installation(enterprise_id=None, team_id="T1")
    assert found.bot_token == "xoxb-first"
    assert found.team_name == "Acme"
    assert found.bot_user_id == "U_BOT"
    assert found.bot_scopes == ["chat:write", "users:read"]

    bot = await installation_store.async_find_bot(enterprise_id=None, team_id="T1")
    assert bot.bot_token == "xoxb-first"


@pytest.mark.asyncio
async def test_reinstall_replaces_row(installation_store):
    await installation_store.async_save(_installation())
    await installation_store.async_save(_installation(token="xoxb-second", team_name="Acme Corp"))

    found = await installation_store.async_find_installation(enterprise_id=None, team_id="T1")
    assert found.bot_token == "xoxb-second"
    assert found.team_name == "Acme Corp"


@pytest.mark.asyncio
async def test_missing_installation_raises(installation_store):
    with pytest.raises(InstallationNotFoundError) as exc_info:
        await installation_store.async_find_installation(enterprise_id=None, team_id="T404")

    assert exc_info.value.team_id == "T404"


@pytest.mark.asyncio
async def test_user_lookup(installation_store):
    await installation_store.async_save(_installation())

    assert await installation_store.async_find_installation(
        enterprise_id=None, team_id="T1", user_id="U_SOMEONE"
    ) is None
    assert await installation_store.async_find_installation(
        enterprise_id=None, team_id="T404", user_id="U_ADMIN"
    ) is None
    installer = await installation_store.async_find_installation(
        enterprise_id=None, team_id="T1", user_id="U_ADMIN"
    )
    assert installer.user_id == "U_ADMIN"


@pytest.mark.asyncio
async def test_delete(installation_store):
    await installation_store.async_save(_installation())

    await installation_store.async_delete_bot(enterprise_id=None, team_id="T1")

    with pytest.raises(InstallationNotFoundError):
        await installation_store.async_find_bot(enterprise_id=None, team_id="T1")
