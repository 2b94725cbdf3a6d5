"""Tests for the workspace roster sync."""
import logging

import pytest
from sqlalchemy.exc import OperationalError

from taskbot.services.directory_sync import USERS_PAGE_SIZE, DirectorySync, is_syncable

MEMBERS = [
    {"id": "U1", "real_name": "Alice Example", "profile": {"email": "alice@example.com"}},
    {"id": "U2", "name": "bob", "profile": {"real_name": "Bob Builder"}},
    {"id": "U3", "name": "carol", "profile": {}},
    {"id": "B1", "real_name": "Deploy Bot", "is_bot": True, "profile": {}},
    {"id": "U4", "real_name": "Gone", "deleted": True, "profile": {}},
    {"id": "USLACKBOT", "real_name": "Slackbot", "profile": {}},
]


def test_is_syncable():
    assert [m["id"] for m in MEMBERS if is_syncable(m)] == ["U1", "U2", "U3"]


@pytest.mark.asyncio
async def test_sync_upserts_humans(store, make_client):
    written = await DirectorySync(store).sync(make_client(members=MEMBERS))

    assert written == 3
    roster = {u.slack_user_id: (u.name, u.email) for u in await store.list_directory()}
    assert roster == {
        "U1": ("Alice Example", "alice@example.com"),
        "U2": ("Bob Builder", None),
        "U3": ("carol", None),
    }


@pytest.mark.asyncio
async def test_resync_updates_in_place(store, make_client):
    sync = DirectorySync(store)
    await sync.sync(make_client(members=MEMBERS[:1]))

    renamed = [{"id": "U1", "real_name": "Alice Renamed", "profile": {"email": "alice@new.example"}}]
    await sync.sync(make_client(members=renamed))

    roster = await store.list_directory()
    assert [(u.slack_user_id, u.name, u.email) for u in roster] == [("U1", "Alice Renamed", "alice@new.example")]


@pytest.mark.asyncio
async def test_sync_is_scoped_to_team(store, make_client):
    await DirectorySync(store).sync(make_client(members=MEMBERS[:1]), team_id="T1")

    assert await store.list_directory() == []
    assert [u.slack_user_id for u in await store.list_directory("T1")] == ["U1"]


@pytest.mark.asyncio
async def test_spawned_sync_failure_is_logged(store, make_client, caplog):
    sync = DirectorySync(store)

    with caplog.at_level(logging.ERROR, logger="taskbot.services.directory_sync"):
        task = sync.spawn(make_client(users_list_error=RuntimeError("ratelimited")), "T1")
        await task

    assert task.exception() is None
    assert "Background directory sync failed" in caplog.text
    assert not sync._pending


@pytest.mark.asyncio
async def test_sync_follows_cursor_pages(store, make_client):
    client = make_client(pages=[MEMBERS[:2], MEMBERS[2:4], MEMBERS[4:]])

    written = await DirectorySync(store).sync(client)

    assert written == 3
    assert [c["cursor"] for c in client.calls_to("users_list")] == [None, "1", "2"]
    assert all(c["limit"] == USERS_PAGE_SIZE for c in client.calls_to("users_list"))
    assert sorted(u.slack_user_id for u in await store.list_directory()) == ["U1", "U2", "U3"]


@pytest.mark.asyncio
async def test_failed_member_upsert_is_skipped(store, make_client, monkeypatch, caplog):
    upsert = store.upsert_directory_entry

    async def flaky_upsert(slack_user_id, *args, **kwargs):
        if slack_user_id == "U2":
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        return await upsert(slack_user_id, *args, **kwargs)

    monkeypatch.setattr(store, "upsert_directory_entry", flaky_upsert)

    with caplog.at_level(logging.ERROR, logger="taskbot.services.directory_sync"):
        written = await DirectorySync(store).sync(make_client(members=MEMBERS))

    assert written == 2
    assert sorted(u.slack_user_id for u in await store.list_directory()) == ["U1", "U3"]
    assert "Directory upsert failed, skipping member" in caplog.text
