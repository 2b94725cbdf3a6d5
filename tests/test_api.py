"""Tests for the HTTP surface and the Slack app factory."""
import pytest
from fastapi.testclient import TestClient
from slack_bolt.async_app import AsyncApp

from taskbot.config import Settings
from taskbot.integrations.installation_store import SQLAlchemyInstallationStore
from taskbot.integrations.slack import create_slack_app
from taskbot.main import app


@pytest.fixture
def client(db_session):
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["checks"]["database"] == "ok"
    assert data["multi_tenant"] is False


def test_metrics(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "slack_actions_total" in response.text


def test_unsigned_slack_request_rejected(client):
    response = client.post("/slack/events", json={"type": "url_verification", "challenge": "abc"})

    assert response.status_code == 401


def test_install_routes_only_when_multi_tenant(client):
    assert client.get("/slack/install").status_code == 404


@pytest.mark.asyncio
async def test_single_tenant_requires_bot_token(store):
    with pytest.raises(ValueError):
        create_slack_app(store, settings=Settings(MULTI_TENANT=False, SLACK_BOT_TOKEN=None))


@pytest.mark.asyncio
async def test_multi_tenant_requires_oauth_credentials(store):
    with pytest.raises(ValueError):
        create_slack_app(store, settings=Settings(MULTI_TENANT=True, SLACK_CLIENT_ID=None))


@pytest.mark.asyncio
async def test_multi_tenant_app(store, session_factory, multi_tenant_settings):
    bolt_app = create_slack_app(
        store,
        settings=multi_tenant_settings,
        installation_store=SQLAlchemyInstallationStore(session_factory),
    )

    assert isinstance(bolt_app, AsyncApp)
    assert bolt_app.oauth_flow is not None
