"""FastAPI application entry point hosting the Slack app."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler
from sqlalchemy import text

from taskbot.config import settings
from taskbot.core.logging import configure_logging
from taskbot.database import AsyncSessionLocal, close_db, engine, init_db
from taskbot.integrations.slack import INSTALL_PATH, REDIRECT_PATH, create_slack_app
from taskbot.middleware.metrics import setup_metrics
from taskbot.services.store_service import TaskStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    configure_logging()
    await init_db()
    logger.info(
        "TaskBot started",
        extra={"multi_tenant": settings.MULTI_TENANT, "version": settings.APP_VERSION},
    )
    yield
    # Shutdown
    await close_db()


store = TaskStore(AsyncSessionLocal)
slack_app = create_slack_app(store)
slack_handler = AsyncSlackRequestHandler(slack_app)

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)
setup_metrics(app)


@app.post("/slack/events")
async def slack_events(req: Request):
    """Events API, interactivity and view submissions."""
    return await slack_handler.handle(req)


if settings.MULTI_TENANT:

    @app.get(INSTALL_PATH)
    async def slack_install(req: Request):
        """Start the OAuth install flow."""
        return await slack_handler.handle(req)

    @app.get(REDIRECT_PATH)
    async def slack_oauth_redirect(req: Request):
        """OAuth callback; stores the installation."""
        return await slack_handler.handle(req)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    health_status = {
        "status": "ok",
        "multi_tenant": settings.MULTI_TENANT,
        "checks": {"database": "unknown"},
    }

    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        health_status["checks"]["database"] = "ok"
    except Exception as e:
        health_status["checks"]["database"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    return health_status


def run() -> None:
    """Serve with uvicorn on settings.PORT."""
    import uvicorn

    uvicorn.run("taskbot.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
