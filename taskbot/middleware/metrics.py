"""Prometheus metrics for Slack interactions."""
from fastapi import FastAPI
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

# Metrics
slack_actions_total = Counter(
    "slack_actions_total",
    "Total Slack interactions handled",
    ["action", "outcome"],
)

slack_action_duration_seconds = Histogram(
    "slack_action_duration_seconds",
    "Slack interaction handling time in seconds",
    ["action"],
)


def setup_metrics(app: FastAPI) -> None:
    """Setup Prometheus metrics endpoint."""

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
