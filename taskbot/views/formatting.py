"""Small Block Kit helpers shared by every view."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from zoneinfo import ZoneInfo

from taskbot.config import settings


def format_date(value: Optional[Union[datetime, str]], tz: Optional[str] = None) -> str:
    """Render a timestamp as e.g. ``Mar 7, 2026``; ``N/A`` when missing."""
    if not value:
        return "N/A"
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz or settings.TIMEZONE))
    return f"{local:%b} {local.day}, {local.year}"


def plain_text(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text}


def mrkdwn(text: str) -> Dict[str, Any]:
    return {"type": "mrkdwn", "text": text}


def button(
    text: str,
    action_id: str,
    value: Optional[str] = None,
    style: Optional[str] = None,
) -> Dict[str, Any]:
    element: Dict[str, Any] = {
        "type": "button",
        "text": plain_text(text),
        "action_id": action_id,
    }
    if value is not None:
        element["value"] = value
    if style:
        element["style"] = style
    return element


def actions(*elements: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "actions", "elements": list(elements)}


def header(text: str) -> Dict[str, Any]:
    return {"type": "header", "text": plain_text(text)}


def divider() -> Dict[str, Any]:
    return {"type": "divider"}


def placeholder(text: str) -> Dict[str, Any]:
    """Italic single line shown instead of an empty section."""
    return {"type": "section", "text": mrkdwn(f"_{text}_")}


def build_nav_bar() -> Dict[str, Any]:
    """Top navigation shared by the home tab views."""
    return actions(
        button("My Tasks", "nav_my_tasks"),
        button("People", "nav_people"),
        button("📌 Pinned", "nav_pinned"),
    )
