"""
Discord webhook notifications for content and registration events.

Notifications are best-effort: they run after the response is sent, failures
are logged and never retried, and a missing webhook URL disables them.
"""
import logging
from datetime import UTC, datetime
from typing import Any, Literal

import httpx

from models.cursor_rule import CursorRule
from models.prompt import Prompt
from models.user import User

logger = logging.getLogger(__name__)

ContentEvent = Literal["published", "edited", "deleted"]

WEBHOOK_TIMEOUT_SECONDS = 10.0

GREEN = 0x22C55E
ORANGE = 0xF59E0B
RED = 0xEF4444

_EVENT_COLORS: dict[str, int] = {"published": GREEN, "edited": ORANGE, "deleted": RED}
_EVENT_TITLES: dict[str, str] = {
    "published": "New {kind} Published",
    "edited": "{kind} Updated",
    "deleted": "{kind} Deleted",
}


def _author_label(user: User) -> str:
    name = user.name or "Anonymous"
    return f"{name} (@{user.username})" if user.username else name


class DiscordNotifier:
    """Posts embeds to Discord webhooks."""

    def __init__(
        self,
        content_webhook_url: str = "",
        registrations_webhook_url: str = "",
        app_url: str = "http://localhost:3000",
    ) -> None:
        self.content_webhook_url = content_webhook_url
        self.registrations_webhook_url = registrations_webhook_url
        self.app_url = app_url.rstrip("/")

    async def _send(self, webhook_url: str, payload: dict[str, Any]) -> bool:
        """POST a payload; returns False on any HTTP failure."""
        try:
            async with httpx.AsyncClient(timeout=WEBHOOK_TIMEOUT_SECONDS) as client:
                response = await client.post(webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("discord_webhook_failed: %s", e)
            return False
        return True

    def build_content_embed(
        self,
        event: ContentEvent,
        item: Prompt | CursorRule,
        author: User,
    ) -> dict[str, Any]:
        """Embed describing a content event."""
        if isinstance(item, CursorRule):
            kind, path, category = "Cursor Rule", "cursor-rules", item.rule_type
        else:
            kind, path, category = "Prompt", "prompts", item.prompt_type
        if item.category is not None:
            category = item.category.name

        fields: list[dict[str, Any]] = [
            {"name": f"{kind} Title", "value": item.title, "inline": False},
            {"name": "Author", "value": _author_label(author), "inline": True},
            {"name": "Category", "value": category, "inline": True},
            {
                "name": "Visibility",
                "value": "Public" if item.published else "Private",
                "inline": True,
            },
            {"name": "URL", "value": f"{self.app_url}/{path}/{item.slug}", "inline": False},
        ]
        if item.tags:
            fields.insert(3, {
                "name": "Tags",
                "value": ", ".join(f"`{tag}`" for tag in item.tags),
                "inline": False,
            })

        embed: dict[str, Any] = {
            "title": _EVENT_TITLES[event].format(kind=kind),
            "description": item.summary or "No description provided",
            "color": _EVENT_COLORS[event],
            "fields": fields,
            "timestamp": datetime.now(UTC).isoformat(),
            "footer": {"text": "Promptu Content System"},
        }
        if author.image:
            embed["thumbnail"] = {"url": author.image}
        return embed

    def build_registration_embed(self, user: User, total_registrations: int) -> dict[str, Any]:
        """Embed announcing a completed profile."""
        return {
            "title": "New User Registration",
            "description": (
                "A new user has completed their profile setup on Promptu!\n\n"
                f"**Total Registrations: {total_registrations} users**"
            ),
            "color": GREEN,
            "fields": [
                {"name": "Name", "value": user.name or "", "inline": True},
                {"name": "Username", "value": f"@{user.username}", "inline": True},
                {"name": "Email", "value": user.email or "", "inline": True},
                {
                    "name": "Profile URL",
                    "value": f"{self.app_url}/profile/{user.username}",
                    "inline": False,
                },
                {"name": "Registration #", "value": f"#{total_registrations}", "inline": True},
            ],
            "timestamp": datetime.now(UTC).isoformat(),
            "footer": {"text": "Promptu Registration System"},
        }

    async def notify_content(
        self,
        event: ContentEvent,
        item: Prompt | CursorRule,
        author: User,
    ) -> bool:
        """Send a content event notification. Returns True if it was delivered."""
        if not self.content_webhook_url:
            logger.debug("discord_content_webhook_not_configured")
            return False
        embed = self.build_content_embed(event, item, author)
        return await self._send(self.content_webhook_url, {"embeds": [embed]})

    async def notify_registration(self, user: User, total_registrations: int) -> bool:
        """Send a registration notification. Returns True if it was delivered."""
        if not self.registrations_webhook_url:
            logger.debug("discord_registrations_webhook_not_configured")
            return False
        embed = self.build_registration_embed(user, total_registrations)
        return await self._send(self.registrations_webhook_url, {"embeds": [embed]})
