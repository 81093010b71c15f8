"""
Discord Error Notification Service for Wichty Check-In
Sends error notifications to a Discord webhook for real-time monitoring.
Calls are dispatched in the background; failures surface in the dispatcher's failure log.
"""
import httpx
import traceback
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import logging
from app.config import settings

logger = logging.getLogger(__name__)


class DiscordErrorNotifier:
    """Send error notifications to Discord webhook"""

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def build_error_embed(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        error_type = type(error).__name__
        error_message = str(error)
        error_traceback = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        if len(error_traceback) > 900:
            error_traceback = error_traceback[-900:]

        embed = {
            "title": f"Error: {error_type}",
            "description": error_message[:2000] if error_message else "No message",
            "color": 15158332,  # Red
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "fields": []
        }

        if context:
            context_details = [f"**{k}:** {v}" for k, v in context.items()]
            embed["fields"].append({
                "name": "Context",
                "value": "\n".join(context_details)[:1024],
                "inline": False
            })

        embed["fields"].append({
            "name": "Traceback",
            "value": f"```python\n{error_traceback}\n```",
            "inline": False
        })

        embed["fields"].append({
            "name": "Environment",
            "value": f"**Env:** {settings.environment}",
            "inline": True
        })

        return embed

    async def _post(self, payload: Dict[str, Any]):
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.webhook_url, json=payload)
            response.raise_for_status()

    async def send_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None
    ):
        """Send error notification to Discord"""
        payload = {
            "embeds": [self.build_error_embed(error, context)],
            "username": "Wichty Check-In Monitor"
        }
        await self._post(payload)
        logger.info(f"Error notification sent: {type(error).__name__}")

    async def send_warning(
        self,
        title: str,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """Send warning notification to Discord"""
        embed = {
            "title": f"Warning: {title}",
            "description": message[:2000],
            "color": 16776960,  # Yellow
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        if context:
            embed["fields"] = [
                {"name": k, "value": str(v)[:1024], "inline": True}
                for k, v in context.items()
            ]

        payload = {
            "embeds": [embed],
            "username": "Wichty Check-In Warning"
        }
        await self._post(payload)


# Global error notifier instance
error_notifier = None
if settings.discord_error_webhook_url:
    error_notifier = DiscordErrorNotifier(settings.discord_error_webhook_url)
