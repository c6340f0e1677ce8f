"""
Best-effort lifecycle reporting to the backend API.
"""
import logging
from typing import Any, Dict, Optional

import aiohttp

from shared.config import get_settings
from shared.schemas import BotStatusEvent, MeetingParams

logger = logging.getLogger(__name__)
settings = get_settings()


class StatusReporter:
    """Posts bot lifecycle events. Never raises."""

    def __init__(self, params: MeetingParams, api_base_url: Optional[str] = None):
        self.params = params
        self.api_base_url = api_base_url if api_base_url is not None else settings.api_base_url

    @property
    def enabled(self) -> bool:
        return bool(self.api_base_url)

    async def report(self, event: str, data: Optional[Dict[str, Any]] = None) -> bool:
        if not self.enabled:
            return False

        payload = BotStatusEvent(
            event=event,
            bot_id=self.params.bot_uuid or self.params.id,
            session_id=self.params.session_id,
            data=data or {},
        )
        headers = {}
        if self.params.bots_api_key:
            headers["x-meeting-bot-api-key"] = self.params.bots_api_key

        try:
            api_url = f"{self.api_base_url.rstrip('/')}{settings.status_webhook_path}"
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    api_url,
                    json=payload.model_dump(mode="json"),
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=settings.status_webhook_timeout_sec),
                ) as response:
                    if response.status == 200:
                        logger.debug(f"Reported {event} to backend API")
                        return True
                    logger.warning(f"Status report {event} failed: {response.status}")
                    return False

        except Exception as e:
            logger.warning(f"Failed to report {event} to backend API: {e}")
            return False
