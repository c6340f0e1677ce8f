"""
Redis-backed registry of running bot sessions.
"""
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from shared.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class SessionRegistry:
    """Session entries keyed by session id, shared with the API that launches bots."""

    def __init__(self, redis_url: Optional[str] = None, key_prefix: Optional[str] = None, client=None):
        self.redis_url = redis_url or settings.redis_url
        self.key_prefix = key_prefix or settings.session_key_prefix
        self.redis_client: Optional[redis.Redis] = client

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def _get_client(self) -> redis.Redis:
        if self.redis_client is None:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=False,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        return self.redis_client

    async def set(self, session_id: str, data: Dict[str, Any], ttl: Optional[int] = None) -> None:
        serialized = json.dumps(data, default=str).encode("utf-8")
        await self._get_client().setex(self._key(session_id), ttl or settings.session_ttl_sec, serialized)

    async def get(self, session_id: str) -> Optional[Dict[str, Any]]:
        data = await self._get_client().get(self._key(session_id))
        if not data:
            return None
        return json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)

    async def delete(self, session_id: str) -> None:
        await self._get_client().delete(self._key(session_id))
        logger.info(f"Session {session_id} removed from registry")

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
