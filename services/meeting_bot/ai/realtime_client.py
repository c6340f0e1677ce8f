"""
Minimal client for the OpenAI Realtime WebSocket API.

Only the parts the participant bot needs: open a session, push media,
dispatch server events to callbacks, close.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)


class RealtimeEventType:
    """Realtime API event types used by the bot."""

    SESSION_UPDATE = "session.update"
    INPUT_AUDIO_BUFFER_APPEND = "input_audio_buffer.append"
    CONVERSATION_ITEM_CREATE = "conversation.item.create"

    SESSION_CREATED = "session.created"
    RESPONSE_AUDIO_DELTA = "response.audio.delta"
    RESPONSE_DONE = "response.done"
    ERROR = "error"


class RealtimeCallbacks:
    """Lifecycle and message callbacks of one realtime session."""

    def __init__(
        self,
        on_open: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_close: Optional[Callable[[Optional[int]], None]] = None,
    ):
        self.on_open = on_open
        self.on_message = on_message
        self.on_error = on_error
        self.on_close = on_close


class RealtimeSession:
    """An open realtime connection."""

    def __init__(self, websocket, callbacks: RealtimeCallbacks):
        self.websocket = websocket
        self.callbacks = callbacks
        self.closed = False
        self._listener_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._listener_task = asyncio.create_task(self._listen_messages())

    async def send_event(self, event: Dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionError("Realtime session is closed")
        await self.websocket.send(json.dumps(event))

    async def send_realtime_input(self, media: Dict[str, str]) -> None:
        """
        Send one media blob ({"data": base64, "mime_type": ...}).

        Audio goes to the input audio buffer, anything else is added to the
        conversation as an image item.
        """
        mime_type = media.get("mime_type", "")
        if mime_type.startswith("audio/"):
            event = {
                "type": RealtimeEventType.INPUT_AUDIO_BUFFER_APPEND,
                "audio": media["data"],
            }
        else:
            event = {
                "type": RealtimeEventType.CONVERSATION_ITEM_CREATE,
                "item": {
                    "type": "message",
                    "role": "user",
                    "content": [
                        {
                            "type": "input_image",
                            "image_url": f"data:{mime_type};base64,{media['data']}",
                        }
                    ],
                },
            }
        await self.send_event(event)

    async def close(self) -> None:
        self.closed = True
        await self.websocket.close()
        if self._listener_task and not self._listener_task.done():
            self._listener_task.cancel()

    async def _listen_messages(self) -> None:
        close_code = None
        try:
            async for message in self.websocket:
                try:
                    event = json.loads(message)
                except json.JSONDecodeError:
                    logger.debug("[RealtimeClient] Ignoring non-JSON message")
                    continue

                if self.callbacks.on_message:
                    self.callbacks.on_message(event)

        except ConnectionClosed as e:
            close_code = e.code
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[RealtimeClient] Listener error: {e}", exc_info=True)
            if self.callbacks.on_error:
                self.callbacks.on_error(e)
        finally:
            self.closed = True
            if self.callbacks.on_close:
                self.callbacks.on_close(close_code)


class RealtimeClient:
    """Factory for realtime sessions bound to one API key."""

    def __init__(self, api_key: Optional[str], url: str = "wss://api.openai.com/v1/realtime"):
        if not api_key:
            raise ValueError("Missing OpenAI API key")
        self.api_key = api_key
        self.url = url

    async def connect(
        self,
        model: str,
        callbacks: RealtimeCallbacks,
        session_update: Optional[Dict[str, Any]] = None,
    ) -> RealtimeSession:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": "realtime=v1",
        }

        websocket = await websockets.connect(
            f"{self.url}?model={model}",
            additional_headers=headers,
            max_size=None,
        )

        session = RealtimeSession(websocket, callbacks)
        try:
            if callbacks.on_open:
                callbacks.on_open()

            if session_update:
                await session.send_event({
                    "type": RealtimeEventType.SESSION_UPDATE,
                    "session": session_update,
                })
        except BaseException:
            # Nothing else holds the socket yet
            session.closed = True
            await websocket.close()
            raise

        session.start()
        return session
