"""
Live media fan-out during a call.

Captured audio/video chunks are forwarded to the AI participant (if any) and
to an optional WebSocket sink. Audio answers from the AI participant are
queued and played back into the meeting one after another.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

import websockets

from shared.schemas import AudioChunkMetadata, AudioResponse, VideoChunkMetadata

from .ai.participant_bot import MeetingParticipantBot

logger = logging.getLogger(__name__)

PlaybackHandler = Callable[[bytes], Awaitable[None]]


class StreamingService:
    """Routes live media between the meeting, the AI participant and an output socket."""

    def __init__(
        self,
        ai_bot: Optional[MeetingParticipantBot] = None,
        output_url: Optional[str] = None,
        playback: Optional[PlaybackHandler] = None,
    ):
        self.ai_bot = ai_bot
        self.output_url = output_url
        self.playback = playback
        self.websocket = None
        self.is_running = False
        self._responses: "asyncio.Queue[AudioResponse]" = asyncio.Queue()
        self._playback_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.is_running:
            return

        if self.output_url:
            try:
                self.websocket = await websockets.connect(self.output_url, max_size=None)
                logger.info(f"Connected to streaming output: {self.output_url}")
            except Exception as e:
                logger.warning(f"Streaming output connection failed: {e}")
                self.websocket = None

        if self.ai_bot is not None:
            self.ai_bot.on_audio_response(self._on_ai_audio)
            self._playback_task = asyncio.create_task(self._playback_loop())

        self.is_running = True
        logger.info("📡 Streaming service started")

    async def push_audio(self, data: bytes, metadata: Optional[AudioChunkMetadata] = None) -> None:
        if not self.is_running:
            return

        if self.ai_bot is not None:
            await self.ai_bot.send_audio_chunk(data, metadata)
        await self._forward(data)

    async def push_video(self, data: bytes, metadata: Optional[VideoChunkMetadata] = None) -> None:
        if not self.is_running:
            return

        if self.ai_bot is not None:
            await self.ai_bot.send_video_chunk(data, metadata)

    async def stop(self) -> None:
        if not self.is_running and self.websocket is None and self._playback_task is None:
            return
        self.is_running = False

        if self._playback_task is not None:
            self._playback_task.cancel()
            self._playback_task = None

        if self.websocket is not None:
            websocket, self.websocket = self.websocket, None
            try:
                await websocket.close()
            except Exception as e:
                logger.warning(f"Error closing streaming output: {e}")

        logger.info("Streaming service stopped")

    async def _forward(self, data: bytes) -> None:
        if self.websocket is None:
            return
        try:
            await self.websocket.send(data)
        except Exception as e:
            logger.warning(f"Dropping streaming output after send failure: {e}")
            self.websocket = None

    def _on_ai_audio(self, response: AudioResponse) -> None:
        self._responses.put_nowait(response)

    async def _playback_loop(self) -> None:
        while True:
            response = await self._responses.get()
            if self.playback is None:
                continue
            try:
                await self.playback(response.audio_data)
            except Exception as e:
                logger.error(f"AI audio playback failed: {e}")
