"""
Realtime AI participant backed by a persistent OpenAI Realtime session.
"""
import base64
import binascii
import logging
import time
from typing import Any, Dict, Optional

from shared.config import get_settings
from shared.schemas import AudioResponse, BotConfiguration, MeetingParams

from ..exceptions import BotInitializationError, BotNotInitializedError, BotSessionError
from .participant_bot import (
    AudioResponseCallback,
    BinaryData,
    MeetingParticipantBot,
    chunk_timestamp,
    metadata_value,
    to_bytes,
)
from .realtime_client import RealtimeCallbacks, RealtimeClient, RealtimeEventType, RealtimeSession

logger = logging.getLogger(__name__)
settings = get_settings()


class RealtimeParticipantBot(MeetingParticipantBot):
    """Streams meeting audio/video to a realtime model and relays its spoken answers."""

    name = "RealtimeParticipantBot"

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key
        self._client: Optional[RealtimeClient] = None
        self._session: Optional[RealtimeSession] = None
        self._initialized = False
        self._params: Optional[MeetingParams] = None
        self._audio_response_callback: Optional[AudioResponseCallback] = None

    @property
    def has_active_session(self) -> bool:
        return self._session is not None

    async def initialize(self, params: MeetingParams) -> None:
        self._initialized = False
        self._client = None

        try:
            api_key = self._api_key or settings.openai_api_key
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable is required")

            self._client = RealtimeClient(api_key=api_key, url=settings.realtime_api_url)
            self._params = params
            self._initialized = True
            logger.info(f"{self.name} initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize {self.name}: {e}")
            raise BotInitializationError(f"{self.name} initialization failed: {e}") from e

    async def start_session(self, session_config: Optional[BotConfiguration] = None) -> None:
        if not self.is_ready():
            raise BotNotInitializedError(f"{self.name} not initialized. Call initialize() first.")

        if session_config is None and self._params is not None:
            session_config = self._params.ai_bot

        model_name = settings.realtime_default_model
        if session_config and session_config.model_name:
            model_name = session_config.model_name

        if self._session is not None:
            logger.info(f"{self.name}: Replacing the active session")
            await self._close_session()

        try:
            self._session = await self._client.connect(
                model=model_name,
                callbacks=RealtimeCallbacks(
                    on_open=self._on_open,
                    on_message=self._handle_message,
                    on_error=self._on_error,
                    on_close=self._on_close,
                ),
                session_update=self._build_session_update(session_config),
            )
            logger.info(f"{self.name} session started with model: {model_name}")

        except Exception as e:
            logger.error(f"Failed to start {self.name} session: {e}")
            raise BotSessionError(f"Failed to start realtime session: {e}") from e

    async def send_audio_chunk(self, audio_data: BinaryData, metadata: Any = None) -> None:
        if self._session is None:
            logger.warning(f"{self.name}: No active session, ignoring audio chunk")
            return

        try:
            audio_bytes = to_bytes(audio_data)
            await self._session.send_realtime_input({
                "data": base64.b64encode(audio_bytes).decode("ascii"),
                "mime_type": "audio/pcm",
            })
            logger.debug(
                f"{self.name}: Sent audio chunk of {len(audio_bytes)} bytes "
                f"(timestamp={chunk_timestamp(metadata)})"
            )
        except Exception as e:
            # A dropped chunk must not end the meeting
            logger.error(f"Failed to send audio chunk to {self.name}: {e}")

    async def send_video_chunk(self, video_data: BinaryData, metadata: Any = None) -> None:
        if self._session is None:
            logger.warning(f"{self.name}: No active session, ignoring video chunk")
            return

        try:
            mime_type = metadata_value(metadata, "format", "video/webm")
            if not isinstance(mime_type, str) or not mime_type.startswith("image/"):
                # The realtime API only takes still images, container fragments are dropped
                logger.debug(f"{self.name}: Dropping video chunk with unsupported format {mime_type!r}")
                return

            video_bytes = to_bytes(video_data)
            await self._session.send_realtime_input({
                "data": base64.b64encode(video_bytes).decode("ascii"),
                "mime_type": mime_type,
            })
            logger.debug(
                f"{self.name}: Sent video chunk of {len(video_bytes)} bytes "
                f"(timestamp={chunk_timestamp(metadata)})"
            )
        except Exception as e:
            logger.error(f"Failed to send video chunk to {self.name}: {e}")

    def on_audio_response(self, callback: AudioResponseCallback) -> None:
        self._audio_response_callback = callback
        logger.info(f"{self.name} audio response callback registered")

    async def end_session(self) -> None:
        try:
            await self._close_session()
            logger.info(f"{self.name} session ended")
        finally:
            self._audio_response_callback = None

    async def _close_session(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            await session.close()
        except Exception as e:
            logger.error(f"Error ending {self.name} session: {e}")

    def is_ready(self) -> bool:
        return self._initialized and self._client is not None

    def _build_session_update(self, session_config: Optional[BotConfiguration]) -> Dict[str, Any]:
        voice = settings.realtime_voice
        instructions = None
        if session_config:
            voice = session_config.voice or voice
            instructions = session_config.instructions

        if not instructions:
            bot_name = self._params.bot_name if self._params else "the meeting assistant"
            instructions = (
                f"You are {bot_name}, a participant in a video meeting. "
                "Answer briefly and only when you are addressed."
            )

        return {
            "modalities": ["audio", "text"],
            "instructions": instructions,
            "voice": voice,
            "input_audio_format": "pcm16",
            "output_audio_format": "pcm16",
            "turn_detection": {"type": "server_vad"},
        }

    def _handle_message(self, event: Dict[str, Any]) -> None:
        event_type = event.get("type")

        if event_type == RealtimeEventType.RESPONSE_AUDIO_DELTA:
            self._emit_audio(event.get("delta"))
        elif event_type == RealtimeEventType.ERROR:
            logger.error(f"{self.name}: Realtime error event: {event.get('error')}")
        else:
            logger.debug(f"{self.name}: Received {event_type}")

    def _emit_audio(self, delta: Optional[str]) -> None:
        if not delta:
            return

        try:
            audio_data = base64.b64decode(delta)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"{self.name}: Undecodable audio delta: {e}")
            return

        callback = self._audio_response_callback
        if callback is None:
            logger.debug(f"{self.name}: No audio response callback, dropping {len(audio_data)} bytes")
            return

        response = AudioResponse(
            audio_data=audio_data,
            metadata={"timestamp": time.time() * 1000},
        )
        try:
            callback(response)
        except Exception as e:
            logger.error(f"{self.name}: Audio response callback failed: {e}", exc_info=True)

    def _on_open(self) -> None:
        logger.info(f"{self.name}: WebSocket connection opened")

    def _on_error(self, error: Exception) -> None:
        logger.error(f"{self.name}: WebSocket error: {error}")

    def _on_close(self, code: Optional[int]) -> None:
        logger.info(f"{self.name}: WebSocket connection closed (code={code})")
