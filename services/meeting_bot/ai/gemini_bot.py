"""
Gemini participant using the request/response generation API.

The generation API has no realtime audio channel, so the streaming methods
accept and drop chunks. The backend still satisfies the participant contract
so that it can be selected like any other.
"""
import logging
from typing import Any, Optional

import google.generativeai as genai

from shared.config import get_settings
from shared.schemas import BotConfiguration, MeetingParams

from ..exceptions import BotInitializationError, BotNotInitializedError, BotSessionError
from .participant_bot import AudioResponseCallback, BinaryData, MeetingParticipantBot

logger = logging.getLogger(__name__)
settings = get_settings()


class GeminiParticipantBot(MeetingParticipantBot):
    """Batch-style Gemini backend."""

    name = "GeminiParticipantBot"

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key
        self._client = None
        self._model = None
        self._initialized = False
        self._audio_response_callback: Optional[AudioResponseCallback] = None

    async def initialize(self, params: MeetingParams) -> None:
        self._initialized = False
        self._client = None

        try:
            api_key = self._api_key or settings.gemini_api_key
            if not api_key:
                raise ValueError("GEMINI_API_KEY environment variable is required")

            genai.configure(api_key=api_key)
            self._client = genai
            self._initialized = True
            logger.info(f"{self.name} initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize {self.name}: {e}")
            raise BotInitializationError(f"{self.name} initialization failed: {e}") from e

    async def start_session(self, session_config: Optional[BotConfiguration] = None) -> None:
        if not self.is_ready():
            raise BotNotInitializedError(f"{self.name} not initialized. Call initialize() first.")

        model_name = settings.gemini_default_model
        if session_config and session_config.model_name:
            model_name = session_config.model_name

        try:
            self._model = self._client.GenerativeModel(model_name)
            logger.info(f"{self.name} session started with model: {model_name}")
        except Exception as e:
            logger.error(f"Failed to start {self.name} session: {e}")
            raise BotSessionError(f"Failed to start Gemini session: {e}") from e

    async def send_audio_chunk(self, audio_data: BinaryData, metadata: Any = None) -> None:
        try:
            logger.debug(
                f"{self.name}.send_audio_chunk called with {len(audio_data)} bytes "
                f"(has_model={self._model is not None})"
            )
        except Exception as e:
            logger.debug(f"{self.name}: unreadable audio chunk: {e}")

    async def send_video_chunk(self, video_data: BinaryData, metadata: Any = None) -> None:
        try:
            logger.debug(
                f"{self.name}.send_video_chunk called with {len(video_data)} bytes "
                f"(has_model={self._model is not None})"
            )
        except Exception as e:
            logger.debug(f"{self.name}: unreadable video chunk: {e}")

    def on_audio_response(self, callback: AudioResponseCallback) -> None:
        self._audio_response_callback = callback
        logger.info(f"{self.name} response callback registered")

    async def end_session(self) -> None:
        self._model = None
        self._audio_response_callback = None
        logger.info(f"{self.name} session ended")

    def is_ready(self) -> bool:
        return self._initialized and self._client is not None
