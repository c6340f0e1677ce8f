"""
Uniform contract over realtime AI backends that take part in a meeting.

A participant bot receives the meeting's audio (and optionally video) as a
stream of chunks and answers with audio that gets played back into the
meeting. The meeting pipeline only ever talks to this interface, never to a
concrete vendor backend.

Sends are loss-tolerant: a failed or dropped chunk is logged and forgotten,
it never tears down the meeting. Only initialization errors reach the caller.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

from shared.schemas import AudioResponse, BotConfiguration, MeetingParams

logger = logging.getLogger(__name__)

BinaryData = Union[bytes, bytearray, memoryview]
AudioResponseCallback = Callable[[AudioResponse], None]


class MeetingParticipantBot(ABC):
    """Interface implemented by every AI backend."""

    name = "MeetingParticipantBot"

    @abstractmethod
    async def initialize(self, params: MeetingParams) -> None:
        """Construct the underlying client. Raises BotInitializationError."""

    @abstractmethod
    async def start_session(self, session_config: Optional[BotConfiguration] = None) -> None:
        """Open a session with the backend. Raises if not initialized."""

    @abstractmethod
    async def send_audio_chunk(self, audio_data: BinaryData, metadata: Any = None) -> None:
        """Push one audio chunk. Never raises."""

    async def send_video_chunk(self, video_data: BinaryData, metadata: Any = None) -> None:
        """Push one video chunk. Never raises; backends without video ignore it."""
        logger.debug(f"{self.name}: video input not supported, dropping {len(video_data)} bytes")

    @abstractmethod
    def on_audio_response(self, callback: AudioResponseCallback) -> None:
        """Register the callback for audio responses. Last registration wins."""

    @abstractmethod
    async def end_session(self) -> None:
        """Close the session. Session state is cleared even if closing fails."""

    @abstractmethod
    def is_ready(self) -> bool:
        """True iff initialization succeeded, whether or not a session is open."""


def to_bytes(data: BinaryData) -> bytes:
    """Normalize the accepted binary representations to bytes."""
    if isinstance(data, bytes):
        return data
    return bytes(data)


def metadata_value(metadata: Any, key: str, default: Any = None) -> Any:
    """Read a field from chunk metadata given as a model, a dict, or anything else."""
    if metadata is None:
        return default
    try:
        if isinstance(metadata, dict):
            value = metadata.get(key, default)
        else:
            value = getattr(metadata, key, default)
    except Exception:
        return default
    return default if value is None else value


def chunk_timestamp(metadata: Any) -> float:
    """Timestamp of a chunk in milliseconds, falling back to now."""
    value = metadata_value(metadata, "timestamp")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return time.time() * 1000
