"""
Shared Pydantic schemas for the meeting bot.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from shared.config import get_settings


class MeetingPlatform(str, Enum):
    """Meeting platform enumeration."""

    GOOGLE_MEET = "google_meet"
    ZOOM = "zoom"
    MICROSOFT_TEAMS = "microsoft_teams"


class RecordingMode(str, Enum):
    """Recording layout enumeration."""

    SPEAKER_VIEW = "speaker_view"
    GALLERY_VIEW = "gallery_view"
    AUDIO_ONLY = "audio_only"


class MeetingEndReason(str, Enum):
    """Why a bot session ended."""

    MEETING_ENDED = "meeting_ended"
    NOONE_JOINED = "noone_joined"
    MAX_DURATION_REACHED = "max_duration_reached"
    API_REQUEST = "api_request"
    TIMEOUT_WAITING_TO_START = "timeout_waiting_to_start"
    CANNOT_JOIN_MEETING = "cannot_join_meeting"
    INVALID_MEETING_PARAMS = "invalid_meeting_params"
    INTERNAL_ERROR = "internal_error"


# End reasons that count as a successful bot session
NORMAL_END_REASONS = frozenset({
    MeetingEndReason.MEETING_ENDED,
    MeetingEndReason.NOONE_JOINED,
    MeetingEndReason.MAX_DURATION_REACHED,
    MeetingEndReason.API_REQUEST,
})


class AutomaticLeave(BaseModel):
    """Thresholds (seconds) after which the bot leaves on its own. Defaults come from settings."""

    waiting_room_timeout: int = Field(default_factory=lambda: get_settings().waiting_room_timeout_sec)
    noone_joined_timeout: int = Field(default_factory=lambda: get_settings().noone_joined_timeout_sec)


class BotConfiguration(BaseModel):
    """Configuration for the AI participant attached to a bot session."""

    type: str = "realtime"
    model_name: Optional[str] = None
    voice: Optional[str] = None
    instructions: Optional[str] = None


class MeetingParams(BaseModel):
    """Parameters of one bot session, as received from the API."""

    id: str
    meeting_url: str
    bot_name: str = "Meeting Bot"
    platform: MeetingPlatform = MeetingPlatform.GOOGLE_MEET
    session_id: Optional[str] = None
    bot_uuid: Optional[str] = None
    bots_api_key: Optional[str] = None
    recording_mode: RecordingMode = RecordingMode.SPEAKER_VIEW
    mp4_s3_path: Optional[str] = None
    automatic_leave: AutomaticLeave = Field(default_factory=AutomaticLeave)
    ai_bot: Optional[BotConfiguration] = None
    custom_branding_bot_path: Optional[str] = None


class AudioChunkMetadata(BaseModel):
    """Metadata about one captured audio chunk."""

    timestamp: Optional[float] = None
    sample_rate: int = 16000
    channels: int = 1


class VideoChunkMetadata(BaseModel):
    """Metadata about one captured video chunk."""

    timestamp: Optional[float] = None
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class AudioResponse(BaseModel):
    """Audio emitted by an AI participant, ready to be played into the meeting."""

    audio_data: bytes
    metadata: Dict[str, Any] = Field(default_factory=dict)


class BotStatusEvent(BaseModel):
    """Lifecycle event posted to the backend API."""

    event: str
    bot_id: str
    session_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
