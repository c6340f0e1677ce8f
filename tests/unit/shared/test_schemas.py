"""Unit tests for shared schemas."""

import pytest
from pydantic import ValidationError

from shared.config import get_settings
from shared.schemas import (
    AudioResponse,
    BotConfiguration,
    BotStatusEvent,
    MeetingEndReason,
    MeetingParams,
    MeetingPlatform,
    NORMAL_END_REASONS,
    RecordingMode,
)


class TestMeetingParams:
    """Test MeetingParams schema."""

    def test_defaults(self):
        """Test a minimal session."""
        params = MeetingParams(id="bot-1", meeting_url="https://meet.google.com/abc-defg-hij")

        assert params.platform == MeetingPlatform.GOOGLE_MEET
        assert params.recording_mode == RecordingMode.SPEAKER_VIEW
        assert params.automatic_leave.waiting_room_timeout == 600
        assert params.automatic_leave.noone_joined_timeout == 600
        assert params.ai_bot is None
        assert params.session_id is None

    def test_from_json(self):
        """Test parsing the payload received from the API."""
        params = MeetingParams.model_validate_json(
            '{"id": "bot-1", "meeting_url": "https://zoom.us/j/123", "platform": "zoom",'
            ' "recording_mode": "audio_only", "ai_bot": {"type": "realtime", "voice": "verse"}}'
        )

        assert params.platform == MeetingPlatform.ZOOM
        assert params.recording_mode == RecordingMode.AUDIO_ONLY
        assert params.ai_bot == BotConfiguration(type="realtime", voice="verse")

    def test_automatic_leave_defaults_from_settings(self, monkeypatch):
        """Test unset thresholds follow the configured defaults."""
        monkeypatch.setattr(get_settings(), "waiting_room_timeout_sec", 5)
        monkeypatch.setattr(get_settings(), "noone_joined_timeout_sec", 7)

        params = MeetingParams(id="bot-1", meeting_url="https://meet.google.com/abc-defg-hij")
        partial = MeetingParams.model_validate_json(
            '{"id": "bot-1", "meeting_url": "https://zoom.us/j/123", "automatic_leave": {"waiting_room_timeout": 30}}'
        )

        assert params.automatic_leave.waiting_room_timeout == 5
        assert params.automatic_leave.noone_joined_timeout == 7
        assert partial.automatic_leave.waiting_room_timeout == 30
        assert partial.automatic_leave.noone_joined_timeout == 7

    def test_missing_meeting_url(self):
        with pytest.raises(ValidationError):
            MeetingParams(id="bot-1")

    def test_unknown_platform(self):
        with pytest.raises(ValidationError):
            MeetingParams(id="bot-1", meeting_url="https://example.com", platform="webex")


class TestEndReasons:
    """Test end reason classification."""

    @pytest.mark.parametrize("reason", [
        MeetingEndReason.MEETING_ENDED,
        MeetingEndReason.NOONE_JOINED,
        MeetingEndReason.MAX_DURATION_REACHED,
        MeetingEndReason.API_REQUEST,
    ])
    def test_normal(self, reason):
        assert reason in NORMAL_END_REASONS

    @pytest.mark.parametrize("reason", [
        MeetingEndReason.TIMEOUT_WAITING_TO_START,
        MeetingEndReason.CANNOT_JOIN_MEETING,
        MeetingEndReason.INVALID_MEETING_PARAMS,
        MeetingEndReason.INTERNAL_ERROR,
    ])
    def test_abnormal(self, reason):
        assert reason not in NORMAL_END_REASONS


class TestBotStatusEvent:
    """Test BotStatusEvent schema."""

    def test_serialization(self):
        event = BotStatusEvent(event="state_changed", bot_id="bot-1", data={"to": "in_call"})
        data = event.model_dump(mode="json")

        assert data["event"] == "state_changed"
        assert data["data"] == {"to": "in_call"}
        assert isinstance(data["timestamp"], str)


class TestAudioResponse:
    def test_default_metadata(self):
        response = AudioResponse(audio_data=b"\x00\x01")
        assert response.metadata == {}
