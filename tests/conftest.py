"""Pytest configuration and fixtures."""

import os
import pytest
import boto3
from moto import mock_aws
from unittest.mock import AsyncMock, Mock

# Set test environment variables
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["OPENAI_API_KEY"] = "test_key"
os.environ["GEMINI_API_KEY"] = "test_key"
os.environ["S3_BUCKET"] = "test-recordings"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ.pop("API_BASE_URL", None)
os.environ.pop("STREAMING_OUTPUT_URL", None)

from shared.schemas import AutomaticLeave, MeetingParams  # noqa: E402
from services.meeting_bot.context import MeetingContext  # noqa: E402
from services.meeting_bot.media_context import AudioContext, VideoContext  # noqa: E402
from services.meeting_bot.provider import MeetingProvider  # noqa: E402


class FakeProvider(MeetingProvider):
    """Scriptable stand-in for the browser harness."""

    def __init__(self):
        self.open_meeting_page = AsyncMock()
        self.join_meeting = AsyncMock()
        self.wait_for_admission = AsyncMock(return_value=True)
        self.audio_context = AudioContext()
        self.video_context = VideoContext()
        self.start_capture = AsyncMock(return_value=(self.audio_context, self.video_context))
        self.count_participants = AsyncMock(return_value=1)
        self.has_meeting_ended = AsyncMock(return_value=False)
        self.play_audio = AsyncMock()

    # The abstract methods are shadowed by the mocks set in __init__
    async def open_meeting_page(self, context):  # pragma: no cover
        pass

    async def join_meeting(self, context):  # pragma: no cover
        pass

    async def wait_for_admission(self, context):  # pragma: no cover
        return True

    async def start_capture(self, context, on_audio_chunk, on_video_chunk):  # pragma: no cover
        return self.audio_context, self.video_context

    async def count_participants(self, context):  # pragma: no cover
        return 1

    async def has_meeting_ended(self, context):  # pragma: no cover
        return False


@pytest.fixture
def meeting_params():
    """Provide session parameters for a Google Meet bot."""
    return MeetingParams(
        id="bot-123",
        session_id="session-456",
        meeting_url="https://meet.google.com/abc-defg-hij",
        bot_name="Test Bot",
        bot_uuid="uuid-789",
        mp4_s3_path="recordings/session-456.mp4",
        automatic_leave=AutomaticLeave(waiting_room_timeout=60, noone_joined_timeout=60),
    )


@pytest.fixture
def provider():
    """Provide a fake browser harness."""
    return FakeProvider()


@pytest.fixture
def meeting_context(meeting_params, provider):
    """Provide a meeting context with short timings and no real services."""
    return MeetingContext(
        params=meeting_params,
        provider=provider,
        cleanup_timeout=2.0,
        check_interval=0,
        max_meeting_duration=3600,
    )


@pytest.fixture
def mock_transcoder():
    """Provide a transcoder double."""
    transcoder = Mock()
    transcoder.start = AsyncMock()
    transcoder.write_chunk = AsyncMock()
    transcoder.pause = AsyncMock()
    transcoder.resume = AsyncMock()
    transcoder.stop = AsyncMock()
    transcoder.upload_to_s3 = AsyncMock()
    transcoder.get_files_uploaded = Mock(return_value=False)
    return transcoder


@pytest.fixture
def s3_client():
    """Provide a mocked S3 client with the recordings bucket created."""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        client.create_bucket(Bucket="test-recordings")
        yield client
