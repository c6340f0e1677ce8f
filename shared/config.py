"""
Configuration management for the meeting bot.
"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Meeting Bot"
    app_version: str = "1.0.0"
    debug: bool = False

    # Backend API (status webhooks)
    api_base_url: Optional[str] = Field(None, env="API_BASE_URL")
    status_webhook_path: str = "/bots/status"
    status_webhook_timeout_sec: float = 5.0

    # Lifecycle
    cleanup_timeout_sec: float = Field(120.0, env="CLEANUP_TIMEOUT_SEC")
    waiting_room_timeout_sec: int = Field(600, env="WAITING_ROOM_TIMEOUT_SEC")
    noone_joined_timeout_sec: int = Field(600, env="NOONE_JOINED_TIMEOUT_SEC")
    max_meeting_duration_sec: int = Field(4 * 60 * 60, env="MAX_MEETING_DURATION_SEC")
    meeting_check_interval_sec: float = 5.0
    join_timeout_sec: int = Field(60, env="JOIN_TIMEOUT_SEC")

    # Recording
    recording_dir: str = Field("/tmp/recordings", env="RECORDING_DIR")
    upload_on_stop: bool = False

    # AWS Configuration
    aws_region: str = Field("us-east-1", env="AWS_REGION")
    aws_access_key_id: Optional[str] = Field(None, env="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(None, env="AWS_SECRET_ACCESS_KEY")
    s3_bucket: str = Field("meeting-bot-recordings", env="S3_BUCKET")

    # Redis Configuration
    redis_url: str = Field("redis://localhost:6379/0", env="REDIS_URL")
    session_key_prefix: str = "session:"
    session_ttl_sec: int = 6 * 60 * 60

    # AI Services
    openai_api_key: Optional[str] = Field(None, env="OPENAI_API_KEY")
    gemini_api_key: Optional[str] = Field(None, env="GEMINI_API_KEY")
    realtime_api_url: str = "wss://api.openai.com/v1/realtime"
    realtime_default_model: str = "gpt-4o-realtime-preview"
    realtime_voice: str = "alloy"
    gemini_default_model: str = "gemini-1.5-flash-latest"

    # Browser automation harness ("module.path:ClassName" of a MeetingProvider)
    meeting_provider: Optional[str] = Field(None, env="MEETING_PROVIDER")

    # Streaming
    streaming_output_url: Optional[str] = Field(None, env="STREAMING_OUTPUT_URL")
    audio_sample_rate: int = 16000
    audio_channels: int = 1

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = BASE_DIR / ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
