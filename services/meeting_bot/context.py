"""
Mutable record of one bot session, threaded through every lifecycle state.
"""
import asyncio
from datetime import datetime
from typing import Any, List, Optional, Tuple

from shared.config import get_settings
from shared.schemas import MeetingEndReason, MeetingParams

from .ai.participant_bot import MeetingParticipantBot
from .media_context import AudioContext, VideoContext
from .provider import MeetingProvider
from .recording.transcoder import Transcoder
from .session_registry import SessionRegistry
from .status_reporter import StatusReporter
from .streaming import StreamingService

settings = get_settings()


class MeetingContext:
    """
    Everything a state needs to do its work.

    Owned by the state machine for the lifetime of one bot session; only the
    active state mutates it.
    """

    def __init__(
        self,
        params: MeetingParams,
        provider: MeetingProvider,
        transcoder: Optional[Transcoder] = None,
        session_registry: Optional[SessionRegistry] = None,
        status_reporter: Optional[StatusReporter] = None,
        ai_bot: Optional[MeetingParticipantBot] = None,
        cleanup_timeout: Optional[float] = None,
        check_interval: Optional[float] = None,
        max_meeting_duration: Optional[float] = None,
    ):
        self.params = params
        self.provider = provider

        # Service handles
        self.transcoder = transcoder
        self.session_registry = session_registry
        self.status_reporter = status_reporter
        self.ai_bot = ai_bot
        self.streaming_service: Optional[StreamingService] = None

        # Browser handles, set by the provider
        self.browser_context: Any = None
        self.playwright_page: Any = None
        self.background_page: Any = None
        self.branding_process: Any = None
        self.meeting_timeout_handle: Optional[asyncio.TimerHandle] = None

        # Capture handles
        self.audio_context: Optional[AudioContext] = None
        self.video_context: Optional[VideoContext] = None

        # Configuration
        self.cleanup_timeout = cleanup_timeout if cleanup_timeout is not None else settings.cleanup_timeout_sec
        self.check_interval = check_interval if check_interval is not None else settings.meeting_check_interval_sec
        self.max_meeting_duration = (
            max_meeting_duration if max_meeting_duration is not None else settings.max_meeting_duration_sec
        )

        # Bookkeeping
        self.end_reason: Optional[MeetingEndReason] = None
        self.last_error: Optional[BaseException] = None
        self.state_history: List[Tuple[str, datetime]] = []
        self.joined_at: Optional[datetime] = None
        self.recording_started_at: Optional[datetime] = None
        self.last_participant_seen_at: Optional[datetime] = None
        self.deadline_reached = False
        self.stop_requested = False
        self.pause_requested = asyncio.Event()
        self.resume_requested = asyncio.Event()

    @property
    def session_id(self) -> Optional[str]:
        return self.params.session_id

    @property
    def waiting_room_timeout(self) -> int:
        return self.params.automatic_leave.waiting_room_timeout

    @property
    def noone_joined_timeout(self) -> int:
        return self.params.automatic_leave.noone_joined_timeout

    def set_end_reason(self, reason: MeetingEndReason) -> None:
        """Record why the session ends. The first reason recorded wins."""
        if self.end_reason is None:
            self.end_reason = reason

    def request_stop(self) -> None:
        self.stop_requested = True

    def request_pause(self) -> None:
        self.resume_requested.clear()
        self.pause_requested.set()

    def request_resume(self) -> None:
        self.pause_requested.clear()
        self.resume_requested.set()
