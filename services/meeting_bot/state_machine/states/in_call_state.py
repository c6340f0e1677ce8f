"""
Recording phase: capture is running and the bot watches for a reason to leave.
"""
import logging
import time
from datetime import datetime
from typing import Optional

from shared.config import get_settings
from shared.schemas import AudioChunkMetadata, MeetingEndReason, VideoChunkMetadata

from ...streaming import StreamingService
from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)
settings = get_settings()


class InCallState(BaseState):
    """
    Starts recording on first entry, then performs one round of end checks per
    execution and re-enters itself after the check interval.
    """

    state_type = MeetingStateType.IN_CALL

    async def execute(self) -> StateTransition:
        if self.context.audio_context is None:
            await self._start_recording()

        reason = await self._check_end_conditions()
        if reason is not None:
            logger.info(f"Leaving meeting: {reason.value}")
            return self.leave(reason)

        if self.context.pause_requested.is_set():
            return self.transition(MeetingStateType.PAUSED)

        return self.transition(MeetingStateType.IN_CALL, delay=self.context.check_interval)

    async def _start_recording(self) -> None:
        context = self.context

        if context.transcoder is not None:
            await context.transcoder.start()

        async def playback(audio_data: bytes) -> None:
            await context.provider.play_audio(context, audio_data)

        context.streaming_service = StreamingService(
            ai_bot=context.ai_bot,
            output_url=settings.streaming_output_url,
            playback=playback,
        )
        await context.streaming_service.start()

        async def on_audio_chunk(data: bytes) -> None:
            if context.streaming_service is not None:
                metadata = AudioChunkMetadata(
                    timestamp=time.time() * 1000,
                    sample_rate=settings.audio_sample_rate,
                    channels=settings.audio_channels,
                )
                await context.streaming_service.push_audio(data, metadata)

        async def on_video_chunk(data: bytes) -> None:
            if context.transcoder is not None:
                await context.transcoder.write_chunk(data)
            if context.streaming_service is not None:
                metadata = VideoChunkMetadata(timestamp=time.time() * 1000, format="video/webm")
                await context.streaming_service.push_video(data, metadata)

        audio_context, video_context = await context.provider.start_capture(
            context, on_audio_chunk, on_video_chunk
        )
        context.audio_context = audio_context
        context.video_context = video_context

        now = datetime.utcnow()
        context.recording_started_at = now
        context.last_participant_seen_at = now
        logger.info(f"🔴 Recording ({context.params.recording_mode.value})")

    async def _check_end_conditions(self) -> Optional[MeetingEndReason]:
        context = self.context

        if context.stop_requested:
            return MeetingEndReason.API_REQUEST
        if context.deadline_reached:
            return MeetingEndReason.MAX_DURATION_REACHED
        if await context.provider.has_meeting_ended(context):
            return MeetingEndReason.MEETING_ENDED

        now = datetime.utcnow()
        if await context.provider.count_participants(context) > 0:
            context.last_participant_seen_at = now
            return None

        alone_for = (now - context.last_participant_seen_at).total_seconds()
        if alone_for >= context.noone_joined_timeout:
            return MeetingEndReason.NOONE_JOINED
        return None
