"""
Shutdown sequence of a bot session.

Releases everything that can be released and persists the recording if at
all possible, within a fixed time budget. Phases are never retried or rolled
back: each one is attempted in order, a failure is logged and the next phase
still runs. When the budget runs out the session terminates regardless of
what is still in flight.
"""
import asyncio
import logging
from typing import Any

from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)


class CleanupState(BaseState):
    state_type = MeetingStateType.CLEANUP

    async def execute(self) -> StateTransition:
        try:
            logger.info("🧹 Starting cleanup sequence")

            cleanup_task = asyncio.ensure_future(self.perform_cleanup())
            done, _ = await asyncio.wait({cleanup_task}, timeout=self.context.cleanup_timeout)

            if cleanup_task in done:
                if cleanup_task.exception() is not None:
                    logger.error(f"Cleanup failed: {cleanup_task.exception()}")
                else:
                    logger.info("✅ Cleanup completed")
            else:
                # The sequence keeps running in the background; the session ends anyway
                logger.error(f"Cleanup timed out after {self.context.cleanup_timeout}s, terminating")

            return self.transition(MeetingStateType.TERMINATED)

        except Exception as e:
            logger.error(f"Error during cleanup: {e}", exc_info=True)
            return self.transition(MeetingStateType.CLEANUP)

    async def perform_cleanup(self) -> None:
        await self.end_ai_session()
        await self.stop_transcoder()
        await self.stop_streaming()
        await self.cleanup_browser_resources()
        await self.upload_recording()
        await self.cleanup_session_registry()

    async def end_ai_session(self) -> None:
        ai_bot = self.context.ai_bot
        if ai_bot is None:
            return

        try:
            await ai_bot.end_session()
        except Exception as e:
            logger.error(f"Failed to end AI participant session: {e}")

    async def stop_transcoder(self) -> None:
        transcoder = self.context.transcoder
        if transcoder is None:
            return

        try:
            await transcoder.stop()
        except Exception as e:
            logger.error(f"Error stopping transcoder: {e}")

    async def stop_streaming(self) -> None:
        streaming_service = self.context.streaming_service
        if streaming_service is None:
            return

        try:
            await streaming_service.stop()
        except Exception as e:
            logger.error(f"Error stopping streaming service: {e}")

    async def cleanup_browser_resources(self) -> None:
        context = self.context

        if context.branding_process is not None:
            try:
                context.branding_process.kill()
            except Exception as e:
                logger.warning(f"Failed to kill branding process: {e}")

        for media_context in (context.video_context, context.audio_context):
            if media_context is None:
                continue
            try:
                media_context.stop()
            except Exception as e:
                logger.warning(f"Failed to stop {media_context.kind} capture: {e}")

        await asyncio.gather(
            self._close_quietly(context.playwright_page, "meeting page"),
            self._close_quietly(context.background_page, "extension background page"),
            self._close_quietly(context.browser_context, "browser context"),
        )

        if context.meeting_timeout_handle is not None:
            context.meeting_timeout_handle.cancel()
            context.meeting_timeout_handle = None

    async def upload_recording(self) -> None:
        transcoder = self.context.transcoder
        if transcoder is None:
            return

        try:
            if transcoder.get_files_uploaded():
                logger.info("Recording already uploaded when the transcoder stopped, skipping")
                return
            logger.info("Uploading recording")
            await transcoder.upload_to_s3()
        except Exception as e:
            logger.error(f"Failed to upload recording: {e}")

    async def cleanup_session_registry(self) -> None:
        session_id = self.context.session_id
        registry = self.context.session_registry
        if not session_id or registry is None:
            return

        try:
            await registry.delete(session_id)
        except Exception as e:
            logger.error(f"Failed to remove session {session_id} from registry: {e}")

    @staticmethod
    async def _close_quietly(handle: Any, name: str) -> None:
        if handle is None:
            return
        try:
            await handle.close()
        except Exception as e:
            logger.warning(f"Failed to close {name}: {e}")
