"""
First phase: validate the session, bring up the AI participant, open the meeting page.
"""
import asyncio
import logging

from ...ai.factory import create_participant_bot
from ...exceptions import InvalidMeetingParamsError, MeetingBotError
from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)


class InitializationState(BaseState):
    state_type = MeetingStateType.INITIALIZATION

    async def execute(self) -> StateTransition:
        params = self.context.params
        if not params.meeting_url:
            raise InvalidMeetingParamsError("meeting_url is required")

        logger.info(
            f"🚀 Initializing bot session {params.session_id} "
            f"({params.platform.value}, {params.meeting_url})"
        )

        await self._register_session()
        await self._setup_ai_bot()
        await self._start_branding()
        await self.context.provider.open_meeting_page(self.context)
        self._arm_meeting_deadline()

        return self.transition(MeetingStateType.JOINING)

    async def _register_session(self) -> None:
        registry = self.context.session_registry
        if registry is None or not self.context.session_id:
            return

        params = self.context.params
        try:
            await registry.set(self.context.session_id, {
                "bot_id": params.bot_uuid or params.id,
                "meeting_url": params.meeting_url,
                "platform": params.platform.value,
                "status": MeetingStateType.INITIALIZATION.value,
            })
        except Exception as e:
            logger.warning(f"Could not register session {self.context.session_id}: {e}")

    async def _setup_ai_bot(self) -> None:
        """Start the AI participant. The meeting goes on without it if that fails."""
        context = self.context
        config = context.params.ai_bot

        if context.ai_bot is None and config is not None:
            try:
                context.ai_bot = create_participant_bot(config)
            except ValueError as e:
                logger.error(f"AI participant disabled: {e}")
                return

        if context.ai_bot is None:
            return

        try:
            await context.ai_bot.initialize(context.params)
            await context.ai_bot.start_session(config)
            logger.info("🤖 AI participant ready")
        except MeetingBotError as e:
            logger.error(f"AI participant unavailable, recording without it: {e}")
            await context.ai_bot.end_session()
            context.ai_bot = None

    async def _start_branding(self) -> None:
        """Launch the custom branding script that feeds the bot's camera, if one is configured."""
        path = self.context.params.custom_branding_bot_path
        if not path:
            return

        try:
            self.context.branding_process = await asyncio.create_subprocess_exec(
                path,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            logger.info(f"🎨 Branding process started (pid {self.context.branding_process.pid})")
        except OSError as e:
            logger.warning(f"Could not start branding process {path}: {e}")

    def _arm_meeting_deadline(self) -> None:
        context = self.context
        if not context.max_meeting_duration:
            return

        def on_deadline() -> None:
            logger.info(f"⏰ Maximum meeting duration ({context.max_meeting_duration}s) reached")
            context.deadline_reached = True

        loop = asyncio.get_running_loop()
        context.meeting_timeout_handle = loop.call_later(context.max_meeting_duration, on_deadline)
