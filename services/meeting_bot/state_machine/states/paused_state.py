import logging

from shared.schemas import MeetingEndReason

from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)


class PausedState(BaseState):
    """Recording is suspended until a resume is requested."""

    state_type = MeetingStateType.PAUSED

    async def execute(self) -> StateTransition:
        context = self.context

        if context.transcoder is not None:
            await context.transcoder.pause()

        if context.stop_requested:
            return self.leave(MeetingEndReason.API_REQUEST)
        if context.deadline_reached:
            return self.leave(MeetingEndReason.MAX_DURATION_REACHED)

        if context.resume_requested.is_set():
            return self.transition(MeetingStateType.RESUMING)

        return self.transition(MeetingStateType.PAUSED, delay=context.check_interval)


class ResumingState(BaseState):
    state_type = MeetingStateType.RESUMING

    async def execute(self) -> StateTransition:
        if self.context.transcoder is not None:
            await self.context.transcoder.resume()
        self.context.resume_requested.clear()
        logger.info("▶️  Back in call")
        return self.transition(MeetingStateType.IN_CALL)
