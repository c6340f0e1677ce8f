import asyncio
import logging

from shared.config import get_settings
from shared.schemas import MeetingEndReason

from ...exceptions import MeetingJoinError
from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)
settings = get_settings()


class JoiningState(BaseState):
    state_type = MeetingStateType.JOINING

    async def execute(self) -> StateTransition:
        if self.context.stop_requested:
            return self.leave(MeetingEndReason.API_REQUEST)

        logger.info(f"Joining meeting as '{self.context.params.bot_name}'")
        try:
            await asyncio.wait_for(
                self.context.provider.join_meeting(self.context),
                timeout=settings.join_timeout_sec,
            )
        except MeetingJoinError:
            raise
        except asyncio.TimeoutError as e:
            raise MeetingJoinError(f"Joining did not complete within {settings.join_timeout_sec}s") from e
        except Exception as e:
            raise MeetingJoinError(f"Failed to join meeting: {e}") from e

        return self.transition(MeetingStateType.WAITING_ROOM)
