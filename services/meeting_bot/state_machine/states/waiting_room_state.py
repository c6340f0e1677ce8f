import asyncio
import logging
from datetime import datetime

from shared.schemas import MeetingEndReason

from ..types import MeetingStateType, StateTransition
from .base_state import BaseState

logger = logging.getLogger(__name__)


class WaitingRoomState(BaseState):
    """Wait for the host to admit the bot, bounded by the waiting-room timeout."""

    state_type = MeetingStateType.WAITING_ROOM

    async def execute(self) -> StateTransition:
        timeout = self.context.waiting_room_timeout
        logger.info(f"⏳ Waiting to be admitted (timeout {timeout}s)")

        try:
            admitted = await asyncio.wait_for(
                self.context.provider.wait_for_admission(self.context),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Not admitted after {timeout}s, leaving")
            return self.leave(MeetingEndReason.TIMEOUT_WAITING_TO_START)

        if not admitted:
            logger.warning("Entry to the meeting was refused")
            return self.leave(MeetingEndReason.CANNOT_JOIN_MEETING)

        self.context.joined_at = datetime.utcnow()
        logger.info("✅ Admitted to the meeting")
        return self.transition(MeetingStateType.IN_CALL)
