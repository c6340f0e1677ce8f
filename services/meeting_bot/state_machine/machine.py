"""
Meeting lifecycle state machine.

Runs one state at a time until the session is terminated. A state that
raises is never allowed to abort the run: the error is recorded and the
machine moves to cleanup, which always ends in the terminal state.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Type

from shared.schemas import MeetingEndReason

from ..context import MeetingContext
from .states.base_state import BaseState
from .states.cleanup_state import CleanupState
from .states.in_call_state import InCallState
from .states.initialization_state import InitializationState
from .states.joining_state import JoiningState
from .states.paused_state import PausedState, ResumingState
from .states.waiting_room_state import WaitingRoomState
from .types import MeetingOutcome, MeetingStateType, StateTransition

logger = logging.getLogger(__name__)

STATE_HANDLERS: Dict[MeetingStateType, Type[BaseState]] = {
    MeetingStateType.INITIALIZATION: InitializationState,
    MeetingStateType.JOINING: JoiningState,
    MeetingStateType.WAITING_ROOM: WaitingRoomState,
    MeetingStateType.IN_CALL: InCallState,
    MeetingStateType.PAUSED: PausedState,
    MeetingStateType.RESUMING: ResumingState,
    MeetingStateType.CLEANUP: CleanupState,
}


class MeetingStateMachine:
    """Drives a MeetingContext through its lifecycle states."""

    def __init__(
        self,
        context: MeetingContext,
        initial_state: MeetingStateType = MeetingStateType.INITIALIZATION,
        handlers: Optional[Dict[MeetingStateType, Type[BaseState]]] = None,
    ):
        self.context = context
        self.handlers = handlers or STATE_HANDLERS
        self._current_state = initial_state

    @property
    def current_state(self) -> MeetingStateType:
        return self._current_state

    async def run(self) -> MeetingOutcome:
        logger.info(f"State machine starting in {self._current_state.value}")
        self._record(self._current_state)

        while self._current_state != MeetingStateType.TERMINATED:
            transition = await self._execute_current_state()
            await self._apply(transition)

        logger.info(
            f"🏁 Bot session terminated "
            f"(reason={self.context.end_reason.value if self.context.end_reason else 'unknown'})"
        )
        return MeetingOutcome(
            final_state=self._current_state,
            end_reason=self.context.end_reason,
            error=self.context.last_error,
            history=list(self.context.state_history),
        )

    def request_stop(self) -> None:
        """Ask the running session to leave at its next check."""
        self.context.request_stop()

    async def _execute_current_state(self) -> StateTransition:
        state = self.handlers[self._current_state](self.context)
        try:
            return await state.execute()
        except Exception as e:
            logger.error(f"Error in state {self._current_state.value}: {e}", exc_info=True)
            self.context.last_error = e
            self.context.set_end_reason(getattr(e, "end_reason", MeetingEndReason.INTERNAL_ERROR))
            return StateTransition(MeetingStateType.CLEANUP)

    async def _apply(self, transition: StateTransition) -> None:
        previous = self._current_state
        if transition.delay:
            await asyncio.sleep(transition.delay)

        self._current_state = transition.next_state
        if self._current_state != previous:
            logger.info(f"State transition: {previous.value} -> {self._current_state.value}")
            self._record(self._current_state)
            await self._report(previous)

    def _record(self, state: MeetingStateType) -> None:
        self.context.state_history.append((state.value, datetime.utcnow()))

    async def _report(self, previous: MeetingStateType) -> None:
        reporter = self.context.status_reporter
        if reporter is None:
            return

        data = {"from": previous.value, "to": self._current_state.value}
        if self.context.end_reason is not None:
            data["end_reason"] = self.context.end_reason.value
        await reporter.report("state_changed", data)
