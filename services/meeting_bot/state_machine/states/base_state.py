"""
Common behaviour of lifecycle states.
"""
from abc import ABC, abstractmethod
from typing import Optional

from shared.schemas import MeetingEndReason

from ...context import MeetingContext
from ..types import MeetingStateType, StateTransition


class BaseState(ABC):
    """One lifecycle phase. Created right before execute() and never reused."""

    state_type: MeetingStateType

    def __init__(self, context: MeetingContext):
        self.context = context

    @abstractmethod
    async def execute(self) -> StateTransition:
        """Do the phase's work and name the next phase."""

    def transition(self, next_state: MeetingStateType, delay: Optional[float] = None) -> StateTransition:
        return StateTransition(next_state, delay)

    def leave(self, reason: MeetingEndReason) -> StateTransition:
        """Record the end reason and go to cleanup."""
        self.context.set_end_reason(reason)
        return self.transition(MeetingStateType.CLEANUP)
