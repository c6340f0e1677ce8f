"""
Types shared by the state machine and its states.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from shared.schemas import MeetingEndReason, NORMAL_END_REASONS


class MeetingStateType(str, Enum):
    """Lifecycle phases of a bot session."""

    INITIALIZATION = "initialization"
    JOINING = "joining"
    WAITING_ROOM = "waiting_room"
    IN_CALL = "in_call"
    PAUSED = "paused"
    RESUMING = "resuming"
    CLEANUP = "cleanup"
    TERMINATED = "terminated"


class StateTransition:
    """What a state returns from execute(): the next state and an optional delay."""

    def __init__(self, next_state: MeetingStateType, delay: Optional[float] = None):
        self.next_state = next_state
        self.delay = delay

    def __eq__(self, other) -> bool:
        if not isinstance(other, StateTransition):
            return NotImplemented
        return self.next_state == other.next_state and self.delay == other.delay

    def __repr__(self) -> str:
        return f"StateTransition(next_state={self.next_state.value!r}, delay={self.delay!r})"


class MeetingOutcome:
    """Result of running the state machine to completion."""

    def __init__(
        self,
        final_state: MeetingStateType,
        end_reason: Optional[MeetingEndReason],
        error: Optional[BaseException],
        history: List[Tuple[str, datetime]],
    ):
        self.final_state = final_state
        self.end_reason = end_reason
        self.error = error
        self.history = history

    @property
    def succeeded(self) -> bool:
        return self.end_reason in NORMAL_END_REASONS
