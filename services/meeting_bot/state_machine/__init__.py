from .machine import MeetingStateMachine, STATE_HANDLERS
from .types import MeetingOutcome, MeetingStateType, StateTransition

__all__ = [
    "MeetingStateMachine",
    "STATE_HANDLERS",
    "MeetingOutcome",
    "MeetingStateType",
    "StateTransition",
]
