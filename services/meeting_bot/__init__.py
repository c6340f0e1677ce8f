"""
Meeting bot service.

Joins a video meeting, records it, optionally lets an AI participant listen
and speak, and tears the session down deterministically. The lifecycle is
driven by a state machine over a shared MeetingContext.
"""

from .context import MeetingContext
from .provider import MeetingProvider
from .state_machine import MeetingOutcome, MeetingStateMachine, MeetingStateType, StateTransition

__all__ = [
    "MeetingContext",
    "MeetingProvider",
    "MeetingOutcome",
    "MeetingStateMachine",
    "MeetingStateType",
    "StateTransition",
]
