from .base_state import BaseState
from .cleanup_state import CleanupState
from .in_call_state import InCallState
from .initialization_state import InitializationState
from .joining_state import JoiningState
from .paused_state import PausedState, ResumingState
from .waiting_room_state import WaitingRoomState

__all__ = [
    "BaseState",
    "CleanupState",
    "InCallState",
    "InitializationState",
    "JoiningState",
    "PausedState",
    "ResumingState",
    "WaitingRoomState",
]
