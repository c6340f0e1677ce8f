"""
AI participants that can listen to and speak in a meeting.
"""

from .participant_bot import MeetingParticipantBot
from .realtime_bot import RealtimeParticipantBot
from .gemini_bot import GeminiParticipantBot
from .factory import create_participant_bot

__all__ = [
    "MeetingParticipantBot",
    "RealtimeParticipantBot",
    "GeminiParticipantBot",
    "create_participant_bot",
]
