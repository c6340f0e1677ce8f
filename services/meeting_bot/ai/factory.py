"""
Selection of the AI participant backend for a bot session.
"""
from typing import Dict, Type

from shared.schemas import BotConfiguration

from .gemini_bot import GeminiParticipantBot
from .participant_bot import MeetingParticipantBot
from .realtime_bot import RealtimeParticipantBot

BOT_BACKENDS: Dict[str, Type[MeetingParticipantBot]] = {
    "realtime": RealtimeParticipantBot,
    "openai": RealtimeParticipantBot,
    "gemini": GeminiParticipantBot,
}


def create_participant_bot(config: BotConfiguration) -> MeetingParticipantBot:
    """Instantiate the backend named by config.type."""
    backend = BOT_BACKENDS.get(config.type.lower())
    if backend is None:
        raise ValueError(
            f"Unknown AI bot type '{config.type}' (expected one of: {', '.join(sorted(BOT_BACKENDS))})"
        )
    return backend()
