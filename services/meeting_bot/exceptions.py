"""
Exceptions raised by the meeting bot service.
"""
from shared.schemas import MeetingEndReason


class MeetingBotError(Exception):
    """Base exception for meeting bot errors."""

    end_reason = MeetingEndReason.INTERNAL_ERROR


class InvalidMeetingParamsError(MeetingBotError):
    """Raised when the session parameters cannot be used."""

    end_reason = MeetingEndReason.INVALID_MEETING_PARAMS


class MeetingJoinError(MeetingBotError):
    """Raised when the bot could not get into the meeting."""

    end_reason = MeetingEndReason.CANNOT_JOIN_MEETING


class BotInitializationError(MeetingBotError):
    """Raised when an AI participant bot fails to initialize."""


class BotNotInitializedError(MeetingBotError):
    """Raised when an AI participant bot is used before initialize()."""


class BotSessionError(MeetingBotError):
    """Raised when an AI participant bot cannot open its realtime session."""


class TranscoderError(MeetingBotError):
    """Raised when the recording cannot be started or finalized."""


class UploadError(TranscoderError):
    """Raised when the recording cannot be uploaded to storage."""
