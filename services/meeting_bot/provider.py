"""
Boundary to the browser automation harness.

One implementation per meeting platform drives the browser (open the meeting
page, fill in the bot name, click through the lobby, read the participant
list) and owns the capture extension. The state machine only sequences calls
to this interface.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Tuple

from .media_context import AudioContext, VideoContext

if TYPE_CHECKING:
    from .context import MeetingContext

ChunkHandler = Callable[[bytes], Awaitable[None]]


class MeetingProvider(ABC):
    """Platform-specific browser driver."""

    @abstractmethod
    async def open_meeting_page(self, context: "MeetingContext") -> None:
        """
        Launch the browser and navigate to the meeting.

        Stores the browser context, automation page and extension background
        page on the meeting context.
        """

    @abstractmethod
    async def join_meeting(self, context: "MeetingContext") -> None:
        """Fill in the bot name and ask to join. Raises MeetingJoinError."""

    @abstractmethod
    async def wait_for_admission(self, context: "MeetingContext") -> bool:
        """Block until the host lets the bot in. False if the bot was refused."""

    @abstractmethod
    async def start_capture(
        self,
        context: "MeetingContext",
        on_audio_chunk: ChunkHandler,
        on_video_chunk: ChunkHandler,
    ) -> Tuple[AudioContext, Optional[VideoContext]]:
        """Start recording; chunks are delivered through the two handlers."""

    @abstractmethod
    async def count_participants(self, context: "MeetingContext") -> int:
        """Number of participants in the call, the bot excluded."""

    @abstractmethod
    async def has_meeting_ended(self, context: "MeetingContext") -> bool:
        """True once the call is over or the bot was removed."""

    async def play_audio(self, context: "MeetingContext", audio_data: bytes) -> None:
        """Play AI audio into the meeting. Providers without a virtual mic drop it."""
