"""
Handles on the live audio/video capture running in the browser.
"""
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class MediaContext:
    """A capture stream that can be stopped once."""

    def __init__(self, kind: str, on_stop: Optional[Callable[[], None]] = None):
        self.kind = kind
        self.stopped = False
        self._on_stop = on_stop

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        if self._on_stop is not None:
            self._on_stop()
        logger.info(f"{self.kind} capture stopped")


class AudioContext(MediaContext):
    def __init__(self, on_stop: Optional[Callable[[], None]] = None):
        super().__init__("audio", on_stop)


class VideoContext(MediaContext):
    def __init__(self, on_stop: Optional[Callable[[], None]] = None):
        super().__init__("video", on_stop)
