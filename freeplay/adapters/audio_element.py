from enum import Enum
from typing import Callable


class AudioElementError(Enum):
    LOAD_ERROR = "element.load_source.error"
    PLAYBACK_ERROR = "element.play.error"
    UNSUPPORTED_SOURCE = "element.source.unsupported"


class AudioPlaybackError(Exception):
    def __init__(self, kind: AudioElementError, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self):
        return f"{self.kind.value}: {self.message}"


class AudioElement:
    """
    Audio output seen by the player. Implementations load a source, play it
    and report back through the registered handlers:

    * time update  -> handler(seconds: float)
    * end          -> handler()
    * error        -> handler(error: AudioPlaybackError)
    * metadata     -> handler(duration: float)
    """

    def __init__(self):
        self.time_update_handler: Callable | None = None
        self.end_event_handler: Callable | None = None
        self.error_event_handler: Callable | None = None
        self.metadata_event_handler: Callable | None = None

    def register_time_update_event(self, handle):
        self.time_update_handler = handle

    def register_end_event(self, handle):
        self.end_event_handler = handle

    def register_error_event(self, handle):
        self.error_event_handler = handle

    def register_metadata_event(self, handle):
        self.metadata_event_handler = handle

    def load_source(self, url: str):
        raise NotImplementedError

    def play(self):
        """
        Start or resume output. May raise AudioPlaybackError.
        :return:
        """
        raise NotImplementedError

    def pause(self):
        raise NotImplementedError

    def seek_time(self, seconds: float):
        raise NotImplementedError

    def set_volume(self, volume: float):
        raise NotImplementedError

    def process_events(self):
        """
        Deliver pending notifications on the calling thread. Elements that
        notify synchronously have nothing to do here.
        :return: number of notifications delivered
        """
        return 0

    def close(self):
        pass

    # helpers for implementations
    def _notify_time_update(self, seconds: float):
        if self.time_update_handler:
            self.time_update_handler(seconds)

    def _notify_end(self):
        if self.end_event_handler:
            self.end_event_handler()

    def _notify_error(self, error: AudioPlaybackError):
        if self.error_event_handler:
            self.error_event_handler(error)

    def _notify_metadata(self, duration: float):
        if self.metadata_event_handler:
            self.metadata_event_handler(duration)
