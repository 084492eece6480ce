import random

import pytest

from freeplay.core.event_bus import EventBus
from freeplay.adapters.audio_element import AudioElement, AudioElementError, AudioPlaybackError
from freeplay.domain.models.track import Track
from freeplay.domain.player import MusicPlayer
from freeplay.domain.queue_controller import PlaybackQueueController


class FakeAudioElement(AudioElement):
    """Records every call, notifications are fired by the test"""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.source = None
        self.volume = None
        self.playing = False
        self.fail_play = False

    def load_source(self, url):
        self.calls.append(("load_source", url))
        self.source = url
        self.playing = False

    def play(self):
        self.calls.append(("play",))
        if self.fail_play:
            raise AudioPlaybackError(AudioElementError.PLAYBACK_ERROR, "autoplay blocked")
        self.playing = True

    def pause(self):
        self.calls.append(("pause",))
        self.playing = False

    def seek_time(self, seconds):
        self.calls.append(("seek_time", seconds))

    def set_volume(self, volume):
        self.calls.append(("set_volume", volume))
        self.volume = volume

    def names(self):
        return [call[0] for call in self.calls]

    # simulated notifications
    def tick(self, seconds):
        self._notify_time_update(seconds)

    def loaded(self, duration):
        self._notify_metadata(duration)

    def finish(self):
        self.playing = False
        self._notify_end()

    def fail(self, message="decode failed"):
        self._notify_error(AudioPlaybackError(AudioElementError.LOAD_ERROR, message))


class Recorder:
    """Bus subscriber collecting payloads, keep a reference while in use"""

    def __init__(self):
        self.payloads = []

    def __call__(self, *args):
        if not args:
            self.payloads.append(None)
        else:
            self.payloads.append(args[0] if len(args) == 1 else args)

    @property
    def count(self):
        return len(self.payloads)


def make_track(track_id, title=None, duration=180):
    return Track(
        id=track_id,
        title=title or f"Track {track_id}",
        artist="Artist",
        duration=duration,
        audio_url=f"https://cdn.example.com/{track_id}.mp3",
        image_url=f"https://cdn.example.com/{track_id}.jpg",
    )


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def tracks():
    return [make_track("a"), make_track("b"), make_track("c")]


@pytest.fixture
def track_a(tracks):
    return tracks[0]


@pytest.fixture
def track_b(tracks):
    return tracks[1]


@pytest.fixture
def track_c(tracks):
    return tracks[2]


@pytest.fixture
def queue(bus):
    return PlaybackQueueController(bus, rng=random.Random(1234))


@pytest.fixture
def audio():
    return FakeAudioElement()


@pytest.fixture
def player(bus, queue, audio):
    return MusicPlayer(bus, queue, audio)


@pytest.fixture
def recorder():
    return Recorder()
