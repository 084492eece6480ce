import sys
import time
import argparse
from urllib.parse import urlparse

from freeplay.bootstrap import bootstrap, shutdown
from freeplay.core.constants.events import PlayerEvent, QueueEvent
from freeplay.core.utility.formatting import format_time
from freeplay.core.utility.tag_reader import read_track
from freeplay.domain.enums.playback import RepeatMode
from freeplay.domain.models.track import Track


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play audio files through the freeplay queue")
    parser.add_argument("sources", nargs="+", help="audio files or http(s) URLs")
    parser.add_argument("--shuffle", action="store_true", help="enable shuffle")
    parser.add_argument("--repeat", choices=[mode.value for mode in RepeatMode], help="repeat mode")
    parser.add_argument("--volume", type=float, help="volume between 0 and 1")
    parser.add_argument("--start", type=int, default=0, help="queue index to start from")
    return parser.parse_args(argv)


def load_track(source: str) -> Track:
    if urlparse(source).scheme in ("http", "https"):
        return Track(id=source, title=source.rsplit("/", 1)[-1] or source, artist="", audio_url=source)
    return read_track(source)


class ConsoleView:
    """Prints player events in place of a UI"""

    def __init__(self, bus):
        self.started = False
        bus.subscribe(QueueEvent.QUEUE_TRACK_CHANGED, self.on_track)
        bus.subscribe(PlayerEvent.PLAYBACK_STARTED, self.on_started)
        bus.subscribe(PlayerEvent.PLAYBACK_PROGRESS, self.on_progress)
        bus.subscribe(PlayerEvent.PLAYBACK_ERROR, self.on_error)

    def on_track(self, track):
        print(f"\n> {track.title} - {track.artist or 'Unknown artist'}")

    def on_started(self, _track):
        self.started = True

    def on_progress(self, payload):
        print(f"\r  {format_time(payload['elapsed'])} / {format_time(payload['total'])}", end="", flush=True)

    def on_error(self, message):
        print(f"\n[!] {message}")


def main(argv=None):
    args = parse_args(argv)
    context = bootstrap()
    view = ConsoleView(context["bus"])
    queue, player, audio = context["queue"], context["player"], context["audio"]

    if args.shuffle:
        queue.set_shuffle(True)
    if args.repeat:
        queue.set_repeat_mode(args.repeat)
    if args.volume is not None:
        player.set_volume(args.volume)

    queue.set_queue([load_track(source) for source in args.sources], args.start)

    try:
        while True:
            audio.process_events()
            state = player.state
            if view.started and not state.is_playing and not state.is_loading:
                break
            if state.error and not state.is_playing and not view.started:
                break
            time.sleep(0.05)
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        shutdown(context)
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
