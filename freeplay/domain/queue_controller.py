import random
from collections import defaultdict, deque
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from freeplay.core import logger
from freeplay.core.event_bus import EventBus
from freeplay.core.constants.events import QueueEvent
from freeplay.domain.enums.playback import RepeatMode
from freeplay.domain.models.track import Track


class PlaybackQueueController:
    """
    Ordered list of tracks, a cursor into it and the shuffle / repeat flags.

    Every operation is total: bad indices and empty queues turn into no-ops.
    Transitions are announced on the event bus, the controller never talks
    to the audio output itself.
    """

    def __init__(self, event_bus: EventBus, rng: random.Random | None = None):
        self._bus = event_bus
        self._rng = rng or random.Random()

        # State
        self._queue: List[Track] = []
        self._current_index: Optional[int] = None
        self._current_track: Optional[Track] = None
        self._current_playlist: Any = None

        # Modes
        self._shuffle = False
        self._repeat_mode = RepeatMode.OFF

    # Region read only views
    @property
    def queue(self) -> Tuple[Track, ...]:
        return tuple(self._queue)

    @property
    def current_index(self) -> Optional[int]:
        return self._current_index

    @property
    def current_track(self) -> Optional[Track]:
        return self._current_track

    @property
    def current_playlist(self) -> Any:
        return self._current_playlist

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat_mode

    @property
    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self):
        return len(self._queue)

    @property
    def has_next(self) -> bool:
        """Whether advance() would move the cursor"""
        if not self._queue:
            return False
        # shuffle always has another entry to pick once the queue holds two, no draw needed
        if self._shuffle and len(self._queue) > 1:
            return True
        return self._sequential_next_index() is not None

    @property
    def has_previous(self) -> bool:
        if not self._queue:
            return False
        return self._previous_index() is not None

    def upcoming(self, limit: int | None = None) -> List[Track]:
        """
        Tracks after the cursor in queue order (shuffle does not reorder the queue)
        :param limit:
        :return:
        """
        if self._current_index is None:
            return []
        tracks = self._queue[self._current_index + 1:]
        return tracks if limit is None else tracks[:limit]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "queue": [track.id for track in self._queue],
            "current_index": self._current_index,
            "current_track": self._current_track.id if self._current_track else None,
            "shuffle": self._shuffle,
            "repeat": self._repeat_mode.value,
        }

    # EndRegion

    # Region loading and enqueuing
    def set_queue(self, tracks: Sequence[Track], start_index: int = 0) -> Optional[Track]:
        """
        Replaces the whole queue and selects start_index.
        An out of range start_index on a non empty queue falls back to 0.
        :param tracks:
        :param start_index:
        :return: the new current track
        """
        self._queue = list(tracks)

        if not self._queue:
            self._current_index = None
            self._current_track = None
            self._publish_update()
            self._bus.publish(QueueEvent.QUEUE_CLEARED)
            return None

        if not 0 <= start_index < len(self._queue):
            logger.debug(f"[Queue] start index {start_index} outside queue of {len(self._queue)}, using 0")
            start_index = 0

        self._publish_update()
        self._move_to(start_index)
        return self._current_track

    def set_current_track(self, track: Track, playlist: Any = None, index: int = 0) -> Optional[Track]:
        """
        Plays a track without replacing the queue, e.g. a track picked
        outside the current queue context.
        :param track:
        :param playlist: opaque playlist context, kept for the UI
        :param index: cursor to use when it lies inside the queue
        :return:
        """
        if track is None:
            return None

        self._current_track = track
        self._current_playlist = playlist
        if self._queue:
            self._current_index = index if 0 <= index < len(self._queue) else 0
        else:
            self._current_index = None

        self._emit_current_track()
        return track

    def play_track(self, track: Track, playlist: Any = None,
                   queue_tracks: Sequence[Track] = ()) -> Optional[Track]:
        """
        Plays a track picked from a list. With queue_tracks the list becomes
        the queue and the cursor lands on the first entry sharing the track id,
        or on 0 when the track is not in it. Without it the queue is kept.
        :param track:
        :param playlist: opaque playlist context, kept for the UI
        :param queue_tracks: the list the track was picked from
        :return: the new current track
        """
        if track is None:
            return None

        tracks = list(queue_tracks or ())
        if not tracks:
            return self.set_current_track(track, playlist)

        index = next((pos for pos, entry in enumerate(tracks) if entry.id == track.id), 0)
        self._current_playlist = playlist
        return self.set_queue(tracks, index)

    def play_playlist(self, tracks: Sequence[Track], start_index: int = 0,
                      playlist: Any = None) -> Optional[Track]:
        """
        Queues a playlist and starts at start_index. An empty playlist leaves
        the current queue and playback alone.
        :param tracks:
        :param start_index:
        :param playlist: opaque playlist context, kept for the UI
        :return: the new current track, None when nothing changed
        """
        tracks = list(tracks or ())
        if not tracks:
            logger.debug("[Queue] empty playlist, nothing to play")
            return None

        self._current_playlist = playlist
        return self.set_queue(tracks, start_index)

    def enqueue(self, track: Track):
        """
        Appends to the end of the queue, cursor and current track untouched
        :param track:
        :return:
        """
        self._queue.append(track)
        if self._current_index is None:
            self._current_index = 0
        self._publish_update()

    def dequeue(self, index: int) -> Optional[Track]:
        """
        Removes the entry at index and repairs the cursor.
        :param index:
        :return: the removed track
        """
        if not 0 <= index < len(self._queue):
            return None

        removed = self._queue.pop(index)
        current = self._current_index

        if current is None or index > current:
            self._publish_update()
        elif index < current:
            self._current_index = current - 1
            self._publish_update()
        elif not self._queue:
            self._current_index = None
            self._current_track = None
            self._publish_update()
            self._bus.publish(QueueEvent.QUEUE_CLEARED)
        else:
            # the following track slides under the cursor, the last one wraps to 0
            if current >= len(self._queue):
                self._current_index = 0
            self._publish_update()
            self._move_to(self._current_index)

        return removed

    def reorder(self, track_ids: Iterable[str]):
        """
        Rebuilds the queue following track_ids. Unknown ids are ignored and
        tracks not listed are dropped. A repeated id takes the next entry
        with that id, so duplicated tracks keep their own positions.

        The cursor follows the entry that was current. When that entry is
        dropped the first track becomes current.
        :param track_ids:
        :return:
        """
        positions = defaultdict(deque)
        for pos, track in enumerate(self._queue):
            positions[track.id].append(pos)

        origins = []
        for track_id in track_ids:
            available = positions.get(str(track_id))
            if available:
                origins.append(available.popleft())

        old_index = self._current_index
        self._queue = [self._queue[pos] for pos in origins]

        if not self._queue:
            self.clear()
            return

        if old_index is not None and old_index in origins:
            self._current_index = origins.index(old_index)
            self._publish_update()
            return

        logger.debug("[Queue] current entry dropped by reorder, moving to the first track")
        self._publish_update()
        self._move_to(0)

    def clear(self):
        """
        Empties the queue and stops playback
        :return:
        """
        self._queue = []
        self._current_index = None
        self._current_track = None
        self._publish_update()
        self._bus.publish(QueueEvent.QUEUE_CLEARED)

    def reset(self):
        """
        Back to the initial state, playback modes are kept
        :return:
        """
        self._current_playlist = None
        self.clear()

    # EndRegion

    # Region navigation
    def advance(self) -> Optional[Track]:
        """
        Moves to the next track according to shuffle / repeat.
        :return: the new current track, None when nothing changed
        """
        if not self._queue:
            return None

        next_index = self._next_index()
        if next_index is None:
            logger.debug("[Queue] end of queue reached")
            self._bus.publish(QueueEvent.QUEUE_ENDED)
            return None

        self._move_to(next_index)
        return self._current_track

    def retreat(self) -> Optional[Track]:
        """
        Moves to the previous track. Always sequential, shuffle is ignored.
        :return:
        """
        if not self._queue:
            return None

        prev_index = self._previous_index()
        if prev_index is None:
            return None

        self._move_to(prev_index)
        return self._current_track

    def seek_to_index(self, index: int) -> bool:
        if not 0 <= index < len(self._queue):
            return False
        self._move_to(index)
        return True

    # EndRegion

    # Region modes
    def toggle_shuffle(self) -> bool:
        self._shuffle = not self._shuffle
        self._bus.publish(QueueEvent.QUEUE_SHUFFLE_TOGGLE, self._shuffle)
        return self._shuffle

    def set_shuffle(self, enabled: bool):
        if bool(enabled) != self._shuffle:
            self.toggle_shuffle()

    def set_repeat_mode(self, mode: RepeatMode | str) -> RepeatMode:
        """
        :param mode: RepeatMode or its value ("off", "all", "one")
        :return:
        """
        self._repeat_mode = RepeatMode.parse(mode)
        self._bus.publish(QueueEvent.QUEUE_REPEAT_MODE, self._repeat_mode)
        return self._repeat_mode

    def cycle_repeat_mode(self) -> RepeatMode:
        return self.set_repeat_mode(self._repeat_mode.next())

    # EndRegion

    # Helpers
    def _next_index(self) -> Optional[int]:
        if self._shuffle:
            current = self._current_index
            candidates = [i for i in range(len(self._queue)) if i != current]
            # a single entry queue has no other index, fall through to the sequential rules
            if candidates:
                return self._rng.choice(candidates)

        return self._sequential_next_index()

    def _sequential_next_index(self) -> Optional[int]:
        current = self._current_index
        last = len(self._queue) - 1

        if self._repeat_mode == RepeatMode.ONE:
            return current
        if self._repeat_mode == RepeatMode.ALL and current == last:
            return 0
        if current < last:
            return current + 1
        return None

    def _previous_index(self) -> Optional[int]:
        current = self._current_index
        if self._repeat_mode == RepeatMode.ALL and current == 0:
            return len(self._queue) - 1
        if current > 0:
            return current - 1
        return None

    def _move_to(self, index: int):
        self._current_index = index
        self._current_track = self._queue[index]
        self._emit_current_track()

    def _publish_update(self):
        self._bus.publish(QueueEvent.QUEUE_UPDATED, tuple(self._queue))

    def _emit_current_track(self):
        """
        Announces the current track, the player reloads its source on it
        :return:
        """
        if self._current_track is None:
            return
        self._bus.publish(QueueEvent.QUEUE_TRACK_CHANGED, self._current_track)
