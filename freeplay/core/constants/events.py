from enum import Enum


class EventType(Enum):
    pass


class PlaybackCommandEvent(EventType):
    PLAYBACK_PLAY = "playback.play"  # Data: None
    PLAYBACK_PAUSE = "playback.pause"  # Data: None
    PLAYBACK_TOGGLE = "playback.toggle"  # Data: None
    PLAYBACK_NEXT = "playback.next"  # Data: None
    PLAYBACK_PREVIOUS = "playback.previous"  # Data: None
    PLAYBACK_SEEK = "playback.seek"  # Data: float seconds
    PLAYBACK_VOLUME = "playback.volume"  # Data: float 0.0 - 1.0


class PlayerEvent(EventType):
    PLAYBACK_STARTED = "player.started"  # Data: Track
    PLAYBACK_PAUSED = "player.paused"  # Data: Track | None
    PLAYBACK_ERROR = "player.error"  # Data: str (error message)
    PLAYBACK_PROGRESS = "player.progress"  # Data: dict {"elapsed": float, "total": float, "track_id": str}
    STATE_CHANGED = "player.state_changed"  # Data: TransportState


class QueueEvent(EventType):
    QUEUE_UPDATED = "queue.updated"  # Data: tuple[Track, ...]
    QUEUE_TRACK_CHANGED = "queue.track_changed"  # Data: Track
    QUEUE_ENDED = "queue.ended"  # Data: None
    QUEUE_CLEARED = "queue.cleared"  # Data: None
    QUEUE_SHUFFLE_TOGGLE = "queue.shuffle_toggled"  # Data: bool
    QUEUE_REPEAT_MODE = "queue.repeat_mode"  # Data: RepeatMode


class SessionEvent(EventType):
    LOGGED_IN = "session.logged_in"  # Data: dict (user)
    LOGGED_OUT = "session.logged_out"  # Data: None
    USER_UPDATED = "session.user_updated"  # Data: dict (user)
