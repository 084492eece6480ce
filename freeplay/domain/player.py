from dataclasses import replace

from freeplay.core import logger
from freeplay.core.event_bus import EventBus
from freeplay.core.scheduler import Scheduler
from freeplay.core.constants.events import PlaybackCommandEvent, PlayerEvent, QueueEvent
from freeplay.adapters.audio_element import AudioElement, AudioPlaybackError
from freeplay.adapters.settings_store import SettingsStore
from freeplay.domain.models.player_state import DEFAULT_VOLUME, PlaybackSettings, TransportState
from freeplay.domain.models.track import Track
from freeplay.domain.queue_controller import PlaybackQueueController


class MusicPlayer:
    """
    Transport side of the player. Owns the audio element and the transport
    state, follows the queue through the event bus and turns audio
    notifications back into queue moves.
    """

    PERSIST_JOB = "persist-playback-settings"

    def __init__(self, event_bus: EventBus, queue: PlaybackQueueController, audio: AudioElement,
                 settings_store: SettingsStore | None = None, scheduler: Scheduler | None = None,
                 autoplay: bool = True, persist_delay: float = 0.5):
        self.bus = event_bus
        self.queue = queue
        self.audio = audio
        self.autoplay = autoplay
        self.persist_delay = persist_delay

        self._settings_store = settings_store
        self._scheduler = scheduler
        self._restoring = False
        self._volume_before_mute = DEFAULT_VOLUME

        self.state = TransportState()

        self.audio.register_time_update_event(self.on_time_update)
        self.audio.register_end_event(self.on_ended)
        self.audio.register_error_event(self.on_error)
        self.audio.register_metadata_event(self.on_loaded_metadata)
        self.audio.set_volume(self.state.volume)

        # queue transitions
        self.bus.subscribe(QueueEvent.QUEUE_TRACK_CHANGED, self.receive_track_change, priority=5)
        self.bus.subscribe(QueueEvent.QUEUE_CLEARED, self.receive_queue_cleared, priority=5)
        self.bus.subscribe(QueueEvent.QUEUE_SHUFFLE_TOGGLE, self.receive_mode_change)
        self.bus.subscribe(QueueEvent.QUEUE_REPEAT_MODE, self.receive_mode_change)

        # commands from the UI / keyboard
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_PLAY, self.play)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_PAUSE, self.pause)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_TOGGLE, self.toggle_play)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_NEXT, self.next_track)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_PREVIOUS, self.previous_track)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_SEEK, self.seek)
        self.bus.subscribe(PlaybackCommandEvent.PLAYBACK_VOLUME, self.set_volume)

    @property
    def current_track(self) -> Track | None:
        return self.queue.current_track

    # Region transport
    def play(self) -> bool:
        """
        Start or resume the current track. Failures end up in state.error.
        :return: whether the audio element accepted the request
        """
        track = self.queue.current_track
        if track is None:
            return False

        try:
            self.audio.play()
        except AudioPlaybackError as error:
            self._set_error(error)
            return False

        self.state.is_playing = True
        self.state.error = None
        self.bus.publish(PlayerEvent.PLAYBACK_STARTED, track)
        self._publish_state()
        return True

    def pause(self):
        self.audio.pause()
        if self.state.is_playing:
            self.state.is_playing = False
            self.bus.publish(PlayerEvent.PLAYBACK_PAUSED, self.queue.current_track)
        self._publish_state()

    def toggle_play(self):
        if self.state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float):
        seconds = max(float(seconds), 0.0)
        if self.state.duration > 0:
            seconds = min(seconds, self.state.duration)
        self.audio.seek_time(seconds)
        self.state.current_time = seconds
        self._publish_state()

    def set_volume(self, volume: float):
        volume = min(max(float(volume), 0.0), 1.0)
        self.state.volume = volume
        self.state.is_muted = volume == 0
        if volume > 0:
            self._volume_before_mute = volume
        self.audio.set_volume(volume)
        self._publish_state()
        self._persist_settings()

    def toggle_mute(self):
        """
        Muting drops the volume to 0, unmuting brings back the volume
        in use before muting.
        :return:
        """
        if self.state.is_muted:
            self.state.is_muted = False
            self.state.volume = self._volume_before_mute or DEFAULT_VOLUME
        else:
            if self.state.volume > 0:
                self._volume_before_mute = self.state.volume
            self.state.is_muted = True
            self.state.volume = 0.0

        self.audio.set_volume(self.state.volume)
        self._publish_state()
        self._persist_settings()

    def next_track(self):
        return self.queue.advance()

    def previous_track(self):
        return self.queue.retreat()

    def reset(self):
        """
        Forget the queue and the transport position. Volume and playback
        modes are preferences and stay.
        :return:
        """
        self.queue.reset()
        self.state.current_time = 0.0
        self.state.duration = 0.0
        self.state.is_loading = False
        self.state.error = None
        self._publish_state()
        logger.info("[Player] Reset")

    # EndRegion

    # Region queue events
    def receive_track_change(self, track: Track):
        """
        New current track: rewind, load it and keep playing if we were.
        :param track:
        :return:
        """
        was_playing = self.state.is_playing
        self.state.current_time = 0.0
        self.state.duration = float(track.duration or 0)
        self.state.is_loading = True
        self.state.error = None

        try:
            self.audio.load_source(track.audio_url)
        except AudioPlaybackError as error:
            self._set_error(error)
            return

        logger.info(f"[Player] Loading {track.title} by {track.artist}")
        if self.autoplay or was_playing:
            self.play()
        else:
            self._publish_state()

    def receive_queue_cleared(self):
        self.audio.pause()
        self.state.is_playing = False
        self.state.current_time = 0.0
        self.state.duration = 0.0
        self.state.is_loading = False
        self._publish_state()

    def receive_mode_change(self, _value):
        self._persist_settings()

    # EndRegion

    # Region audio element notifications
    def on_time_update(self, seconds: float):
        self.state.current_time = seconds
        track = self.queue.current_track
        self.bus.publish(PlayerEvent.PLAYBACK_PROGRESS, {
            'elapsed': seconds,
            'total': self.state.duration,
            'track_id': track.id if track else None
        })

    def on_loaded_metadata(self, duration: float):
        self.state.duration = duration
        self.state.is_loading = False
        self._publish_state()

    def on_ended(self):
        logger.debug("[Player] Track ended")
        if self.queue.advance() is None:
            # end of the queue
            self.state.is_playing = False
            self.state.current_time = 0.0
            self._publish_state()

    def on_error(self, error):
        self._set_error(error)

    # EndRegion

    # Region settings
    def playback_settings(self) -> PlaybackSettings:
        return PlaybackSettings(
            shuffle=self.queue.shuffle,
            repeat=self.queue.repeat_mode,
            volume=self._volume_before_mute if self.state.is_muted else self.state.volume,
            is_muted=self.state.is_muted,
        )

    def restore_settings(self) -> PlaybackSettings | None:
        """
        Rehydrate modes and volume from the settings store
        :return:
        """
        if self._settings_store is None:
            return None

        settings = self._settings_store.load_playback_settings()
        self._restoring = True
        try:
            self.queue.set_shuffle(settings.shuffle)
            self.queue.set_repeat_mode(settings.repeat)
            self._volume_before_mute = settings.volume or DEFAULT_VOLUME
            self.state.is_muted = settings.is_muted
            self.state.volume = 0.0 if settings.is_muted else settings.volume
            self.audio.set_volume(self.state.volume)
        finally:
            self._restoring = False

        logger.info(f"[Player] Restored settings {settings.to_dict()}")
        self._publish_state()
        return settings

    def _persist_settings(self):
        if self._settings_store is None or self._restoring:
            return

        settings = self.playback_settings()
        if self._scheduler is not None:
            self._scheduler.add_job(self.PERSIST_JOB, self._save_settings, self.persist_delay,
                                    args=(settings,), unique=True)
        else:
            self._save_settings(settings)

    def _save_settings(self, settings: PlaybackSettings):
        if not self._settings_store.save_playback_settings(settings):
            logger.warning("[Player] Playback settings were not saved")

    # EndRegion

    # Helpers
    def _set_error(self, error):
        message = str(error)
        logger.warning(f"[Player] {message}")
        self.state.error = message
        self.state.is_loading = False
        self.state.is_playing = False
        self.bus.publish(PlayerEvent.PLAYBACK_ERROR, message)
        self._publish_state()

    def _publish_state(self):
        self.bus.publish(PlayerEvent.STATE_CHANGED, replace(self.state))
