from freeplay.core import logger, setup_logging
from freeplay.core.config import AppConfig
from freeplay.core.constants.events import SessionEvent
from freeplay.core.event_bus import EventBus
from freeplay.core.event_debugger import EventDebugger
from freeplay.core.scheduler import Scheduler
from freeplay.adapters.audio_element import AudioElement
from freeplay.adapters.settings_store import SettingsStore
from freeplay.domain.player import MusicPlayer
from freeplay.domain.queue_controller import PlaybackQueueController
from freeplay.domain.session import UserSession


def create_audio_element(config: AppConfig) -> AudioElement:
    # imported here, sounddevice needs PortAudio at import time
    from freeplay.adapters.audio_output import SoundDeviceAudioElement
    return SoundDeviceAudioElement(buffer_size=config.buffer_size, http_timeout=config.http_timeout)


def bootstrap(config: AppConfig | None = None, audio: AudioElement | None = None, start_scheduler: bool = True):
    """
    Build and wire the player context. Pass audio to use another output
    than the sound device one.
    :param config:
    :param audio:
    :param start_scheduler:
    :return: context dict
    """
    config = config or AppConfig.from_env()
    setup_logging(config.log_file, config.log_level)
    config.ensure_dirs()

    scheduler = Scheduler()
    bus = EventBus()
    if config.event_debug:
        bus.add_event_debugger(EventDebugger())

    # Persistence layer
    settings = SettingsStore(config.settings_db_path)

    # Domain
    queue = PlaybackQueueController(bus)
    audio = audio or create_audio_element(config)
    player = MusicPlayer(bus, queue, audio, settings_store=settings, scheduler=scheduler,
                         autoplay=config.autoplay, persist_delay=config.persist_delay)
    session = UserSession(bus)

    # logging out resets the player
    bus.subscribe(SessionEvent.LOGGED_OUT, player.reset)

    player.restore_settings()
    if start_scheduler:
        scheduler.start_loop()

    logger.info("Init bootstrap")

    return {
        "config": config,
        "bus": bus,
        "scheduler": scheduler,
        "settings": settings,
        "queue": queue,
        "player": player,
        "session": session,
        "audio": audio,
    }


def shutdown(context):
    """
    Stop background work and save what is still pending
    :param context:
    :return:
    """
    context["player"].pause()
    context["scheduler"].stop()
    context["scheduler"].flush()
    context["audio"].close()
    context["bus"].close()
    logger.info("Shut down")
