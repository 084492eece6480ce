from dataclasses import dataclass, asdict
from typing import Dict, Any

from freeplay.domain.enums.playback import RepeatMode


DEFAULT_VOLUME = 0.8


@dataclass
class TransportState:
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    volume: float = DEFAULT_VOLUME
    is_muted: bool = False
    is_loading: bool = False
    error: str | None = None

    def to_dict(self):
        return asdict(self)


@dataclass
class PlaybackSettings:
    """Playback preferences that survive restarts. Queue contents never do."""
    shuffle: bool = False
    repeat: RepeatMode = RepeatMode.OFF
    volume: float = DEFAULT_VOLUME
    is_muted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shuffle": self.shuffle,
            "repeat": self.repeat.value,
            "volume": self.volume,
            "is_muted": self.is_muted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None):
        """
        Lenient loader, anything unreadable falls back to the default
        :param data:
        :return:
        """
        settings = cls()
        if not isinstance(data, dict):
            return settings

        if isinstance(data.get("shuffle"), bool):
            settings.shuffle = data["shuffle"]
        if isinstance(data.get("is_muted"), bool):
            settings.is_muted = data["is_muted"]

        try:
            settings.repeat = RepeatMode.parse(data.get("repeat", settings.repeat))
        except ValueError:
            pass

        volume = data.get("volume")
        if isinstance(volume, (int, float)) and not isinstance(volume, bool):
            settings.volume = min(max(float(volume), 0.0), 1.0)

        return settings
