from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass(frozen=True)
class Track:
    id: str
    title: str
    artist: str
    duration: int = 0
    audio_url: str = ""
    image_url: str = ""
    album: str = ""
    genre: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "duration": self.duration,
            "audio_url": self.audio_url,
            "image_url": self.image_url,
            "album": self.album,
            "genre": self.genre,
            "metadata": dict(self.metadata)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Build a track from either the catalog payload (camelCase, as served
        by the backend) or the output of to_dict.
        :param data:
        :return:
        """
        def pick(*keys, default=""):
            for key in keys:
                value = data.get(key)
                if value not in (None, ""):
                    return value
            return default

        try:
            duration = int(float(pick("duration", default=0)))
        except (TypeError, ValueError):
            duration = 0

        known = {
            "id", "trackId", "title", "name", "artist", "artist_name", "duration",
            "audio_url", "audioUrl", "image_url", "imageUrl", "album", "albumName",
            "genre", "metadata",
        }
        # only a mapping is kept, anything else under "metadata" is dropped
        raw = data.get("metadata")
        metadata = dict(raw) if isinstance(raw, dict) else {}
        metadata.update({k: v for k, v in data.items() if k not in known})

        return cls(
            id=str(pick("id", "trackId")),
            title=str(pick("title", "name")),
            artist=str(pick("artist", "artist_name", default="Unknown artist")),
            duration=duration,
            audio_url=str(pick("audio_url", "audioUrl")),
            image_url=str(pick("image_url", "imageUrl")),
            album=str(pick("album", "albumName")),
            genre=str(pick("genre")),
            metadata=metadata,
        )
