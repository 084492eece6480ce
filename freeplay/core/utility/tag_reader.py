import os
import uuid
from pathlib import Path

import mutagen
from mutagen import MutagenError

from freeplay.core import logger
from freeplay.domain.models.track import Track


class TagReader:
    """Reads file metadata into a Track reference"""

    def __init__(self, path, autoextract=False, logger_=None):
        self.logger = logger_ if logger_ else logger
        self.path = str(path)

        self.title = os.path.basename(self.path)
        self.artist = 'Unknown artist'
        self.album = ''
        self.genre = ''
        self.year = ''
        self.track_no = '0'
        self.file_length = 0.0
        self.filetype = os.path.splitext(self.path)[-1][1:].upper() or None

        if autoextract:
            self.read_tags()

    def read_tags(self):
        """
        Read tags from file and update attributes. Unreadable files keep
        the file name as title.
        """
        try:
            audio = mutagen.File(self.path, easy=True)
        except (MutagenError, OSError) as error:
            self.logger.warning(f'[Tag Reader] Failed to load tags: {error}')
            return self

        if audio is None:
            self.logger.warning(f'[Tag Reader] Unknown format: {self.path}')
            return self

        tags = audio.tags or {}
        self.title = self._first(tags, 'title', self.title)
        self.artist = self._first(tags, 'artist', self.artist)
        self.album = self._first(tags, 'album', self.album)
        self.genre = self._first(tags, 'genre', self.genre)
        self.year = self._first(tags, 'date', self.year)
        self.track_no = self._first(tags, 'tracknumber', self.track_no)

        info = getattr(audio, 'info', None)
        self.file_length = float(getattr(info, 'length', 0) or 0)
        return self

    @staticmethod
    def _first(tags, key, default):
        values = tags.get(key)
        if not values:
            return default
        value = values[0] if isinstance(values, (list, tuple)) else values
        return str(value) or default

    def to_track(self) -> Track:
        path = Path(self.path).resolve()
        return Track(
            id=str(uuid.uuid5(uuid.NAMESPACE_URL, path.as_uri())),
            title=self.title,
            artist=self.artist,
            duration=int(self.file_length),
            audio_url=str(path),
            album=self.album,
            genre=self.genre,
            metadata={"year": self.year, "track_no": self.track_no, "filetype": self.filetype},
        )


def read_track(path) -> Track:
    return TagReader(path, autoextract=True).to_track()
