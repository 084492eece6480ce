import io
import queue
import threading
from pathlib import Path
from urllib.parse import urlparse, unquote

import numpy as np
import requests
import sounddevice as sd
import soundfile as sf

from freeplay.core import logger
from freeplay.adapters.audio_element import AudioElement, AudioElementError, AudioPlaybackError


class SoundDeviceAudioElement(AudioElement):
    """
    Audio element on top of soundfile + sounddevice.

    Sources are decoded on a loader thread and played by a PortAudio
    callback. Neither thread calls the registered handlers: notifications
    are queued and delivered by process_events() on the host loop.
    """

    def __init__(self, buffer_size=2048, http_timeout=15.0, progress_interval=0.25,
                 http_session: requests.Session | None = None):
        super().__init__()
        self.buffer_size = buffer_size
        self.http_timeout = http_timeout
        self.progress_interval = progress_interval
        self._http = http_session or requests.Session()

        self.lock = threading.Lock()
        self._events = queue.Queue()
        self._ready = threading.Event()
        self._ready.set()

        self._data = None  # float32, frames x 2
        self._sample_rate = 44100
        self._position = 0
        self._volume = 0.8
        self._stream = None
        self._load_token = 0
        self._loading = False
        self._play_when_ready = False
        self._last_progress = 0.0

    @property
    def duration(self) -> float:
        with self.lock:
            if self._data is None:
                return 0.0
            return len(self._data) / self._sample_rate

    @property
    def position(self) -> float:
        with self.lock:
            return self._position / self._sample_rate

    def is_playing(self) -> bool:
        with self.lock:
            return self._stream is not None

    def wait_ready(self, timeout: float | None = None) -> bool:
        """
        Block until the last requested source finished loading (or failed)
        :param timeout:
        :return:
        """
        return self._ready.wait(timeout)

    # Region loading
    def load_source(self, url: str):
        self._stop_stream()
        with self.lock:
            self._load_token += 1
            token = self._load_token
            self._data = None
            self._position = 0
            self._last_progress = 0.0
            self._loading = True
            self._play_when_ready = False
            self._ready.clear()

        thread = threading.Thread(target=self._load, args=(url, token), daemon=True, name="AudioLoader")
        thread.start()

    def _load(self, url, token):
        try:
            data, sample_rate = self._decode(url)
        except AudioPlaybackError as error:
            logger.warning(f"[AudioOutput] {error}")
            with self.lock:
                if token != self._load_token:
                    return
                self._loading = False
                self._play_when_ready = False
            self._events.put((token, "error", error))
            self._ready.set()
            return

        if data.shape[1] == 1:
            data = np.tile(data, (1, 2))
        elif data.shape[1] > 2:
            data = data[:, :2]

        with self.lock:
            if token != self._load_token:
                # superseded by a newer load_source
                return
            self._data = np.ascontiguousarray(data, dtype=np.float32)
            self._sample_rate = sample_rate
            self._loading = False
            start = self._play_when_ready
            self._play_when_ready = False

        self._events.put((token, "metadata", len(data) / sample_rate))
        logger.info(f"[AudioOutput] Loaded {url} ({len(data)} frames @ {sample_rate} Hz)")

        if start:
            try:
                self._start_stream(token)
            except AudioPlaybackError as error:
                self._events.put((token, "error", error))

        with self.lock:
            # a newer load owns the ready flag
            if token == self._load_token:
                self._ready.set()

    def _decode(self, url):
        source = self._resolve_source(url)
        try:
            return sf.read(source, dtype='float32', always_2d=True)
        except (RuntimeError, OSError, TypeError) as e:
            raise AudioPlaybackError(AudioElementError.LOAD_ERROR, f"Error loading {url}: {e}") from e

    def _resolve_source(self, url: str):
        """
        Local path, file:// URL or http(s) URL. Remote sources are
        downloaded whole.
        :param url:
        :return: path string or file like object for soundfile
        """
        if not url:
            raise AudioPlaybackError(AudioElementError.UNSUPPORTED_SOURCE, "Track has no audio source")

        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            try:
                response = self._http.get(url, timeout=self.http_timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise AudioPlaybackError(AudioElementError.LOAD_ERROR, f"Error fetching {url}: {e}") from e
            return io.BytesIO(response.content)

        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        elif parsed.scheme == "" or len(parsed.scheme) == 1:
            # plain path, single letter scheme is a windows drive
            path = Path(url)
        else:
            raise AudioPlaybackError(AudioElementError.UNSUPPORTED_SOURCE, f"Unsupported source: {url}")

        if not path.is_file():
            raise AudioPlaybackError(AudioElementError.LOAD_ERROR, f"No such file: {path}")
        return str(path)

    # EndRegion

    # Region transport
    def play(self):
        with self.lock:
            if self._loading:
                self._play_when_ready = True
                return
            loaded = self._data is not None
            token = self._load_token

        if not loaded:
            raise AudioPlaybackError(AudioElementError.PLAYBACK_ERROR, "No source loaded")
        self._start_stream(token)

    def pause(self):
        self._stop_stream()

    def seek_time(self, seconds: float):
        with self.lock:
            if self._data is None:
                return
            frame = int(max(seconds, 0) * self._sample_rate)
            self._position = min(frame, len(self._data))
            self._last_progress = self._position / self._sample_rate

    def set_volume(self, volume: float):
        with self.lock:
            self._volume = min(max(float(volume), 0.0), 1.0)

    def process_events(self):
        delivered = 0
        while True:
            try:
                token, kind, payload = self._events.get_nowait()
            except queue.Empty:
                break

            if token != self._load_token:
                continue

            delivered += 1
            if kind == "time":
                self._notify_time_update(payload)
            elif kind == "metadata":
                self._notify_metadata(payload)
            elif kind == "error":
                self._notify_error(payload)
            elif kind == "ended":
                self._stop_stream()
                self._notify_end()
        return delivered

    def close(self):
        self._stop_stream()
        with self.lock:
            self._load_token += 1
            self._data = None
        self._http.close()

    # EndRegion

    # Region stream
    def _start_stream(self, token: int | None = None):
        """
        Opens the output stream for the loaded source.
        :param token: load the caller acted on, a newer load_source makes it stale
        :return:
        """
        with self.lock:
            if self._stream is not None:
                return
            if self._is_stale(token):
                logger.debug("[AudioOutput] source replaced before the stream started")
                return
            if self._position >= len(self._data):
                self._position = 0
            sample_rate = self._sample_rate

        try:
            stream = sd.OutputStream(
                samplerate=sample_rate,
                channels=2,
                blocksize=self.buffer_size,
                dtype="float32",
                callback=self._audio_callback,
            )
            stream.start()
        except sd.PortAudioError as e:
            raise AudioPlaybackError(AudioElementError.PLAYBACK_ERROR, f"Output stream failed: {e}") from e

        with self.lock:
            stale = self._is_stale(token) or self._stream is not None
            if not stale:
                self._stream = stream

        if stale:
            stream.stop()
            stream.close()

    def _is_stale(self, token):
        # caller holds self.lock
        if self._data is None:
            return True
        return token is not None and token != self._load_token

    def _stop_stream(self):
        with self.lock:
            stream, self._stream = self._stream, None
            self._play_when_ready = False

        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.warning(f"[AudioOutput] Failed to stop stream: {e}")

    def _audio_callback(self, outdata, frames, time, status):
        if status:
            logger.debug(f"[AudioOutput] {status}")

        with self.lock:
            token = self._load_token
            if self._data is None:
                outdata.fill(0)
                return

            start = self._position
            chunk = self._data[start:start + frames]
            count = len(chunk)
            outdata[:count] = chunk * self._volume
            outdata[count:] = 0
            self._position = start + count

            position = self._position / self._sample_rate
            ended = self._position >= len(self._data)
            report = ended or position - self._last_progress >= self.progress_interval
            if report:
                self._last_progress = position

        if report:
            self._events.put((token, "time", position))
        if ended:
            self._events.put((token, "ended", None))
            raise sd.CallbackStop

    # EndRegion
