import os
from pathlib import Path
from dataclasses import dataclass, field


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast=float):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError:
        return default


@dataclass
class AppConfig:
    data_dir: Path = field(default_factory=lambda: Path(os.getcwd()) / 'assets/db')
    log_file: str | None = None
    log_level: str = "INFO"
    autoplay: bool = True
    persist_delay: float = 0.5
    buffer_size: int = 2048
    http_timeout: float = 15.0
    event_debug: bool = False

    @property
    def settings_db_path(self) -> Path:
        return self.data_dir / "settings.db"

    def ensure_dirs(self):
        """
        Create the data directory if missing
        :return:
        """
        if not self.data_dir.exists():
            os.makedirs(self.data_dir, exist_ok=True)

    @classmethod
    def from_env(cls):
        """
        Build the config from FREEPLAY_* environment variables
        :return:
        """
        defaults = cls()
        data_dir = os.environ.get("FREEPLAY_DATA_DIR")
        return cls(
            data_dir=Path(data_dir) if data_dir else defaults.data_dir,
            log_file=os.environ.get("FREEPLAY_LOG_FILE") or None,
            log_level=os.environ.get("FREEPLAY_LOG_LEVEL", defaults.log_level),
            autoplay=_env_flag("FREEPLAY_AUTOPLAY", defaults.autoplay),
            persist_delay=_env_number("FREEPLAY_PERSIST_DELAY", defaults.persist_delay),
            buffer_size=_env_number("FREEPLAY_BUFFER_SIZE", defaults.buffer_size, int),
            http_timeout=_env_number("FREEPLAY_HTTP_TIMEOUT", defaults.http_timeout),
            event_debug=_env_flag("FREEPLAY_EVENT_DEBUG", defaults.event_debug),
        )
