import json
import sqlite3
import threading
from typing import Any

from freeplay.core import logger
from freeplay.domain.models.player_state import PlaybackSettings


PLAYBACK_SETTINGS_KEY = "music-player-storage"


class SettingsStore:
    """
    Durable key-value store for player preferences. Values are JSON encoded.
    Failures are logged and reported as defaults / False, the caller is a UI
    that must never block or crash on them.
    """

    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self._write_lock = threading.Lock()
        self._init_db()

    def _get_connection(self):
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS settings (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        try:
            conn = self._get_connection()
            try:
                row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning(f"[Settings] Failed to read {key}: {e}")
            return default

        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning(f"[Settings] Corrupt value for {key}: {e}")
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"[Settings] Value for {key} is not serializable: {e}")
            return False

        try:
            with self._write_lock:
                conn = self._get_connection()
                try:
                    with conn:
                        conn.execute("""
                            INSERT INTO settings (key, value, updated_at)
                            VALUES (?, ?, CURRENT_TIMESTAMP)
                            ON CONFLICT(key) DO UPDATE SET
                                value = excluded.value,
                                updated_at = CURRENT_TIMESTAMP
                        """, (key, payload))
                finally:
                    conn.close()
        except sqlite3.Error as e:
            logger.warning(f"[Settings] Failed to save {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        try:
            with self._write_lock:
                conn = self._get_connection()
                try:
                    with conn:
                        conn.execute("DELETE FROM settings WHERE key = ?", (key,))
                finally:
                    conn.close()
        except sqlite3.Error as e:
            logger.warning(f"[Settings] Failed to delete {key}: {e}")
            return False
        return True

    def load_playback_settings(self) -> PlaybackSettings:
        return PlaybackSettings.from_dict(self.get(PLAYBACK_SETTINGS_KEY))

    def save_playback_settings(self, settings: PlaybackSettings) -> bool:
        saved = self.set(PLAYBACK_SETTINGS_KEY, settings.to_dict())
        if saved:
            logger.debug(f"[Settings] Saved playback settings {settings.to_dict()}")
        return saved
