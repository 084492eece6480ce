import sqlite3

import pytest

from freeplay.adapters.settings_store import PLAYBACK_SETTINGS_KEY, SettingsStore
from freeplay.domain.enums.playback import RepeatMode
from freeplay.domain.models.player_state import DEFAULT_VOLUME, PlaybackSettings


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "settings.db"


@pytest.fixture
def store(db_path):
    return SettingsStore(db_path)


class TestSettingsStore:

    def test_roundtrip_values(self, store):
        assert store.set("theme", {"dark": True}) is True
        assert store.get("theme") == {"dark": True}

    def test_missing_key_returns_default(self, store):
        assert store.get("nope") is None
        assert store.get("nope", 3) == 3

    def test_overwrite(self, store):
        store.set("k", 1)
        store.set("k", 2)
        assert store.get("k") == 2

    def test_delete(self, store):
        store.set("k", 1)
        assert store.delete("k") is True
        assert store.get("k") is None

    def test_unserializable_value_is_rejected(self, store):
        assert store.set("k", object()) is False
        assert store.get("k") is None

    def test_survives_reopen(self, db_path):
        SettingsStore(db_path).save_playback_settings(PlaybackSettings(shuffle=True, volume=0.2))

        settings = SettingsStore(db_path).load_playback_settings()

        assert settings.shuffle is True
        assert settings.volume == 0.2

    def test_corrupt_value_falls_back_to_defaults(self, store, db_path):
        conn = sqlite3.connect(str(db_path))
        with conn:
            conn.execute("INSERT INTO settings (key, value) VALUES (?, ?)", (PLAYBACK_SETTINGS_KEY, "{not json"))
        conn.close()

        settings = store.load_playback_settings()

        assert settings == PlaybackSettings()

    def test_empty_store_gives_defaults(self, store):
        settings = store.load_playback_settings()
        assert settings.shuffle is False
        assert settings.repeat == RepeatMode.OFF
        assert settings.volume == DEFAULT_VOLUME
        assert settings.is_muted is False

    def test_playback_settings_are_stored_as_plain_json(self, store):
        store.save_playback_settings(PlaybackSettings(repeat=RepeatMode.ALL, is_muted=True))
        assert store.get(PLAYBACK_SETTINGS_KEY) == {
            "shuffle": False,
            "repeat": "all",
            "volume": DEFAULT_VOLUME,
            "is_muted": True,
        }

    def test_unreadable_database_gives_defaults(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.db")
        store.db_path = str(tmp_path / "missing" / "settings.db")

        assert store.get("k", "fallback") == "fallback"
        assert store.set("k", 1) is False
