import pytest

from freeplay.bootstrap import bootstrap, shutdown
from freeplay.core.config import AppConfig
from freeplay.core.constants.events import SessionEvent
from freeplay.domain.enums.playback import RepeatMode
from freeplay.domain.session import UserSession

from conftest import FakeAudioElement, Recorder


@pytest.fixture
def context(tmp_path):
    context = bootstrap(AppConfig(data_dir=tmp_path / "data"), audio=FakeAudioElement(), start_scheduler=False)
    yield context
    shutdown(context)


class TestUserSession:

    def test_login(self, bus, recorder):
        session = UserSession(bus)
        bus.subscribe(SessionEvent.LOGGED_IN, recorder)

        session.login({"id": 7, "username": "ada"}, "token-1")

        assert session.is_authenticated
        assert session.user["username"] == "ada"
        assert recorder.payloads == [{"id": 7, "username": "ada"}]

    def test_logout_clears_credentials(self, bus, recorder):
        session = UserSession(bus)
        bus.subscribe(SessionEvent.LOGGED_OUT, recorder)
        session.login({"id": 7}, "token-1")

        session.logout()

        assert not session.is_authenticated
        assert session.user is None
        assert recorder.count == 1

    def test_update_user(self, bus, recorder):
        session = UserSession(bus)
        bus.subscribe(SessionEvent.USER_UPDATED, recorder)
        assert session.update_user(username="nobody") is None

        session.login({"id": 7, "username": "ada"}, "token-1")
        session.update_user(username="lovelace")

        assert session.user == {"id": 7, "username": "lovelace"}
        assert recorder.payloads == [{"id": 7, "username": "lovelace"}]


class TestBootstrap:

    def test_context_is_wired(self, context, tmp_path):
        assert set(context) == {"config", "bus", "scheduler", "settings", "queue", "player", "session", "audio"}
        assert (tmp_path / "data" / "settings.db").exists()

    def test_logout_resets_player(self, context, tracks):
        queue, player, session = context["queue"], context["player"], context["session"]
        session.login({"id": 1}, "token")
        queue.set_queue(tracks, 1)
        queue.set_repeat_mode(RepeatMode.ALL)
        assert player.state.is_playing is True

        session.logout()

        assert queue.is_empty
        assert queue.current_track is None
        assert player.state.is_playing is False
        assert queue.repeat_mode == RepeatMode.ALL

    def test_preferences_survive_restart(self, tmp_path):
        config = AppConfig(data_dir=tmp_path / "data", persist_delay=60)
        first = bootstrap(config, audio=FakeAudioElement(), start_scheduler=False)
        first["queue"].toggle_shuffle()
        first["player"].set_volume(0.3)
        shutdown(first)

        second = bootstrap(config, audio=FakeAudioElement(), start_scheduler=False)
        try:
            assert second["queue"].shuffle is True
            assert second["player"].state.volume == 0.3
            assert second["audio"].volume == 0.3
            assert second["queue"].is_empty
        finally:
            shutdown(second)

    def test_shutdown_flushes_pending_saves(self, context):
        context["player"].set_volume(0.9)
        assert context["scheduler"].pending()

        shutdown(context)

        assert context["settings"].load_playback_settings().volume == 0.9

    def test_event_debugger_is_optional(self, tmp_path):
        recorder = Recorder()
        config = AppConfig(data_dir=tmp_path / "data", event_debug=True)
        context = bootstrap(config, audio=FakeAudioElement(), start_scheduler=False)
        try:
            context["bus"].subscribe(SessionEvent.LOGGED_OUT, recorder)
            context["session"].logout()
            assert recorder.count == 1
        finally:
            shutdown(context)
