from typing import Any, Dict, Optional

from freeplay.core import logger
from freeplay.core.event_bus import EventBus
from freeplay.core.constants.events import SessionEvent


class UserSession:
    """
    Signed in user as far as the player cares. Logging out publishes
    SessionEvent.LOGGED_OUT, whoever owns player state resets on it.
    """

    def __init__(self, event_bus: EventBus):
        self._bus = event_bus
        self.user: Optional[Dict[str, Any]] = None
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, user: Dict[str, Any], token: str):
        self.user = dict(user)
        self.token = token
        logger.info(f"[Session] Logged in as {self.user.get('username', self.user.get('id'))}")
        self._bus.publish(SessionEvent.LOGGED_IN, dict(self.user))

    def logout(self):
        was_authenticated = self.is_authenticated
        self.user = None
        self.token = None
        if was_authenticated:
            logger.info("[Session] Logged out")
        self._bus.publish(SessionEvent.LOGGED_OUT)

    def update_user(self, **fields):
        if self.user is None:
            return None
        self.user.update(fields)
        self._bus.publish(SessionEvent.USER_UPDATED, dict(self.user))
        return self.user
