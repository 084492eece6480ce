from freeplay.core import logger
from freeplay.core.constants.events import PlayerEvent


class EventDebugger:
    _skip = [PlayerEvent.PLAYBACK_PROGRESS, PlayerEvent.STATE_CHANGED]

    def __init__(self, print_console=False):
        self.print_console = print_console
        self.history = []

    def print_event_log(self, context, event_type, *args, **kwargs):
        if event_type in self._skip:
            return

        self.history.append((context, event_type))
        # keep only the last 100
        self.history = self.history[-100:]

        msg = f"[Event Debug] Context: {context} Event type: {event_type.value}"
        logger.debug(msg)
        if self.print_console:
            print(msg)
