import threading
from typing import Callable, Dict

from freeplay.core.constants.events import EventType, PlayerEvent, QueueEvent
from freeplay.core.event import DefaultEvent, Event, ThrottledEvent


class EventBus:
    """
    Publish / subscribe hub of one player context. Events are created on
    first use; the ones set up in _setup_default_events carry a throttle
    or a payload schema.
    """

    def __init__(self, progress_interval: float = 0.2):
        self._lock = threading.RLock()
        self._registry: Dict[EventType, DefaultEvent] = {}
        self._event_debugger = None
        self._progress_interval = progress_interval

        self._setup_default_events()

    def add_event_debugger(self, debugger):
        self._event_debugger = debugger

    def _setup_default_events(self):
        # progress arrives several times per second, subscribers only need the latest
        self._register(Event(dict, interval_sec=self._progress_interval), PlayerEvent.PLAYBACK_PROGRESS)

        # queue notifications are checked but never throttled
        self._register(Event(tuple, interval_sec=0), QueueEvent.QUEUE_UPDATED)
        self._register(Event(bool, interval_sec=0), QueueEvent.QUEUE_SHUFFLE_TOGGLE)

    def _register(self, event: DefaultEvent, event_type: EventType):
        event.name = event_type.value
        self._registry[event_type] = event

    def _get_event(self, event_type: EventType) -> DefaultEvent:
        """
        Lazy loading of events not pre-configured
        :param event_type
        :return:
        """
        with self._lock:
            if event_type not in self._registry:
                self._register(DefaultEvent(), event_type)
            return self._registry[event_type]

    def subscribe(self, event_type: EventType, callback: Callable, priority: int = 0):
        """
        Connects a callback. Callbacks are held weakly, keep a reference to them.
        :param event_type:
        :param callback:
        :param priority: higher runs first
        :return:
        """
        self._get_event(event_type).connect(callback, priority=priority)
        if self._event_debugger:
            self._event_debugger.print_event_log("Subscribe", event_type, callback)

    def unsubscribe(self, event_type: EventType, callback: Callable) -> bool:
        return self._get_event(event_type).disconnect(callback)

    def publish(self, event_type: EventType, *args, **kwargs):
        """
        Emits the data
        :param event_type
        :param args:
        :param kwargs
        :return:
        """
        self._get_event(event_type).emit(*args, **kwargs)
        if self._event_debugger:
            self._event_debugger.print_event_log("Publish", event_type, *args, **kwargs)

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._get_event(event_type))

    def get_all_events(self):
        return dict(self._registry)

    def close(self):
        """
        Cancel throttled deliveries still waiting on their timer
        :return:
        """
        with self._lock:
            events = list(self._registry.values())
        for event in events:
            if isinstance(event, ThrottledEvent):
                event.cancel_pending()
