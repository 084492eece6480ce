import time
import bisect
import itertools
import weakref
import threading
from threading import Timer

from freeplay.core import logger


def _weak_ref(slot, on_dead):
    # a bound method object dies at once, follow its instance instead
    if getattr(slot, "__self__", None) is not None:
        return weakref.WeakMethod(slot, on_dead)
    return weakref.ref(slot, on_dead)


class DefaultEvent:
    """
    Weakly held subscribers called by descending priority, in subscription
    order within the same priority.
    """

    def __init__(self, name: str | None = None):
        self.name = name or "event"
        self._slots = []  # (-priority, seq, ref)
        self._seq = itertools.count()
        self._lock = threading.RLock()

    def connect(self, slot, priority=0):
        """
        Connect slots with priority with higher being executed earlier
        :param slot:
        :param priority:
        :return:
        """
        with self._lock:
            ref = _weak_ref(slot, self._on_dead_reference)
            bisect.insort(self._slots, (-priority, next(self._seq), ref))

    def disconnect(self, slot) -> bool:
        with self._lock:
            kept = [entry for entry in self._slots if not self._is_slot(entry[2], slot)]
            removed = len(kept) != len(self._slots)
            self._slots = kept
        return removed

    @staticmethod
    def _is_slot(ref, slot):
        target = ref()
        return target is None or target == slot

    def _on_dead_reference(self, ref):
        with self._lock:
            self._slots = [entry for entry in self._slots if entry[2] is not ref]

    def live_slots(self):
        with self._lock:
            targets = [entry[2]() for entry in self._slots]
        return [target for target in targets if target is not None]

    def __len__(self):
        return len(self.live_slots())

    def emit(self, *args, **kwargs):
        for slot in self.live_slots():
            try:
                slot(*args, **kwargs)
            except Exception as e:
                name = getattr(slot, "__qualname__", type(slot).__name__)
                logger.warning(f"[Event] {self.name}: subscriber {name} failed: {e}")


class ThrottledEvent(DefaultEvent):
    """
    Delivers at most once per interval_sec. Emits inside the window collapse
    into one trailing delivery carrying the latest arguments.
    """

    def __init__(self, interval_sec=0.1, name: str | None = None):
        super().__init__(name)
        self.interval_sec = interval_sec
        self._last_emit = None
        self._trailing_timer = None

    def emit(self, *args, **kwargs):
        with self._lock:
            self._cancel_trailing()
            now = time.monotonic()
            wait = 0.0 if self._last_emit is None else self.interval_sec - (now - self._last_emit)
            if wait > 0:
                self._trailing_timer = Timer(wait, self._emit_trailing, args=args, kwargs=kwargs)
                self._trailing_timer.daemon = True
                self._trailing_timer.start()
                return
            self._last_emit = now

        super().emit(*args, **kwargs)

    def _emit_trailing(self, *args, **kwargs):
        with self._lock:
            self._trailing_timer = None
            self._last_emit = time.monotonic()
        super().emit(*args, **kwargs)

    def _cancel_trailing(self):
        if self._trailing_timer is not None:
            self._trailing_timer.cancel()
            self._trailing_timer = None

    def cancel_pending(self):
        """
        Drop a trailing delivery that has not fired yet
        :return:
        """
        with self._lock:
            self._cancel_trailing()


class Event(ThrottledEvent):
    """
    Event with a payload schema. interval_sec=0 disables throttling.
    """

    def __init__(self, *arg_types, interval_sec=0.1, name: str | None = None):
        super().__init__(interval_sec=interval_sec, name=name)
        self.arg_types = arg_types

    def check_payload(self, args):
        """
        Checks if provided args match the defined schema
        :param args:
        :return:
        """
        if len(args) != len(self.arg_types):
            raise TypeError(f"{self.name} expects {len(self.arg_types)} argument(s), got {len(args)}")

        for position, (value, expected) in enumerate(zip(args, self.arg_types)):
            if not isinstance(value, expected):
                raise TypeError(
                    f"{self.name} argument {position} must be {expected.__name__}, got {type(value).__name__}"
                )

    def emit(self, *args, **kwargs):
        self.check_payload(args)
        super().emit(*args, **kwargs)
