from enum import Enum


class RepeatMode(Enum):
    OFF = "off"
    ALL = "all"
    ONE = "one"

    def next(self) -> "RepeatMode":
        """
        Cycle order used by the repeat button: off -> all -> one -> off
        :return:
        """
        order = list(RepeatMode)
        return order[(order.index(self) + 1) % len(order)]

    @classmethod
    def parse(cls, value) -> "RepeatMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown repeat mode: {value!r}") from None
