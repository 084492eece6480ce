import math


def _whole_seconds(seconds) -> int | None:
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return None
    if not value or math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return int(value)


def format_time(seconds) -> str:
    """m:ss, used for the elapsed / total labels"""
    total = _whole_seconds(seconds)
    if total is None:
        return "0:00"
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def format_duration(seconds) -> str:
    """h:mm:ss for an hour or more, m:ss below"""
    total = _whole_seconds(seconds)
    if total is None:
        return "0:00"
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
