import pytest

from freeplay.core.utility.formatting import format_duration, format_time


@pytest.mark.parametrize("seconds, expected", [
    (0, "0:00"),
    (5, "0:05"),
    (65, "1:05"),
    (59.9, "0:59"),
    (3600, "60:00"),
    (None, "0:00"),
    (float("nan"), "0:00"),
    (float("inf"), "0:00"),
    (-3, "0:00"),
    ("abc", "0:00"),
])
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


@pytest.mark.parametrize("seconds, expected", [
    (0, "0:00"),
    (215, "3:35"),
    (3599, "59:59"),
    (3600, "1:00:00"),
    (3725, "1:02:05"),
    (float("nan"), "0:00"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
