import pytest

from hostcrawl.utils.duration import format_duration


@pytest.mark.parametrize("ms,expected", [
    (0, "0ms"),
    (-5, "0ms"),
    (float("nan"), "0ms"),
    (850, "850ms"),
    (2346, "2.35s"),
    (12_500, "12.5s"),
    (65_000, "1m 5.0s"),
    (200_000, "3m 20s"),
])
def test_format_duration(ms, expected):
    assert format_duration(ms) == expected
