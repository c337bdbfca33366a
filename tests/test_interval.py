from datetime import datetime, timedelta, timezone

import pytest

from services.errors import InvalidRange
from services.interval import TimeInterval, parse_instant


def at(hour, minute=0):
    return datetime(2024, 1, 1, hour, minute)


def test_rejects_inverted_and_empty_ranges():
    with pytest.raises(InvalidRange):
        TimeInterval(at(11), at(10))
    with pytest.raises(InvalidRange):
        TimeInterval(at(10), at(10))


def test_rejects_non_datetimes():
    with pytest.raises(InvalidRange):
        TimeInterval("2024-01-01T10:00:00", at(11))


def test_touching_intervals_do_not_overlap():
    morning = TimeInterval(at(10), at(11))
    next_slot = TimeInterval(at(11), at(12))
    assert not morning.overlaps(next_slot)
    assert not next_slot.overlaps(morning)


@pytest.mark.parametrize(
    "other",
    [
        (at(10), at(11)),          # identical
        (at(10, 59), at(11, 1)),   # straddles the end
        (at(9), at(10, 1)),        # straddles the start
        (at(10, 15), at(10, 45)),  # contained
        (at(9), at(12)),           # contains
    ],
)
def test_overlap_cases_are_symmetric(other):
    booked = TimeInterval(at(10), at(11))
    candidate = TimeInterval(*other)
    assert booked.overlaps(candidate)
    assert candidate.overlaps(booked)


def test_aware_datetimes_are_normalized_to_utc():
    plus_two = timezone(timedelta(hours=2))
    interval = TimeInterval(
        datetime(2024, 1, 1, 11, 0, tzinfo=plus_two),
        datetime(2024, 1, 1, 12, 0, tzinfo=plus_two),
    )
    assert interval.start == at(9)
    assert interval.end == at(10)
    assert interval.duration == timedelta(hours=1)


def test_parse_accepts_trailing_z():
    interval = TimeInterval.parse("2024-01-01T09:00:00Z", "2024-01-01T09:30:00Z")
    assert interval.start == at(9)
    assert interval.end == at(9, 30)


@pytest.mark.parametrize("value", ["", "tomorrow", None, "2024-13-01T00:00:00"])
def test_parse_instant_rejects_garbage(value):
    with pytest.raises(InvalidRange):
        parse_instant(value)
