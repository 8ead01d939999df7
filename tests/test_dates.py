"""Tests for due-date helpers."""

from datetime import datetime

import pytest

from taskflow.core.dates import (
    is_same_day,
    next_weekday,
    parse_due_input,
    parse_timestamp,
    quick_pick,
    weekday_from_name,
    weekday_index,
    whole_days_between,
)
from taskflow.core.exceptions import ValidationError

WEDNESDAY = datetime(2026, 10, 14, 9, 30)


def test_weekday_index_is_sunday_based():
    assert weekday_index(WEDNESDAY) == 3
    assert weekday_index(datetime(2026, 10, 18)) == 0  # Sunday
    assert weekday_index(datetime(2026, 10, 17)) == 6  # Saturday


def test_next_weekday_never_returns_today():
    assert next_weekday(WEDNESDAY, 3) == datetime(2026, 10, 21, 9, 30)
    assert next_weekday(WEDNESDAY, 4) == datetime(2026, 10, 15, 9, 30)
    assert next_weekday(WEDNESDAY, 0) == datetime(2026, 10, 18, 9, 30)
    assert next_weekday(WEDNESDAY, 2) == datetime(2026, 10, 20, 9, 30)


def test_whole_days_truncate_toward_zero():
    assert whole_days_between(datetime(2026, 10, 14, 9, 29), datetime(2026, 10, 13, 9, 30)) == 0
    assert whole_days_between(datetime(2026, 10, 14, 9, 30), datetime(2026, 10, 13, 9, 30)) == 1
    assert whole_days_between(datetime(2026, 10, 13, 0, 0), datetime(2026, 10, 14, 12, 0)) == -1


@pytest.mark.parametrize(
    "choice, expected",
    [
        ("today", datetime(2026, 10, 14)),
        ("tomorrow", datetime(2026, 10, 15)),
        ("next-week", datetime(2026, 10, 21)),
    ],
)
def test_quick_picks_land_on_midnight(choice, expected):
    assert quick_pick(choice, WEDNESDAY) == expected


def test_quick_pick_rejects_unknown_choice():
    with pytest.raises(ValidationError):
        quick_pick("someday", WEDNESDAY)


def test_weekday_from_name():
    assert weekday_from_name("wed") == 3
    assert weekday_from_name("Wednesday") == 3
    assert weekday_from_name(" SUN ") == 0
    assert weekday_from_name("we") is None
    assert weekday_from_name("weekly") is None


def test_parse_due_input():
    assert parse_due_input("tomorrow", WEDNESDAY) == datetime(2026, 10, 15)
    assert parse_due_input("fri", WEDNESDAY) == datetime(2026, 10, 16)
    assert parse_due_input("wednesday", WEDNESDAY) == datetime(2026, 10, 21)
    assert parse_due_input("2026-12-24", WEDNESDAY) == datetime(2026, 12, 24)
    assert parse_due_input("none", WEDNESDAY) is None
    assert parse_due_input("clear", WEDNESDAY) is None

    with pytest.raises(ValidationError):
        parse_due_input("2026-13-01", WEDNESDAY)
    with pytest.raises(ValidationError):
        parse_due_input("soonish", WEDNESDAY)


def test_parse_timestamp_accepts_naive_and_utc():
    assert parse_timestamp("2026-10-14T09:30:00") == WEDNESDAY
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None

    utc = parse_timestamp("2026-10-14T09:30:00.000Z")
    assert utc.tzinfo is None

    with pytest.raises(ValueError):
        parse_timestamp("garbage")


def test_is_same_day():
    assert is_same_day(datetime(2026, 10, 14, 0, 0), datetime(2026, 10, 14, 23, 59))
    assert not is_same_day(datetime(2026, 10, 14, 23, 59), datetime(2026, 10, 15, 0, 0))
