import pickle
import sys
from datetime import datetime, timezone
from time import sleep

import pytest

from civiltime import (
    FRIDAY,
    MONDAY,
    SATURDAY,
    SUNDAY,
    THURSDAY,
    TUESDAY,
    WEDNESDAY,
    ComponentRange,
    Date,
    Duration,
    IndeterminateOffset,
    Instant,
    Month,
    OffsetDateTime,
    Overflow,
    PrimitiveDateTime,
    Time,
    UtcOffset,
    Weekday,
    hours,
    patch_current_time,
    seconds,
)


def test_exceptions():
    assert issubclass(ComponentRange, ValueError)
    assert issubclass(Overflow, OverflowError)
    assert issubclass(IndeterminateOffset, Exception)
    assert not issubclass(IndeterminateOffset, ValueError)


class TestComponentRange:

    def test_attributes(self):
        with pytest.raises(ComponentRange) as exc_info:
            Date(2021, 2, 29)
        exc = exc_info.value
        assert exc.name == "day"
        assert exc.minimum == 1
        assert exc.maximum == 28
        assert exc.value == 29
        assert exc.conditional_message == "for the given month and year"

    def test_str(self):
        assert str(ComponentRange("hour", 0, 23, 24)) == (
            "hour must be in the range [0, 23], got 24"
        )
        assert str(
            ComponentRange("day", 1, 30, 31, "for the given month and year")
        ) == (
            "day must be in the range [1, 30] "
            "for the given month and year, got 31"
        )

    def test_pickle(self):
        exc = ComponentRange("minute", 0, 59, 60)
        loaded = pickle.loads(pickle.dumps(exc))
        assert type(loaded) is ComponentRange
        assert loaded.name == "minute"
        assert (loaded.minimum, loaded.maximum, loaded.value) == (0, 59, 60)
        assert str(loaded) == str(exc)


def test_version():
    from civiltime import __version__

    assert isinstance(__version__, str)


def test_no_attr_on_module():
    with pytest.raises((AttributeError, ImportError), match="DoesntExist"):
        from civiltime import DoesntExist  # type: ignore[attr-defined] # noqa


@pytest.mark.parametrize(
    "cls",
    [
        Date,
        Time,
        UtcOffset,
        Duration,
        PrimitiveDateTime,
        OffsetDateTime,
        Instant,
        Weekday,
        Month,
        ComponentRange,
        Overflow,
    ],
)
def test_public_module_name(cls):
    assert cls.__module__ == "civiltime"


class TestWeekday:

    def test_aliases(self):
        assert [
            MONDAY,
            TUESDAY,
            WEDNESDAY,
            THURSDAY,
            FRIDAY,
            SATURDAY,
            SUNDAY,
        ] == list(Weekday)
        assert MONDAY.value == 1
        assert SUNDAY.value == 7

    def test_next_previous(self):
        assert MONDAY.next() is TUESDAY
        assert SUNDAY.next() is MONDAY
        assert MONDAY.previous() is SUNDAY
        assert THURSDAY.previous() is WEDNESDAY
        for day in Weekday:
            assert day.next().previous() is day

    @pytest.mark.parametrize(
        "day, from_mon, from_sun, days_from_mon, days_from_sun",
        [
            (MONDAY, 1, 2, 0, 1),
            (WEDNESDAY, 3, 4, 2, 3),
            (SATURDAY, 6, 7, 5, 6),
            (SUNDAY, 7, 1, 6, 0),
        ],
    )
    def test_numbering(
        self, day, from_mon, from_sun, days_from_mon, days_from_sun
    ):
        assert day.number_from_monday() == from_mon
        assert day.number_from_sunday() == from_sun
        assert day.number_days_from_monday() == days_from_mon
        assert day.number_days_from_sunday() == days_from_sun

    def test_pickle(self):
        assert pickle.loads(pickle.dumps(FRIDAY)) is FRIDAY


class TestMonth:

    def test_is_int(self):
        assert Month.MARCH == 3
        assert Month(12) is Month.DECEMBER
        assert Date(2021, Month.MARCH, 1) == Date(2021, 3, 1)
        assert Date(2021, 3, 1).month is Month.MARCH

    def test_next_previous(self):
        assert Month.JANUARY.next() is Month.FEBRUARY
        assert Month.DECEMBER.next() is Month.JANUARY
        assert Month.JANUARY.previous() is Month.DECEMBER
        assert Month.JULY.previous() is Month.JUNE
        for month in Month:
            assert month.previous().next() is month

    @pytest.mark.parametrize(
        "month, year, expected",
        [
            (Month.JANUARY, 2021, 31),
            (Month.FEBRUARY, 2021, 28),
            (Month.FEBRUARY, 2020, 29),
            (Month.FEBRUARY, 2000, 29),
            (Month.FEBRUARY, 1900, 28),
            (Month.FEBRUARY, 0, 29),
            (Month.FEBRUARY, -4, 29),
            (Month.APRIL, 2021, 30),
        ],
    )
    def test_length(self, month, year, expected):
        assert month.length(year) == expected


@pytest.mark.skipif(
    sys.implementation.name == "pypy",
    reason="time-machine doesn't support PyPy",
)
def test_time_machine():
    import time_machine

    with time_machine.travel(
        datetime(1980, 3, 2, 2, tzinfo=timezone.utc), tick=False
    ):
        assert OffsetDateTime.now_utc() == OffsetDateTime(
            1980, 3, 2, 2, offset=0
        )


def test_patch_time():

    d = OffsetDateTime(1980, 3, 2, hour=2, offset=0)

    # simplest case: freeze time at fixed UTC
    with patch_current_time(d, keep_ticking=False) as p:
        assert OffsetDateTime.now_utc() == d
        p.shift(hours=3)
        p.shift(hours=1)
        assert OffsetDateTime.now_utc() == d.add(hours=4)

    assert OffsetDateTime.now_utc() != d

    # freeze time at a non-UTC offset and keep ticking
    with patch_current_time(d.to_offset(5), keep_ticking=True) as p:
        assert (OffsetDateTime.now_utc() - d) < seconds(1)
        p.shift(hours=2)
        sleep(0.000001)
        assert hours(2) < (OffsetDateTime.now_utc() - d) < hours(2.1)
        p.shift(days=2)
        sleep(0.000001)
        assert hours(50) < (OffsetDateTime.now_utc() - d) < hours(50.1)

    assert OffsetDateTime.now_utc() - d > hours(40_000)
