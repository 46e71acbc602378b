import pickle
import re
import sys
from copy import copy, deepcopy
from datetime import datetime as py_datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis.strategies import integers

from civiltime import (
    ComponentRange,
    Date,
    Duration,
    Month,
    OffsetDateTime,
    Overflow,
    PrimitiveDateTime,
    Time,
    UtcOffset,
    hours,
    minutes,
    nanoseconds,
    patch_current_time,
    seconds,
)

from .common import (
    AlwaysEqual,
    AlwaysLarger,
    AlwaysSmaller,
    NeverEqual,
    system_tz_ams,
)

UNIX_EPOCH_DATE = Date(1970, 1, 1)
MAX_TIMESTAMP = (Date.MAX.days_since(UNIX_EPOCH_DATE) + 1) * 86_400 - 1
MIN_TIMESTAMP = Date.MIN.days_since(UNIX_EPOCH_DATE) * 86_400


class TestInit:

    def test_all_args(self):
        d = OffsetDateTime(
            2020, 8, 15, 23, 12, 9, nanosecond=987_654_321, offset=5
        )
        assert d.year == 2020
        assert d.month is Month.AUGUST
        assert d.day == 15
        assert d.hour == 23
        assert d.minute == 12
        assert d.second == 9
        assert d.nanosecond == 987_654_321
        assert d.offset == UtcOffset(5)

    def test_offset_types(self):
        assert OffsetDateTime(2020, 8, 15, offset=-5).offset == UtcOffset(-5)
        assert OffsetDateTime(
            2020, 8, 15, offset=UtcOffset(5, 30)
        ).offset == UtcOffset(5, 30)

    def test_offset_required(self):
        with pytest.raises(TypeError):
            OffsetDateTime(2020, 8, 15)  # type: ignore[call-arg]

    def test_invalid_offset(self):
        with pytest.raises(TypeError):
            OffsetDateTime(
                2020, 8, 15, offset="+05:00"  # type: ignore[arg-type]
            )

        with pytest.raises(ComponentRange, match="hours"):
            OffsetDateTime(2020, 8, 15, offset=24)

    @pytest.mark.parametrize(
        "args, name",
        [
            ((2020, 13, 1), "month"),
            ((2021, 2, 29), "day"),
            ((2020, 1, 1, 24), "hour"),
        ],
    )
    def test_out_of_range(self, args, name):
        with pytest.raises(ComponentRange) as exc_info:
            OffsetDateTime(*args, offset=0)
        assert exc_info.value.name == name

    def test_extreme_local_values_with_offset(self):
        # the local fields are in range, even if the moment in UTC isn't
        d = OffsetDateTime(999_999, 12, 31, 23, offset=-2)
        assert d.local() == PrimitiveDateTime(999_999, 12, 31, 23)
        with pytest.raises(Overflow):
            d.to_utc()


def test_accessors():
    d = OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=UtcOffset(-5, -30))
    assert d.date() == Date(2020, 8, 15)
    assert d.time() == Time(23, 12, 9)
    assert d.local() == PrimitiveDateTime(2020, 8, 15, 23, 12, 9)
    assert d.local().assume_offset(d.offset).exact_eq(d)


class TestUnixTimestamp:

    @pytest.mark.parametrize(
        "d, expected",
        [
            (OffsetDateTime(1970, 1, 1, offset=0), 0),
            (OffsetDateTime(1970, 1, 1, offset=1), -3_600),
            (OffsetDateTime(2019, 1, 1, 1, offset=1), 1_546_300_800),
            (
                OffsetDateTime(1969, 12, 31, 23, 59, 59, offset=0),
                -1,
            ),
            (PrimitiveDateTime.MAX.assume_utc(), MAX_TIMESTAMP),
            (PrimitiveDateTime.MIN.assume_utc(), MIN_TIMESTAMP),
        ],
    )
    def test_seconds(self, d, expected):
        assert d.unix_timestamp() == expected

    def test_rounds_down(self):
        d = OffsetDateTime(1969, 12, 31, 23, 59, 59, nanosecond=1, offset=0)
        assert d.unix_timestamp() == -1
        assert d.unix_timestamp_nanos() == -999_999_999

    def test_nanos(self):
        d = OffsetDateTime(
            2019, 1, 1, 1, 0, 0, nanosecond=123_456_789, offset=1
        )
        assert d.unix_timestamp_nanos() == 1_546_300_800_123_456_789

    def test_from_timestamp(self):
        assert OffsetDateTime.from_unix_timestamp(0).exact_eq(
            OffsetDateTime.UNIX_EPOCH
        )
        assert OffsetDateTime.from_unix_timestamp(
            1_546_300_800, offset=1
        ).exact_eq(OffsetDateTime(2019, 1, 1, 1, offset=1))
        assert OffsetDateTime.from_unix_timestamp(
            -1, offset=UtcOffset(0, -30)
        ).exact_eq(
            OffsetDateTime(1969, 12, 31, 23, 29, 59, offset=UtcOffset(0, -30))
        )

    def test_from_timestamp_nanos(self):
        assert OffsetDateTime.from_unix_timestamp_nanos(
            1_546_300_800_123_456_789
        ).exact_eq(
            OffsetDateTime(
                2019, 1, 1, 0, 0, 0, nanosecond=123_456_789, offset=0
            )
        )
        assert OffsetDateTime.from_unix_timestamp_nanos(-1).exact_eq(
            OffsetDateTime(
                1969, 12, 31, 23, 59, 59, nanosecond=999_999_999, offset=0
            )
        )

    def test_from_timestamp_bounds(self):
        assert OffsetDateTime.from_unix_timestamp(MAX_TIMESTAMP).exact_eq(
            PrimitiveDateTime(999_999, 12, 31, 23, 59, 59).assume_utc()
        )
        assert OffsetDateTime.from_unix_timestamp(MIN_TIMESTAMP).exact_eq(
            PrimitiveDateTime.MIN.assume_utc()
        )

        with pytest.raises(ComponentRange, match="timestamp"):
            OffsetDateTime.from_unix_timestamp(MAX_TIMESTAMP + 1)
        with pytest.raises(ComponentRange, match="timestamp"):
            OffsetDateTime.from_unix_timestamp(MIN_TIMESTAMP - 1)
        with pytest.raises(ComponentRange, match="timestamp"):
            OffsetDateTime.from_unix_timestamp_nanos(
                (MAX_TIMESTAMP + 1) * 1_000_000_000
            )

        # in range as a timestamp, but not as a local date
        with pytest.raises(Overflow):
            OffsetDateTime.from_unix_timestamp(MAX_TIMESTAMP, offset=1)

    def test_from_timestamp_invalid(self):
        with pytest.raises(TypeError):
            OffsetDateTime.from_unix_timestamp(1.5)  # type: ignore[arg-type]

    @given(
        integers(-(10**20), 10**20),
        integers(-86_399, 86_399),
    )
    def test_nanos_roundtrip(self, nanos, offset_secs):
        offset = UtcOffset.from_whole_seconds(offset_secs)
        d = OffsetDateTime.from_unix_timestamp_nanos(nanos, offset=offset)
        assert d.unix_timestamp_nanos() == nanos
        assert d.offset == offset
        assert d == OffsetDateTime.from_unix_timestamp_nanos(nanos)


class TestNow:

    def test_now_utc(self):
        now = OffsetDateTime.now_utc()
        assert now.offset == UtcOffset.UTC
        py_now = py_datetime.now(timezone.utc)
        assert (
            OffsetDateTime.from_py_datetime(py_now) - now
        ) < seconds(1)

    def test_patched(self):
        d = OffsetDateTime(1980, 3, 2, 2, offset=3)
        with patch_current_time(d, keep_ticking=False):
            assert OffsetDateTime.now_utc() == d
            assert OffsetDateTime.now_utc().offset == UtcOffset.UTC

    @pytest.mark.skipif(sys.platform == "win32", reason="requires tzset")
    def test_now_local(self):
        d = OffsetDateTime(2024, 7, 1, 12, offset=0)
        with system_tz_ams(), patch_current_time(d, keep_ticking=False):
            now = OffsetDateTime.now_local()
            assert now.exact_eq(OffsetDateTime(2024, 7, 1, 14, offset=2))


class TestToOffset:

    def test_to_offset(self):
        d = OffsetDateTime(2021, 1, 1, offset=1)
        assert d.to_offset(-5).exact_eq(
            OffsetDateTime(2020, 12, 31, 18, offset=-5)
        )
        assert d.to_offset(UtcOffset(5, 30)).exact_eq(
            OffsetDateTime(2021, 1, 1, 4, 30, offset=UtcOffset(5, 30))
        )
        assert d.to_utc().exact_eq(OffsetDateTime(2020, 12, 31, 23, offset=0))
        assert d.to_offset(1) is not d
        assert d.to_offset(1).exact_eq(d)

    def test_overflow(self):
        with pytest.raises(Overflow):
            PrimitiveDateTime.MAX.assume_utc().to_offset(1)
        with pytest.raises(Overflow):
            PrimitiveDateTime.MIN.assume_utc().to_offset(-1)

    def test_replace_offset_changes_moment(self):
        d = OffsetDateTime(2020, 8, 15, 12, offset=1)
        replaced = d.replace_offset(2)
        assert replaced.exact_eq(OffsetDateTime(2020, 8, 15, 12, offset=2))
        assert replaced - d == hours(-1)


def test_exact_eq():
    a = OffsetDateTime(2020, 8, 15, 12, offset=1)
    b = OffsetDateTime(2020, 8, 15, 13, offset=2)
    assert a == b
    assert not a.exact_eq(b)
    assert a.exact_eq(OffsetDateTime(2020, 8, 15, 12, offset=1))

    with pytest.raises(TypeError):
        a.exact_eq(a.local())  # type: ignore[arg-type]


class TestReplace:

    def test_fields(self):
        d = OffsetDateTime(2020, 8, 15, 23, 12, offset=1)
        assert d.replace().exact_eq(d)
        assert d.replace(year=2021, offset=2).exact_eq(
            OffsetDateTime(2021, 8, 15, 23, 12, offset=2)
        )
        assert d.replace(nanosecond=3).exact_eq(
            OffsetDateTime(2020, 8, 15, 23, 12, nanosecond=3, offset=1)
        )
        assert d.replace(offset=UtcOffset(0, 30)).exact_eq(
            OffsetDateTime(2020, 8, 15, 23, 12, offset=UtcOffset(0, 30))
        )

    def test_invalid(self):
        d = OffsetDateTime(2020, 2, 29, offset=1)
        with pytest.raises(ComponentRange, match="day"):
            d.replace(year=2021)
        with pytest.raises(TypeError, match="tzinfo"):
            d.replace(tzinfo=None)
        with pytest.raises(TypeError):
            d.replace(offset="+01:00")

    def test_date_and_time(self):
        d = OffsetDateTime(2020, 8, 15, 23, 12, offset=1)
        assert d.replace_date(Date(1999, 1, 2)).exact_eq(
            OffsetDateTime(1999, 1, 2, 23, 12, offset=1)
        )
        assert d.replace_time(Time(1, 2, 3)).exact_eq(
            OffsetDateTime(2020, 8, 15, 1, 2, 3, offset=1)
        )
        with pytest.raises(TypeError):
            d.replace_date(Time())  # type: ignore[arg-type]


class TestArithmetic:

    def test_add_units(self):
        d = OffsetDateTime(2020, 1, 31, offset=2)
        assert d.add(months=1, hours=3).exact_eq(
            OffsetDateTime(2020, 2, 29, 3, offset=2)
        )
        assert d.subtract(days=1, minutes=1).exact_eq(
            OffsetDateTime(2020, 1, 29, 23, 59, offset=2)
        )
        with pytest.raises(TypeError):
            d.add(offset=1)

    def test_add_duration(self):
        d = OffsetDateTime(2020, 12, 31, 23, offset=-3)
        assert (d + hours(2)).exact_eq(
            OffsetDateTime(2021, 1, 1, 1, offset=-3)
        )
        assert (d - hours(24)).exact_eq(
            OffsetDateTime(2020, 12, 30, 23, offset=-3)
        )
        assert d.checked_add(minutes(1)).exact_eq(  # type: ignore[union-attr]
            OffsetDateTime(2020, 12, 31, 23, 1, offset=-3)
        )

    def test_overflow(self):
        d = PrimitiveDateTime.MAX.assume_offset(1)
        with pytest.raises(Overflow):
            d + nanoseconds(1)
        assert d.checked_add(nanoseconds(1)) is None
        assert d.saturating_add(nanoseconds(1)).exact_eq(d)

        d = PrimitiveDateTime.MIN.assume_offset(-1)
        with pytest.raises(Overflow):
            d - nanoseconds(1)
        assert d.checked_sub(nanoseconds(1)) is None
        assert d.saturating_sub(nanoseconds(1)).exact_eq(d)

    def test_difference(self):
        a = OffsetDateTime(2021, 1, 1, offset=1)
        assert a - OffsetDateTime(2020, 12, 31, 22, offset=0) == hours(1)
        assert OffsetDateTime(2020, 12, 31, 22, offset=0) - a == hours(-1)
        assert a - a.to_offset(-7) == Duration.ZERO

    def test_unsupported(self):
        d = OffsetDateTime(2020, 1, 1, offset=0)
        with pytest.raises(TypeError, match="unsupported operand"):
            d + 1  # type: ignore[operator]
        with pytest.raises(TypeError, match="unsupported operand"):
            d - d.local()  # type: ignore[operator]
        with pytest.raises(TypeError, match="unsupported operand"):
            d - timedelta(1)  # type: ignore[operator]

    @given(integers(-(10**20), 10**20))
    def test_add_then_difference(self, ns):
        d = OffsetDateTime(2000, 1, 1, 12, offset=UtcOffset(-3, -30))
        delta = nanoseconds(ns)
        assert (d + delta) - d == delta
        assert (d + delta).offset == d.offset


def test_equality():
    d = OffsetDateTime(2020, 8, 15, 12, offset=1)
    same = OffsetDateTime(2020, 8, 15, 12, offset=1)
    same_moment = OffsetDateTime(2020, 8, 15, 13, offset=2)
    different = OffsetDateTime(2020, 8, 15, 12, offset=2)

    assert d == same
    assert d == same_moment
    assert not d == different
    assert not d == NeverEqual()
    assert d == AlwaysEqual()
    assert not d != same
    assert not d != same_moment
    assert d != different
    assert d != NeverEqual()
    assert not d != AlwaysEqual()

    assert d != d.local()  # type: ignore[comparison-overlap]

    assert hash(d) == hash(same)
    assert hash(d) == hash(same_moment)
    assert hash(d) != hash(different)


def test_comparison():
    d = OffsetDateTime(2020, 8, 15, 12, offset=1)
    same_moment = OffsetDateTime(2020, 8, 15, 13, offset=2)
    # later local time, but earlier moment
    earlier = OffsetDateTime(2020, 8, 15, 13, offset=3)
    later = OffsetDateTime(2020, 8, 15, 11, offset=-1)

    assert d <= same_moment
    assert d >= same_moment
    assert not d < same_moment
    assert not d > same_moment
    assert earlier < d
    assert d > earlier
    assert d < later
    assert later >= d
    assert d < AlwaysLarger()
    assert d > AlwaysSmaller()
    assert not d >= AlwaysLarger()

    with pytest.raises(TypeError):
        d < d.local()  # type: ignore[operator]


class TestPyDatetime:

    def test_to_py(self):
        d = OffsetDateTime(
            2020,
            8,
            15,
            23,
            12,
            9,
            nanosecond=987_654_321,
            offset=UtcOffset(-5, -30),
        )
        py = d.py_datetime()
        assert py == py_datetime(
            2020,
            8,
            15,
            23,
            12,
            9,
            987_654,
            tzinfo=timezone(timedelta(hours=-5, minutes=-30)),
        )
        assert py.utcoffset() == timedelta(hours=-5, minutes=-30)

    def test_from_py(self):
        d = OffsetDateTime.from_py_datetime(
            py_datetime(
                2020,
                8,
                15,
                23,
                12,
                9,
                987_654,
                tzinfo=timezone(timedelta(hours=-5, minutes=-30)),
            )
        )
        assert d.exact_eq(
            OffsetDateTime(
                2020,
                8,
                15,
                23,
                12,
                9,
                nanosecond=987_654_000,
                offset=UtcOffset(-5, -30),
            )
        )

    def test_from_py_seconds_offset(self):
        d = OffsetDateTime.from_py_datetime(
            py_datetime(2020, 1, 1, tzinfo=timezone(timedelta(seconds=-17)))
        )
        assert d.offset == UtcOffset(0, 0, -17)

    def test_from_py_invalid(self):
        with pytest.raises(ValueError, match="aware"):
            OffsetDateTime.from_py_datetime(py_datetime(2020, 1, 1))

        with pytest.raises(ValueError, match="whole number of seconds"):
            OffsetDateTime.from_py_datetime(
                py_datetime(
                    2020, 1, 1, tzinfo=timezone(timedelta(microseconds=1))
                )
            )

        with pytest.raises(TypeError):
            OffsetDateTime.from_py_datetime(
                Date(2020, 1, 1)  # type: ignore[arg-type]
            )


@pytest.mark.parametrize(
    "d, expected",
    [
        (
            OffsetDateTime(
                2020, 8, 15, 23, 12, 9, nanosecond=5_000_000, offset=-5
            ),
            "2020-08-15T23:12:09.005-05:00",
        ),
        (OffsetDateTime(2020, 8, 15, offset=0), "2020-08-15T00:00:00+00:00"),
        (
            OffsetDateTime(2020, 8, 15, offset=UtcOffset(5, 30, 15)),
            "2020-08-15T00:00:00+05:30:15",
        ),
        (
            OffsetDateTime(-1, 1, 1, offset=UtcOffset(0, -30)),
            "-0001-01-01T00:00:00-00:30",
        ),
    ],
)
def test_format_common_iso(d, expected):
    assert d.format_common_iso() == expected
    assert str(d) == expected
    assert OffsetDateTime.parse_common_iso(expected).exact_eq(d)


def test_repr():
    d = OffsetDateTime(
        2020, 8, 15, 23, 12, 9, nanosecond=5_000_000, offset=UtcOffset(-5, -30)
    )
    assert repr(d) == "OffsetDateTime(2020-08-15 23:12:09.005-05:30)"
    assert repr(OffsetDateTime(2020, 8, 15, 23, 12, offset=2)) == (
        "OffsetDateTime(2020-08-15 23:12:00+02:00)"
    )


class TestParseCommonIso:

    @pytest.mark.parametrize(
        "s, expected",
        [
            (
                "2020-08-15T23:12:09+02:00",
                OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=2),
            ),
            (
                "2020-08-15T23:12:09Z",
                OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=0),
            ),
            (
                "2020-08-15 23:12:09z",
                OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=0),
            ),
            (
                "2020-08-15T23:12:09.5-05:30",
                OffsetDateTime(
                    2020,
                    8,
                    15,
                    23,
                    12,
                    9,
                    nanosecond=500_000_000,
                    offset=UtcOffset(-5, -30),
                ),
            ),
            (
                "20200815T231209+0200",
                OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=2),
            ),
            (
                "2020-08-15T23:12:09-03",
                OffsetDateTime(2020, 8, 15, 23, 12, 9, offset=-3),
            ),
            (
                "-0001-01-01T00:00:00Z",
                OffsetDateTime(-1, 1, 1, offset=0),
            ),
        ],
    )
    def test_valid(self, s, expected):
        assert OffsetDateTime.parse_common_iso(s).exact_eq(expected)

    @pytest.mark.parametrize(
        "s",
        [
            "2020-08-15T23:12:09",  # no offset
            "2020-08-15T23:12+02:00",  # no seconds
            "2020-08-15T23:12:09+2",
            "2020-08-15T23:12:09+02:00 ",
            "2020-08-15T23:12:09+02:00[Europe/Amsterdam]",
            "2020-08-15T23:12:09UTC",
            "2020-08-15",
            "2020-08-15T+02:00",
            "2020-08-𝟙5T23:12:09+02:00",
            "",
        ],
    )
    def test_invalid(self, s):
        with pytest.raises(
            ValueError, match=r"Invalid format.*" + re.escape(repr(s))
        ):
            OffsetDateTime.parse_common_iso(s)

    @pytest.mark.parametrize(
        "s", ["2020-08-15T23:12:09+24:00", "2021-02-29T00:00:00Z"]
    )
    def test_out_of_range(self, s):
        with pytest.raises(ComponentRange):
            OffsetDateTime.parse_common_iso(s)


def test_constants():
    assert OffsetDateTime.UNIX_EPOCH.exact_eq(
        OffsetDateTime(1970, 1, 1, offset=0)
    )
    assert OffsetDateTime.UNIX_EPOCH.unix_timestamp() == 0


def test_copy():
    d = OffsetDateTime(2020, 8, 15, 23, 12, offset=2)
    assert copy(d) is d
    assert deepcopy(d) is d


def test_pickling():
    for d in (
        OffsetDateTime(
            2020, 8, 15, 23, 12, 9, nanosecond=987_654_321, offset=-5
        ),
        OffsetDateTime(2020, 8, 15, offset=UtcOffset(-23, -59, -59)),
        PrimitiveDateTime.MAX.assume_offset(23),
        PrimitiveDateTime.MIN.assume_offset(-23),
    ):
        assert pickle.loads(pickle.dumps(d)).exact_eq(d)


def test_cannot_subclass():
    with pytest.raises(TypeError):

        class SubclassOffsetDateTime(OffsetDateTime):  # type: ignore[misc]
            pass
