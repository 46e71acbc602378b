# The MIT License (MIT)
#
# Copyright (c) Arie Bovenberg
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

# Maintainer's notes:
#
# - Why is everything in one file?
#   - Flat is better than nested
#   - It prevents circular imports since the classes 'know' about each other
#   - It's easier to vendor (i.e. copy-paste) this library if needed
# - The calendar math lives in _math.py. Classes here only validate,
#   compose, and delegate to it.
# - All values are stored as plain ints. Python ints don't overflow,
#   so every range check below is explicit.
from __future__ import annotations

__version__ = "0.1.0"

import enum
import re
from datetime import (
    date as _date,
    datetime as _datetime,
    time as _time,
    timedelta as _timedelta,
    timezone as _timezone,
)
from math import isfinite
from struct import pack, unpack
from time import monotonic_ns, time_ns
from typing import (
    TYPE_CHECKING,
    Any,
    ClassVar,
    Optional,
    no_type_check,
    overload,
)

from ._common import (
    MAX_DURATION_NS,
    MAX_YEAR,
    MIN_DURATION_NS,
    MIN_YEAR,
    NS_PER_DAY,
    NS_PER_HOUR,
    NS_PER_MIN,
    NS_PER_MS,
    NS_PER_SEC,
    NS_PER_US,
    NS_PER_WEEK,
    SECS_PER_DAY,
    UNIX_EPOCH_JULIAN_DAY,
)
from ._math import (
    add_months,
    days_in_month,
    days_in_year,
    from_julian_day,
    is_leap,
    iso_year_week,
    julian_day,
    ordinal_from_iso_week,
    ordinal_from_ymd,
    weekday_number,
    weeks_in_year,
    ymd_from_ordinal,
)
from ._parse import (
    date_from_iso,
    datetime_from_iso,
    offset_datetime_from_iso,
    offset_from_iso,
    parse_err,
    parse_nanos,
    time_from_iso,
)
from ._system import local_offset_seconds, reset_system_tz

__all__ = [
    # Date and time
    "Date",
    "Time",
    "UtcOffset",
    "PrimitiveDateTime",
    "OffsetDateTime",
    "Instant",
    # Durations and time units
    "Duration",
    "weeks",
    "days",
    "hours",
    "minutes",
    "seconds",
    "milliseconds",
    "microseconds",
    "nanoseconds",
    # Exceptions
    "ComponentRange",
    "Overflow",
    "IndeterminateOffset",
    # Constants
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
    "SUNDAY",
    "Weekday",
    "Month",
    # System timezone
    "reset_system_tz",
]


class Weekday(enum.Enum):
    """The days of the week; ``.value`` corresponds with ISO numbering."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    def next(self) -> Weekday:
        """The following day of the week, wrapping from Sunday to Monday

        Example
        -------
        >>> Weekday.SUNDAY.next()
        Weekday.MONDAY
        """
        return Weekday(self.value % 7 + 1)

    def previous(self) -> Weekday:
        """The preceding day of the week, wrapping from Monday to Sunday"""
        return Weekday((self.value - 2) % 7 + 1)

    def number_from_monday(self) -> int:
        """Monday is 1, Sunday is 7"""
        return self.value

    def number_from_sunday(self) -> int:
        """Sunday is 1, Saturday is 7"""
        return self.value % 7 + 1

    def number_days_from_monday(self) -> int:
        """Monday is 0, Sunday is 6"""
        return self.value - 1

    def number_days_from_sunday(self) -> int:
        """Sunday is 0, Saturday is 6"""
        return self.value % 7


MONDAY = Weekday.MONDAY
TUESDAY = Weekday.TUESDAY
WEDNESDAY = Weekday.WEDNESDAY
THURSDAY = Weekday.THURSDAY
FRIDAY = Weekday.FRIDAY
SATURDAY = Weekday.SATURDAY
SUNDAY = Weekday.SUNDAY


class Month(enum.IntEnum):
    """The months of the year. Members compare equal to their number,
    so they can be passed anywhere a month number is expected.
    """

    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12

    def next(self) -> Month:
        """The following month, wrapping from December to January"""
        return Month(self.value % 12 + 1)

    def previous(self) -> Month:
        """The preceding month, wrapping from January to December"""
        return Month((self.value - 2) % 12 + 1)

    def length(self, year: int) -> int:
        """The number of days in this month in the given year

        Example
        -------
        >>> Month.FEBRUARY.length(2024)
        29
        """
        return days_in_month(year, self.value)


class ComponentRange(ValueError):
    """A component (e.g. the month of a date) is outside its valid range.

    The attributes ``name``, ``minimum``, ``maximum`` and ``value`` describe
    which component was invalid and what its bounds were.
    """

    def __init__(
        self,
        name: str,
        minimum: int,
        maximum: int,
        value: int,
        conditional_message: Optional[str] = None,
    ) -> None:
        super().__init__(name, minimum, maximum, value, conditional_message)
        self.name = name
        self.minimum = minimum
        self.maximum = maximum
        self.value = value
        self.conditional_message = conditional_message

    def __str__(self) -> str:
        return (
            f"{self.name} must be in the range "
            f"[{self.minimum}, {self.maximum}]"
            + f" {self.conditional_message}" * bool(self.conditional_message)
            + f", got {self.value}"
        )


class Overflow(OverflowError):
    """The result of an arithmetic operation is outside the representable
    range"""


class IndeterminateOffset(Exception):
    """The UTC offset of the system timezone could not be determined"""


# Helpers that pre-compute/lookup as much as possible
_object_new = object.__new__
_MIN_JULIAN_DAY = julian_day(MIN_YEAR, 1)
_MAX_JULIAN_DAY = julian_day(MAX_YEAR, days_in_year(MAX_YEAR))


def _check_range(
    name: str,
    value: int,
    minimum: int,
    maximum: int,
    conditional_message: Optional[str] = None,
) -> int:
    if not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value)!r}")
    if not minimum <= value <= maximum:
        raise ComponentRange(
            name, minimum, maximum, value, conditional_message
        )
    return int(value)


def _check_year(year: int) -> int:
    return _check_range("year", year, MIN_YEAR, MAX_YEAR)


def _div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero (for positive b)"""
    q = abs(a) // b
    return q if a >= 0 else -q


def _check_finite(f: float) -> float:
    if not isfinite(f):
        raise ValueError(f"Cannot use non-finite value: {f}")
    return f


def _check_duration(d: Duration) -> Duration:
    if not isinstance(d, Duration):
        raise TypeError(f"Expected a Duration, got {type(d).__name__}")
    return d


def _check_int(i: int) -> int:
    if not isinstance(i, int):
        raise TypeError(f"Expected an int, got {type(i).__name__}")
    return i


class _ImmutableBase:
    __slots__ = ()

    # Immutable classes don't need to be copied
    @no_type_check
    def __copy__(self):
        return self

    @no_type_check
    def __deepcopy__(self, _):
        return self


if TYPE_CHECKING:
    from typing import final
else:

    def final(cls):

        def init_subclass_not_allowed(cls, **kwargs):  # pragma: no cover
            raise TypeError("Subclassing not allowed")

        cls.__init_subclass__ = init_subclass_not_allowed
        return cls


@final
class Duration(_ImmutableBase):
    """A signed, exact amount of elapsed time with nanosecond precision.

    Internally, a duration consists of whole seconds and a nanosecond part.
    The nanosecond part always has the same sign as the seconds
    (or one of them is zero), so that every duration has exactly one
    representation.

    Examples
    --------
    >>> d = Duration(hours=1, minutes=30)
    Duration(01:30:00)
    >>> d.in_minutes()
    90.0
    >>> Duration.new(-1, 500_000_000) == Duration(milliseconds=-500)
    True

    Note
    ----
    A shorter way to instantiate a duration is to use the helper functions
    :func:`~civiltime.hours`, :func:`~civiltime.minutes`, etc.
    """

    __slots__ = ("_secs", "_nanos")

    ZERO: ClassVar[Duration]
    """A duration of zero"""
    NANOSECOND: ClassVar[Duration]
    MICROSECOND: ClassVar[Duration]
    MILLISECOND: ClassVar[Duration]
    SECOND: ClassVar[Duration]
    MINUTE: ClassVar[Duration]
    HOUR: ClassVar[Duration]
    DAY: ClassVar[Duration]
    WEEK: ClassVar[Duration]
    MIN: ClassVar[Duration]
    """The minimum possible duration"""
    MAX: ClassVar[Duration]
    """The maximum possible duration"""

    def __init__(
        self,
        *,
        weeks: float = 0,
        days: float = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
    ) -> None:
        if not isinstance(nanoseconds, int):
            raise TypeError("nanoseconds must be an int")
        self._secs, self._nanos = _split_ns(
            _check_duration_ns(
                # Convert individual components to int
                # to avoid floating point errors
                _component_ns(weeks, NS_PER_WEEK)
                + _component_ns(days, NS_PER_DAY)
                + _component_ns(hours, NS_PER_HOUR)
                + _component_ns(minutes, NS_PER_MIN)
                + _component_ns(seconds, NS_PER_SEC)
                + _component_ns(milliseconds, NS_PER_MS)
                + _component_ns(microseconds, NS_PER_US)
                + nanoseconds
            )
        )

    @classmethod
    def new(cls, seconds: int, nanoseconds: int = 0, /) -> Duration:
        """Create from whole seconds and nanoseconds.
        The nanoseconds may be any value, and are normalized
        into the seconds.

        Example
        -------
        >>> Duration.new(1, 1_500_000_000)
        Duration(00:00:02.5)
        >>> Duration.new(-1, 500_000_000)
        Duration(-00:00:00.5)
        """
        if not (isinstance(seconds, int) and isinstance(nanoseconds, int)):
            raise TypeError("seconds and nanoseconds must be ints")
        return cls._from_nanos_checked(seconds * NS_PER_SEC + nanoseconds)

    @classmethod
    def from_seconds_f(cls, seconds: float, /) -> Duration:
        """Create from a (fractional) number of seconds.

        Note
        ----
        Floats can't represent all nanosecond values exactly,
        so the result may be off by a few nanoseconds.
        """
        return cls._from_nanos_checked(
            int(_check_finite(seconds) * NS_PER_SEC)
        )

    @property
    def _total_ns(self) -> int:
        return self._secs * NS_PER_SEC + self._nanos

    def whole_weeks(self) -> int:
        """The number of whole weeks, rounded toward zero"""
        return _div_trunc(self._secs, 7 * SECS_PER_DAY)

    def whole_days(self) -> int:
        """The number of whole days (of 24 hours), rounded toward zero"""
        return _div_trunc(self._secs, SECS_PER_DAY)

    def whole_hours(self) -> int:
        return _div_trunc(self._secs, 3_600)

    def whole_minutes(self) -> int:
        return _div_trunc(self._secs, 60)

    def whole_seconds(self) -> int:
        return self._secs

    def whole_milliseconds(self) -> int:
        return _div_trunc(self._total_ns, NS_PER_MS)

    def whole_microseconds(self) -> int:
        return _div_trunc(self._total_ns, NS_PER_US)

    def whole_nanoseconds(self) -> int:
        """The total size in nanoseconds. Exact."""
        return self._total_ns

    def subsec_milliseconds(self) -> int:
        """The fractional part in milliseconds, with the same sign
        as the whole duration

        Example
        -------
        >>> Duration(seconds=-1.4).subsec_milliseconds()
        -400
        """
        return _div_trunc(self._nanos, NS_PER_MS)

    def subsec_microseconds(self) -> int:
        return _div_trunc(self._nanos, NS_PER_US)

    def subsec_nanoseconds(self) -> int:
        return self._nanos

    def in_days(self) -> float:
        """The total size in days (of exactly 24 hours each).
        Lossy: a float can't represent every duration exactly."""
        return self._total_ns / NS_PER_DAY

    def in_hours(self) -> float:
        """The total size in hours. Lossy.

        Example
        -------
        >>> Duration(hours=1, minutes=30).in_hours()
        1.5
        """
        return self._total_ns / NS_PER_HOUR

    def in_minutes(self) -> float:
        """The total size in minutes. Lossy."""
        return self._total_ns / NS_PER_MIN

    def in_seconds(self) -> float:
        """The total size in seconds.

        Note
        ----
        This conversion is lossy. A float has 53 bits of precision,
        so durations longer than about 104 days lose nanosecond precision.
        Use :meth:`whole_nanoseconds` for an exact value.
        """
        return self._total_ns / NS_PER_SEC

    def in_hrs_mins_secs_nanos(self) -> tuple[int, int, int, int]:
        """Convert to a tuple of (hours, minutes, seconds, nanoseconds),
        all with the same sign as the duration.

        Example
        -------
        >>> d = Duration(hours=1, minutes=30, microseconds=5_000_090)
        >>> d.in_hrs_mins_secs_nanos()
        (1, 30, 5, 90_000)
        """
        hrs, mins, secs, ns = _hms_ns(abs(self._total_ns))
        return (
            (hrs, mins, secs, ns)
            if self._total_ns >= 0
            else (-hrs, -mins, -secs, -ns)
        )

    def is_zero(self) -> bool:
        return not (self._secs or self._nanos)

    def is_negative(self) -> bool:
        return self._secs < 0 or self._nanos < 0

    def is_positive(self) -> bool:
        return self._secs > 0 or self._nanos > 0

    def py_timedelta(self) -> _timedelta:
        """Convert to a :class:`~datetime.timedelta`

        Inverse of :meth:`from_py_timedelta`

        Note
        ----
        Nanoseconds are rounded to the nearest even microsecond.
        Raises :class:`OverflowError` if the duration exceeds
        the range of :class:`~datetime.timedelta`.
        """
        micros, rem = divmod(self._total_ns, NS_PER_US)
        # round half to even
        if rem > 500 or (rem == 500 and micros % 2):
            micros += 1
        return _timedelta(microseconds=micros)

    @classmethod
    def from_py_timedelta(cls, td: _timedelta, /) -> Duration:
        """Create from a :class:`~datetime.timedelta`

        Inverse of :meth:`py_timedelta`

        Example
        -------
        >>> Duration.from_py_timedelta(timedelta(seconds=5400))
        Duration(01:30:00)
        """
        if not isinstance(td, _timedelta):
            raise TypeError(f"Expected timedelta, got {type(td)!r}")
        return cls._from_nanos_unchecked(
            (td.days * SECS_PER_DAY + td.seconds) * NS_PER_SEC
            + td.microseconds * NS_PER_US
        )

    def format_common_iso(self) -> str:
        """Format as the *popular interpretation* of the ISO 8601
        duration format, using only hours, minutes, and seconds.

        Inverse of :meth:`parse_common_iso`.

        Example
        -------
        >>> Duration(hours=1, minutes=30).format_common_iso()
        'PT1H30M'
        """
        hrs, mins, secs, ns = _hms_ns(abs(self._total_ns))
        seconds = f"{secs}.{ns:09d}".rstrip("0") if ns else str(secs)
        return f"{self.is_negative() * '-'}PT" + (
            (
                f"{hrs}H" * bool(hrs)
                + f"{mins}M" * bool(mins)
                + f"{seconds}S" * bool(secs or ns)
            )
            or "0S"
        )

    @classmethod
    def parse_common_iso(cls, s: str, /) -> Duration:
        """Parse the *popular interpretation* of the ISO 8601 duration
        format. Only hours, minutes and (fractional) seconds are allowed.

        Inverse of :meth:`format_common_iso`

        Example
        -------
        >>> Duration.parse_common_iso("PT1H30M")
        Duration(01:30:00)
        """
        if (match := _match_duration(s)) is None or s.endswith("T"):
            parse_err(s)
        sign_str, hrs, mins, secs, frac = match.groups()
        nanos = (
            int(hrs or 0) * NS_PER_HOUR
            + int(mins or 0) * NS_PER_MIN
            + int(secs or 0) * NS_PER_SEC
            + parse_nanos(frac)
        )
        return cls._from_nanos_checked(-nanos if sign_str == "-" else nanos)

    def checked_add(self, other: Duration, /) -> Optional[Duration]:
        """Add two durations, returning None on overflow instead of raising"""
        return Duration._from_nanos_or_none(
            self._total_ns + _check_duration(other)._total_ns
        )

    def checked_sub(self, other: Duration, /) -> Optional[Duration]:
        """Subtract two durations, returning None on overflow"""
        return Duration._from_nanos_or_none(
            self._total_ns - _check_duration(other)._total_ns
        )

    def checked_mul(self, factor: int, /) -> Optional[Duration]:
        """Multiply by an integer, returning None on overflow"""
        return Duration._from_nanos_or_none(
            self._total_ns * _check_int(factor)
        )

    def checked_div(self, divisor: int, /) -> Optional[Duration]:
        """Divide by an integer (rounding toward zero),
        returning None on overflow or division by zero"""
        if _check_int(divisor) == 0:
            return None
        return Duration._from_nanos_or_none(
            _int_div_trunc(self._total_ns, divisor)
        )

    def saturating_add(self, other: Duration, /) -> Duration:
        """Add two durations, clamping to :attr:`MIN` or :attr:`MAX`
        instead of raising on overflow.

        Example
        -------
        >>> Duration.MAX.saturating_add(Duration.SECOND) == Duration.MAX
        True
        """
        return Duration._from_nanos_saturating(
            self._total_ns + _check_duration(other)._total_ns
        )

    def saturating_sub(self, other: Duration, /) -> Duration:
        return Duration._from_nanos_saturating(
            self._total_ns - _check_duration(other)._total_ns
        )

    def saturating_mul(self, factor: int, /) -> Duration:
        return Duration._from_nanos_saturating(
            self._total_ns * _check_int(factor)
        )

    def __add__(self, other: Duration) -> Duration:
        """Add two durations together

        Raises :class:`Overflow` if the result is out of range.

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d + Duration(minutes=30)
        Duration(02:00:00)
        """
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration._from_nanos_checked(self._total_ns + other._total_ns)

    def __sub__(self, other: Duration) -> Duration:
        """Subtract two durations

        Raises :class:`Overflow` if the result is out of range.
        """
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration._from_nanos_checked(self._total_ns - other._total_ns)

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d == Duration(minutes=90)
        True
        """
        if not isinstance(other, Duration):
            return NotImplemented
        return (self._secs, self._nanos) == (other._secs, other._nanos)

    def __hash__(self) -> int:
        return hash((self._secs, self._nanos))

    # Since the seconds and nanoseconds always share a sign,
    # comparing them as a tuple gives the same result as comparing
    # the total nanoseconds.
    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return (self._secs, self._nanos) < (other._secs, other._nanos)

    def __le__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return (self._secs, self._nanos) <= (other._secs, other._nanos)

    def __gt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return (self._secs, self._nanos) > (other._secs, other._nanos)

    def __ge__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return (self._secs, self._nanos) >= (other._secs, other._nanos)

    def __bool__(self) -> bool:
        """True if the value is non-zero

        Example
        -------
        >>> bool(Duration())
        False
        >>> bool(Duration(minutes=1))
        True
        """
        return not self.is_zero()

    def __mul__(self, other: float) -> Duration:
        """Multiply by a number

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d * 2.5
        Duration(03:45:00)
        """
        if isinstance(other, int):
            return Duration._from_nanos_checked(self._total_ns * other)
        elif isinstance(other, float):
            return Duration._from_nanos_checked(
                int(self._total_ns * _check_finite(other))
            )
        return NotImplemented

    def __rmul__(self, other: float) -> Duration:
        return self * other

    def __neg__(self) -> Duration:
        """Negate the value

        Raises :class:`Overflow` for :attr:`MIN`, which has no positive
        counterpart.

        Example
        -------
        >>> -Duration(hours=1, minutes=30)
        Duration(-01:30:00)
        """
        return Duration._from_nanos_checked(-self._total_ns)

    def __pos__(self) -> Duration:
        return self

    @overload
    def __truediv__(self, other: float) -> Duration: ...

    @overload
    def __truediv__(self, other: Duration) -> float: ...

    def __truediv__(self, other: float | Duration) -> Duration | float:
        """Divide by a number or another duration.
        Division by an int is exact (rounding toward zero).

        Example
        -------
        >>> d = Duration(hours=1, minutes=30)
        >>> d / 2.5
        Duration(00:36:00)
        >>> d / Duration(minutes=30)
        3.0
        """
        if isinstance(other, Duration):
            return self._total_ns / other._total_ns
        elif isinstance(other, int):
            return Duration._from_nanos_checked(
                _int_div_trunc(self._total_ns, other)
            )
        elif isinstance(other, float):
            return Duration._from_nanos_checked(
                int(self._total_ns / _check_finite(other))
            )
        return NotImplemented

    def __abs__(self) -> Duration:
        """The absolute value

        Raises :class:`Overflow` for :attr:`MIN`.
        """
        return Duration._from_nanos_checked(abs(self._total_ns))

    __str__ = format_common_iso

    def __repr__(self) -> str:
        hrs, mins, secs, ns = _hms_ns(abs(self._total_ns))
        return (
            f"Duration({'-' * self.is_negative()}"
            f"{hrs:02}:{mins:02}:{secs:02}"
            + f".{ns:0>9}".rstrip("0") * bool(ns)
            + ")"
        )

    @no_type_check
    def __reduce__(self):
        return _unpkl_duration, (pack("<qi", self._secs, self._nanos),)

    @classmethod
    def _from_nanos_unchecked(cls, ns: int) -> Duration:
        new = _object_new(cls)
        new._secs, new._nanos = _split_ns(ns)
        return new

    @classmethod
    def _from_nanos_checked(cls, ns: int) -> Duration:
        return cls._from_nanos_unchecked(_check_duration_ns(ns))

    @classmethod
    def _from_nanos_or_none(cls, ns: int) -> Optional[Duration]:
        if MIN_DURATION_NS <= ns <= MAX_DURATION_NS:
            return cls._from_nanos_unchecked(ns)
        return None

    @classmethod
    def _from_nanos_saturating(cls, ns: int) -> Duration:
        return cls._from_nanos_unchecked(
            min(max(ns, MIN_DURATION_NS), MAX_DURATION_NS)
        )

    def _subday_ns(self) -> int:
        """The part smaller than a day, with the sign of the duration"""
        return self._total_ns - self.whole_days() * NS_PER_DAY


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_duration(data: bytes) -> Duration:
    return Duration.new(*unpack("<qi", data))


def _component_ns(value: float, ns_per_unit: int) -> int:
    if isinstance(value, int):
        return value * ns_per_unit
    elif isinstance(value, float):
        return int(_check_finite(value) * ns_per_unit)
    raise TypeError(f"Expected int or float, got {type(value)!r}")


def _check_duration_ns(ns: int) -> int:
    if not MIN_DURATION_NS <= ns <= MAX_DURATION_NS:
        raise Overflow("Duration out of range")
    return ns


def _split_ns(ns: int) -> tuple[int, int]:
    secs, nanos = divmod(abs(ns), NS_PER_SEC)
    return (secs, nanos) if ns >= 0 else (-secs, -nanos)


def _int_div_trunc(ns: int, divisor: int) -> int:
    q = abs(ns) // abs(divisor)
    return q if (ns < 0) == (divisor < 0) else -q


def _hms_ns(abs_ns: int) -> tuple[int, int, int, int]:
    hrs, rem = divmod(abs_ns, NS_PER_HOUR)
    mins, rem = divmod(rem, NS_PER_MIN)
    secs, ns = divmod(rem, NS_PER_SEC)
    return hrs, mins, secs, ns


_match_duration = re.compile(
    r"([-+]?)PT(?:(\d{1,35})H)?(?:(\d{1,35})M)?"
    r"(?:(\d{1,35})(?:[.,](\d{1,9}))?S)?",
    re.ASCII,
).fullmatch

Duration.ZERO = Duration()
Duration.NANOSECOND = Duration(nanoseconds=1)
Duration.MICROSECOND = Duration(microseconds=1)
Duration.MILLISECOND = Duration(milliseconds=1)
Duration.SECOND = Duration(seconds=1)
Duration.MINUTE = Duration(minutes=1)
Duration.HOUR = Duration(hours=1)
Duration.DAY = Duration(days=1)
Duration.WEEK = Duration(weeks=1)
Duration.MIN = Duration._from_nanos_unchecked(MIN_DURATION_NS)
Duration.MAX = Duration._from_nanos_unchecked(MAX_DURATION_NS)


@final
class Date(_ImmutableBase):
    """A date in the proleptic Gregorian calendar, without a time component.

    Years from -999,999 to 999,999 are supported, including year zero.

    Example
    -------
    >>> d = Date(2021, 1, 2)
    Date(2021-01-02)
    >>> Date(2021, 2, 29)
    Traceback (most recent call last):
      ...
    ComponentRange: day must be in the range [1, 28] for the given month
    and year, got 29
    """

    __slots__ = ("_year", "_ordinal")

    MIN: ClassVar[Date]
    """The minimum possible date"""
    MAX: ClassVar[Date]
    """The maximum possible date"""
    UNIX_EPOCH: ClassVar[Date]
    """1970-01-01"""

    def __init__(self, year: int, month: int, day: int) -> None:
        year = _check_year(year)
        month = _check_range("month", month, 1, 12)
        day = _check_range(
            "day",
            day,
            1,
            days_in_month(year, month),
            "for the given month and year",
        )
        self._year = year
        self._ordinal = ordinal_from_ymd(year, month, day)

    @classmethod
    def from_ordinal_date(cls, year: int, ordinal: int) -> Date:
        """Create from the year and the day of the year

        Example
        -------
        >>> Date.from_ordinal_date(2019, 365)
        Date(2019-12-31)
        """
        year = _check_year(year)
        return cls._from_ordinal_unchecked(
            year,
            _check_range(
                "ordinal",
                ordinal,
                1,
                days_in_year(year),
                "for the given year",
            ),
        )

    @classmethod
    def from_iso_week_date(
        cls, year: int, week: int, weekday: Weekday
    ) -> Date:
        """Create from the ISO year, week number, and weekday

        Example
        -------
        >>> Date.from_iso_week_date(2020, 53, Weekday.FRIDAY)
        Date(2021-01-01)
        """
        year = _check_year(year)
        week = _check_range(
            "week", week, 1, weeks_in_year(year), "for the given year"
        )
        if not isinstance(weekday, Weekday):
            raise TypeError(f"Expected Weekday, got {type(weekday)!r}")
        y, ordinal = ordinal_from_iso_week(year, week, weekday.value)
        # At the very edges of the range, the date may fall outside it
        if not MIN_YEAR <= y <= MAX_YEAR:
            raise ComponentRange("year", MIN_YEAR, MAX_YEAR, y)
        return cls._from_ordinal_unchecked(y, ordinal)

    @classmethod
    def from_julian_day(cls, julian_day: int, /) -> Date:
        """Create from the Julian day number: the number of days since
        November 24th, 4714 BC (-4713-11-24) in the proleptic Gregorian
        calendar.

        Inverse of :meth:`to_julian_day`.

        Example
        -------
        >>> Date.from_julian_day(0)
        Date(-4713-11-24)
        >>> Date.from_julian_day(2_451_545)
        Date(2000-01-01)
        """
        return cls._from_julian_day_unchecked(
            _check_range(
                "julian_day", julian_day, _MIN_JULIAN_DAY, _MAX_JULIAN_DAY
            )
        )

    @property
    def year(self) -> int:
        return self._year

    @property
    def month(self) -> Month:
        return Month(ymd_from_ordinal(self._year, self._ordinal)[0])

    @property
    def day(self) -> int:
        return ymd_from_ordinal(self._year, self._ordinal)[1]

    @property
    def ordinal(self) -> int:
        """The day of the year, starting at 1"""
        return self._ordinal

    def weekday(self) -> Weekday:
        """The day of the week

        Example
        -------
        >>> Date(2021, 1, 2).weekday()
        Weekday.SATURDAY
        >>> Weekday.SATURDAY.value
        6  # the ISO value
        """
        return Weekday(weekday_number(self.to_julian_day()))

    def is_leap_year(self) -> bool:
        return is_leap(self._year)

    def iso_week(self) -> int:
        """The ISO 8601 week number, from 1 to 53

        Example
        -------
        >>> Date(2020, 12, 31).iso_week()
        53
        >>> Date(2021, 1, 1).iso_week()
        53
        """
        return self.to_iso_week_date()[1]

    def sunday_based_week(self) -> int:
        """The week number (0-53) where week 1 starts on the
        year's first Sunday"""
        return (
            self._ordinal - self.weekday().number_days_from_sunday() + 6
        ) // 7

    def monday_based_week(self) -> int:
        """The week number (0-53) where week 1 starts on the
        year's first Monday"""
        return (
            self._ordinal - self.weekday().number_days_from_monday() + 6
        ) // 7

    def to_calendar_date(self) -> tuple[int, Month, int]:
        """Get the year, month, and day

        Example
        -------
        >>> Date(2019, 1, 1).to_calendar_date()
        (2019, Month.JANUARY, 1)
        """
        month, day = ymd_from_ordinal(self._year, self._ordinal)
        return self._year, Month(month), day

    def to_ordinal_date(self) -> tuple[int, int]:
        """Get the year and the day of the year"""
        return self._year, self._ordinal

    def to_iso_week_date(self) -> tuple[int, int, Weekday]:
        """Get the ISO year, week number, and weekday.
        Note that the ISO year may differ from the calendar year
        around New Year.

        Example
        -------
        >>> Date(2021, 1, 1).to_iso_week_date()
        (2020, 53, Weekday.FRIDAY)
        """
        weekday = self.weekday()
        return (
            *iso_year_week(self._year, self._ordinal, weekday.value),
            weekday,
        )

    def to_julian_day(self) -> int:
        """The Julian day number of this date. See :meth:`from_julian_day`.

        Example
        -------
        >>> Date(2000, 1, 1).to_julian_day()
        2451545
        """
        return julian_day(self._year, self._ordinal)

    def next_day(self) -> Optional[Date]:
        """The following day, or None if this is :attr:`MAX`"""
        if self._ordinal < days_in_year(self._year):
            return self._from_ordinal_unchecked(self._year, self._ordinal + 1)
        elif self._year == MAX_YEAR:
            return None
        return self._from_ordinal_unchecked(self._year + 1, 1)

    def previous_day(self) -> Optional[Date]:
        """The preceding day, or None if this is :attr:`MIN`"""
        if self._ordinal > 1:
            return self._from_ordinal_unchecked(self._year, self._ordinal - 1)
        elif self._year == MIN_YEAR:
            return None
        return self._from_ordinal_unchecked(
            self._year - 1, days_in_year(self._year - 1)
        )

    def next_occurrence(self, weekday: Weekday, /) -> Date:
        """The first date strictly after this one that falls
        on the given weekday

        Example
        -------
        >>> Date(2023, 6, 28).next_occurrence(Weekday.MONDAY)
        Date(2023-07-03)
        """
        return self.nth_next_occurrence(weekday, 1)

    def prev_occurrence(self, weekday: Weekday, /) -> Date:
        """The last date strictly before this one that falls
        on the given weekday"""
        return self.nth_prev_occurrence(weekday, 1)

    def nth_next_occurrence(self, weekday: Weekday, n: int, /) -> Date:
        """The n-th date strictly after this one that falls
        on the given weekday. ``n`` must be positive."""
        if n < 1:
            raise ValueError("n must be at least 1")
        ahead = (weekday.value - self.weekday().value) % 7 or 7
        return self._add_days(ahead + 7 * (n - 1))

    def nth_prev_occurrence(self, weekday: Weekday, n: int, /) -> Date:
        if n < 1:
            raise ValueError("n must be at least 1")
        behind = (self.weekday().value - weekday.value) % 7 or 7
        return self._add_days(-behind - 7 * (n - 1))

    def replace(
        self,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        day: Optional[int] = None,
    ) -> Date:
        """Create a new instance with the given fields replaced.
        Raises :class:`ComponentRange` if the result doesn't exist.

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.replace(day=4)
        Date(2021-01-04)
        >>> Date(2020, 2, 29).replace(year=2021)
        Traceback (most recent call last):
          ...
        ComponentRange: day must be in the range [1, 28] ...
        """
        y, m, d = self.to_calendar_date()
        return Date(
            y if year is None else year,
            m if month is None else month,
            d if day is None else day,
        )

    def replace_ordinal(self, ordinal: int, /) -> Date:
        """Create a new instance with the day of the year replaced"""
        return Date.from_ordinal_date(self._year, ordinal)

    def add(
        self, *, years: int = 0, months: int = 0, weeks: int = 0, days: int = 0
    ) -> Date:
        """Add calendar units to a date.

        Years and months are added first. If the resulting month is
        shorter than the original day of the month, the day is clamped
        to the last day of that month. Weeks and days are added after.

        Raises :class:`Overflow` if the result is out of range.

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.add(years=1, months=2, days=3)
        Date(2022-03-05)
        >>> Date(2021, 1, 31).add(months=1)
        Date(2021-02-28)
        >>> Date(2020, 2, 29).add(years=1)
        Date(2021-02-28)
        """
        year, month, day = self.to_calendar_date()
        if years or months:
            year, month, day = add_months(
                year, month, day, years * 12 + months
            )
        return Date._from_julian_day_checked(
            julian_day(year, ordinal_from_ymd(year, month, day))
            + weeks * 7
            + days
        )

    def subtract(
        self, *, years: int = 0, months: int = 0, weeks: int = 0, days: int = 0
    ) -> Date:
        """Subtract calendar units from a date. Inverse of :meth:`add`,
        with the same clamping behavior.

        Example
        -------
        >>> Date(2021, 3, 31).subtract(months=1)
        Date(2021-02-28)
        """
        return self.add(years=-years, months=-months, weeks=-weeks, days=-days)

    def days_until(self, other: Date, /) -> int:
        """Calculate the number of days from this date to another date.
        If the other date is before this date, the result is negative.

        Example
        -------
        >>> Date(2021, 1, 2).days_until(Date(2021, 1, 5))
        3
        """
        return other.to_julian_day() - self.to_julian_day()

    def days_since(self, other: Date, /) -> int:
        """Calculate the number of days this day is after another date.
        If the other date is after this date, the result is negative.
        """
        return self.to_julian_day() - other.to_julian_day()

    def checked_add(self, duration: Duration, /) -> Optional[Date]:
        """Add the whole days of a duration, returning None if the
        result is out of range"""
        return Date._from_julian_day_or_none(
            self.to_julian_day() + _check_duration(duration).whole_days()
        )

    def checked_sub(self, duration: Duration, /) -> Optional[Date]:
        return Date._from_julian_day_or_none(
            self.to_julian_day() - _check_duration(duration).whole_days()
        )

    def saturating_add(self, duration: Duration, /) -> Date:
        """Add the whole days of a duration, clamping to :attr:`MIN`
        or :attr:`MAX` if the result is out of range"""
        return self.checked_add(duration) or (
            Date.MIN if duration.is_negative() else Date.MAX
        )

    def saturating_sub(self, duration: Duration, /) -> Date:
        return self.checked_sub(duration) or (
            Date.MAX if duration.is_negative() else Date.MIN
        )

    def at(self, t: Time, /) -> PrimitiveDateTime:
        """Combine a date with a time to create a datetime

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d.at(Time(12, 30))
        PrimitiveDateTime(2021-01-02 12:30:00)

        You can use :meth:`~PrimitiveDateTime.assume_offset`
        to make the result an absolute instant.
        """
        if not isinstance(t, Time):
            raise TypeError(f"Expected Time, got {type(t)!r}")
        return PrimitiveDateTime._from_parts(self, t)

    def midnight(self) -> PrimitiveDateTime:
        """The start of this day as a datetime"""
        return PrimitiveDateTime._from_parts(self, Time.MIDNIGHT)

    def py_date(self) -> _date:
        """Convert to a standard library :class:`~datetime.date`

        Raises :class:`ValueError` for years outside 1-9999,
        which the standard library doesn't support.
        """
        return _date(*self.to_calendar_date())

    @classmethod
    def from_py_date(cls, d: _date, /) -> Date:
        """Create from a :class:`~datetime.date`

        Example
        -------
        >>> Date.from_py_date(date(2021, 1, 2))
        Date(2021-01-02)
        """
        if not isinstance(d, _date):
            raise TypeError(f"Expected date, got {type(d)!r}")
        return cls._from_ordinal_unchecked(d.year, d.timetuple().tm_yday)

    def format_common_iso(self) -> str:
        """Format as the common ISO 8601 date format.
        Years outside 0-9999 are prefixed with a sign.

        Inverse of :meth:`parse_common_iso`.

        Example
        -------
        >>> Date(2021, 1, 2).format_common_iso()
        '2021-01-02'
        >>> Date(-1, 3, 4).format_common_iso()
        '-0001-03-04'
        """
        year, month, day = self.to_calendar_date()
        if 0 <= year <= 9999:
            return f"{year:04d}-{month:02d}-{day:02d}"
        return f"{year:+05d}-{month:02d}-{day:02d}"

    @classmethod
    def parse_common_iso(cls, s: str, /) -> Date:
        """Create from the common ISO 8601 date format ``YYYY-MM-DD``.
        Years outside 0-9999 must have a sign, e.g. ``+10000-01-01``.

        Inverse of :meth:`format_common_iso`

        Example
        -------
        >>> Date.parse_common_iso("2021-01-02")
        Date(2021-01-02)
        """
        return cls(*date_from_iso(s))

    def _add_days(self, days: int) -> Date:
        return Date._from_julian_day_checked(self.to_julian_day() + days)

    def __add__(self, d: Duration) -> Date:
        """Add the whole days of a duration to a date.

        Any part of the duration smaller than a day is ignored.
        Use :class:`PrimitiveDateTime` for precise arithmetic.
        Raises :class:`Overflow` if the result is out of range.

        Example
        -------
        >>> Date(2020, 12, 31) + days(2)
        Date(2021-01-02)
        >>> Date(2020, 12, 31) + hours(47)
        Date(2021-01-01)
        """
        if not isinstance(d, Duration):
            return NotImplemented
        return self._add_days(d.whole_days())

    @overload
    def __sub__(self, d: Duration) -> Date: ...

    @overload
    def __sub__(self, d: Date) -> Duration: ...

    def __sub__(self, d: Duration | Date) -> Date | Duration:
        """Subtract a duration from a date, or subtract two dates

        Subtracting a duration only uses its whole days,
        like :meth:`__add__`. The difference between two dates
        is a duration of whole days.

        >>> Date(2021, 1, 2) - Date(2020, 12, 26)
        Duration(168:00:00)
        """
        if isinstance(d, Duration):
            return self._add_days(-d.whole_days())
        elif isinstance(d, Date):
            return Duration._from_nanos_unchecked(
                self.days_since(d) * NS_PER_DAY
            )
        return NotImplemented

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"Date({self})"

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------
        >>> d = Date(2021, 1, 2)
        >>> d == Date(2021, 1, 2)
        True
        >>> d == Date(2021, 1, 3)
        False
        """
        if not isinstance(other, Date):
            return NotImplemented
        return (self._year, self._ordinal) == (other._year, other._ordinal)

    def __hash__(self) -> int:
        return hash((self._year, self._ordinal))

    def __lt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return (self._year, self._ordinal) < (other._year, other._ordinal)

    def __le__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return (self._year, self._ordinal) <= (other._year, other._ordinal)

    def __gt__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return (self._year, self._ordinal) > (other._year, other._ordinal)

    def __ge__(self, other: Date) -> bool:
        if not isinstance(other, Date):
            return NotImplemented
        return (self._year, self._ordinal) >= (other._year, other._ordinal)

    @classmethod
    def _from_ordinal_unchecked(cls, year: int, ordinal: int, /) -> Date:
        self = _object_new(cls)
        self._year = year
        self._ordinal = ordinal
        return self

    @classmethod
    def _from_julian_day_unchecked(cls, jd: int, /) -> Date:
        return cls._from_ordinal_unchecked(*from_julian_day(jd))

    @classmethod
    def _from_julian_day_checked(cls, jd: int, /) -> Date:
        if not _MIN_JULIAN_DAY <= jd <= _MAX_JULIAN_DAY:
            raise Overflow("Date out of range")
        return cls._from_julian_day_unchecked(jd)

    @classmethod
    def _from_julian_day_or_none(cls, jd: int, /) -> Optional[Date]:
        if _MIN_JULIAN_DAY <= jd <= _MAX_JULIAN_DAY:
            return cls._from_julian_day_unchecked(jd)
        return None

    @no_type_check
    def __reduce__(self):
        return _unpkl_date, (pack("<iH", self._year, self._ordinal),)


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_date(data: bytes) -> Date:
    return Date.from_ordinal_date(*unpack("<iH", data))


Date.MIN = Date._from_ordinal_unchecked(MIN_YEAR, 1)
Date.MAX = Date._from_ordinal_unchecked(MAX_YEAR, days_in_year(MAX_YEAR))
Date.UNIX_EPOCH = Date(1970, 1, 1)


@final
class Time(_ImmutableBase):
    """Time of day without a date component, with nanosecond precision.
    Leap seconds are not represented.

    Example
    -------
    >>> t = Time(12, 30, 0)
    Time(12:30:00)
    """

    __slots__ = ("_hour", "_minute", "_second", "_nanos")

    MIDNIGHT: ClassVar[Time]
    """The time at midnight"""
    NOON: ClassVar[Time]
    """The time at noon"""
    MAX: ClassVar[Time]
    """The maximum time, just before midnight"""

    def __init__(
        self,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> None:
        self._hour = _check_range("hour", hour, 0, 23)
        self._minute = _check_range("minute", minute, 0, 59)
        self._second = _check_range("second", second, 0, 59)
        self._nanos = _check_range("nanosecond", nanosecond, 0, 999_999_999)

    @property
    def hour(self) -> int:
        return self._hour

    @property
    def minute(self) -> int:
        return self._minute

    @property
    def second(self) -> int:
        return self._second

    @property
    def millisecond(self) -> int:
        return self._nanos // NS_PER_MS

    @property
    def microsecond(self) -> int:
        return self._nanos // NS_PER_US

    @property
    def nanosecond(self) -> int:
        return self._nanos

    def as_hms(self) -> tuple[int, int, int]:
        return self._hour, self._minute, self._second

    def as_hms_nano(self) -> tuple[int, int, int, int]:
        return self._hour, self._minute, self._second, self._nanos

    def on(self, d: Date, /) -> PrimitiveDateTime:
        """Combine a time with a date to create a datetime

        Example
        -------
        >>> t = Time(12, 30)
        >>> t.on(Date(2021, 1, 2))
        PrimitiveDateTime(2021-01-02 12:30:00)
        """
        if not isinstance(d, Date):
            raise TypeError(f"Expected Date, got {type(d)!r}")
        return PrimitiveDateTime._from_parts(d, self)

    def adjusting_add(self, d: Duration, /) -> tuple[int, Time]:
        """Add a duration, wrapping around midnight.

        Only the part of the duration smaller than a day is used.
        Along with the new time, the day carry is returned:
        1 if midnight was passed going forward, -1 if it was passed
        going backward, 0 otherwise.

        Example
        -------
        >>> Time(23, 59, 59).adjusting_add(seconds(2))
        (1, Time(00:00:01))
        >>> Time(12).adjusting_add(hours(-1))
        (0, Time(11:00:00))
        """
        return self._adjust(d._subday_ns())

    def adjusting_sub(self, d: Duration, /) -> tuple[int, Time]:
        """Subtract a duration, wrapping around midnight.
        Like :meth:`adjusting_add`, the day carry is returned as well.

        Example
        -------
        >>> Time(0, 0, 0).adjusting_sub(seconds(1))
        (-1, Time(23:59:59))
        """
        return self._adjust(-d._subday_ns())

    def _adjust(self, ns: int) -> tuple[int, Time]:
        new = self._ns_of_day() + ns
        return (new >= NS_PER_DAY) - (new < 0), Time._from_ns_of_day(
            new % NS_PER_DAY
        )

    def replace(
        self,
        *,
        hour: Optional[int] = None,
        minute: Optional[int] = None,
        second: Optional[int] = None,
        nanosecond: Optional[int] = None,
    ) -> Time:
        """Create a new instance with the given fields replaced

        Example
        -------
        >>> t = Time(12, 30, 0)
        >>> t.replace(minute=3, nanosecond=4_000)
        Time(12:03:00.000004)
        """
        return Time(
            self._hour if hour is None else hour,
            self._minute if minute is None else minute,
            self._second if second is None else second,
            nanosecond=self._nanos if nanosecond is None else nanosecond,
        )

    def py_time(self) -> _time:
        """Convert to a standard library :class:`~datetime.time`

        Note
        ----
        Nanoseconds are truncated to microseconds.
        """
        return _time(
            self._hour, self._minute, self._second, self._nanos // NS_PER_US
        )

    @classmethod
    def from_py_time(cls, t: _time, /) -> Time:
        """Create from a :class:`~datetime.time`

        Example
        -------
        >>> Time.from_py_time(time(12, 30, 0))
        Time(12:30:00)

        `fold` and `tzinfo` are ignored.
        """
        if not isinstance(t, _time):
            raise TypeError(f"Expected datetime.time, got {type(t)!r}")
        return cls._from_fields_unchecked(
            t.hour, t.minute, t.second, t.microsecond * NS_PER_US
        )

    def format_common_iso(self) -> str:
        """Format as the common ISO 8601 time format.

        Inverse of :meth:`parse_common_iso`.

        Example
        -------
        >>> Time(12, 30, 0).format_common_iso()
        '12:30:00'
        >>> Time(12, 30, 0, nanosecond=5_000).format_common_iso()
        '12:30:00.000005'
        """
        return f"{self._hour:02d}:{self._minute:02d}:{self._second:02d}" + (
            f".{self._nanos:09d}".rstrip("0") * bool(self._nanos)
        )

    @classmethod
    def parse_common_iso(cls, s: str, /) -> Time:
        """Create from the common ISO 8601 time format ``HH:MM:SS``.
        Does not accept more "exotic" ISO 8601 formats.

        Inverse of :meth:`format_common_iso`

        Example
        -------
        >>> Time.parse_common_iso("12:30:00")
        Time(12:30:00)
        """
        hour, minute, second, nanos = time_from_iso(s)
        return cls(hour, minute, second, nanosecond=nanos)

    def _ns_of_day(self) -> int:
        return (
            self._hour * NS_PER_HOUR
            + self._minute * NS_PER_MIN
            + self._second * NS_PER_SEC
            + self._nanos
        )

    @classmethod
    def _from_ns_of_day(cls, ns: int, /) -> Time:
        hour, rem = divmod(ns, NS_PER_HOUR)
        minute, rem = divmod(rem, NS_PER_MIN)
        second, nanos = divmod(rem, NS_PER_SEC)
        return cls._from_fields_unchecked(hour, minute, second, nanos)

    @classmethod
    def _from_fields_unchecked(
        cls, hour: int, minute: int, second: int, nanos: int, /
    ) -> Time:
        self = _object_new(cls)
        self._hour = hour
        self._minute = minute
        self._second = second
        self._nanos = nanos
        return self

    def __add__(self, d: Duration) -> Time:
        """Add a duration, wrapping around midnight.
        See :meth:`adjusting_add` to also get the day carry.

        Example
        -------
        >>> Time(23) + hours(2)
        Time(01:00:00)
        """
        if not isinstance(d, Duration):
            return NotImplemented
        return self.adjusting_add(d)[1]

    @overload
    def __sub__(self, other: Duration) -> Time: ...

    @overload
    def __sub__(self, other: Time) -> Duration: ...

    def __sub__(self, other: Duration | Time) -> Time | Duration:
        """Subtract a duration (wrapping around midnight),
        or get the duration between two times

        Example
        -------
        >>> Time(1) - hours(2)
        Time(23:00:00)
        >>> Time(1) - Time(3)
        Duration(-02:00:00)
        """
        if isinstance(other, Duration):
            return self.adjusting_sub(other)[1]
        elif isinstance(other, Time):
            return Duration._from_nanos_unchecked(
                self._ns_of_day() - other._ns_of_day()
            )
        return NotImplemented

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"Time({self})"

    def __eq__(self, other: object) -> bool:
        """Compare for equality

        Example
        -------
        >>> t = Time(12, 30, 0)
        >>> t == Time(12, 30, 0)
        True
        >>> t == Time(12, 30, 1)
        False
        """
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_hms_nano() == other.as_hms_nano()

    def __hash__(self) -> int:
        return hash(self.as_hms_nano())

    def __lt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_hms_nano() < other.as_hms_nano()

    def __le__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_hms_nano() <= other.as_hms_nano()

    def __gt__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_hms_nano() > other.as_hms_nano()

    def __ge__(self, other: Time) -> bool:
        if not isinstance(other, Time):
            return NotImplemented
        return self.as_hms_nano() >= other.as_hms_nano()

    @no_type_check
    def __reduce__(self):
        return (
            _unpkl_time,
            (pack("<BBBI", *self.as_hms_nano()),),
        )


# A separate unpickling function allows us to make backwards-compatible changes
# to the pickling format in the future
@no_type_check
def _unpkl_time(data: bytes) -> Time:
    *args, nanos = unpack("<BBBI", data)
    return Time(*args, nanosecond=nanos)


Time.MIDNIGHT = Time()
Time.NOON = Time(12)
Time.MAX = Time(23, 59, 59, nanosecond=999_999_999)


@final
class UtcOffset(_ImmutableBase):
    """A fixed offset from UTC, with second precision.

    The hours, minutes, and seconds must all have the same sign
    (or be zero).

    Example
    -------
    >>> UtcOffset(5, 30)
    UtcOffset(+05:30)
    >>> UtcOffset(-3, -30)
    UtcOffset(-03:30)
    >>> UtcOffset(-3, 30)
    Traceback (most recent call last):
      ...
    ComponentRange: minutes must be in the range [-59, 0] ...
    """

    __slots__ = ("_secs",)

    UTC: ClassVar[UtcOffset]
    """The offset of UTC itself: zero"""

    def __init__(self, hours: int = 0, minutes: int = 0, seconds: int = 0):
        hours = _check_range("hours", hours, -23, 23)
        minutes = _check_range("minutes", minutes, *_signed_bounds(hours))
        seconds = _check_range(
            "seconds", seconds, *_signed_bounds(hours or minutes)
        )
        self._secs = hours * 3_600 + minutes * 60 + seconds

    @classmethod
    def from_whole_seconds(cls, seconds: int, /) -> UtcOffset:
        """Create from the total number of seconds

        Example
        -------
        >>> UtcOffset.from_whole_seconds(-9_000)
        UtcOffset(-02:30)
        """
        return cls._from_secs_unchecked(
            _check_range("seconds", seconds, -86_399, 86_399)
        )

    @classmethod
    def local_offset_at(cls, dt: OffsetDateTime, /) -> UtcOffset:
        """The UTC offset of the system timezone at the given moment.

        Raises :class:`IndeterminateOffset` if the platform
        can't determine it.
        """
        if (secs := local_offset_seconds(dt.unix_timestamp())) is None:
            raise IndeterminateOffset(
                f"Could not determine the local offset at {dt}"
            )
        return cls._from_secs_unchecked(secs)

    @classmethod
    def current_local_offset(cls) -> UtcOffset:
        """The current UTC offset of the system timezone.

        Raises :class:`IndeterminateOffset` if the platform
        can't determine it.
        """
        return cls.local_offset_at(OffsetDateTime.now_utc())

    def whole_seconds(self) -> int:
        return self._secs

    def whole_minutes(self) -> int:
        return _div_trunc(self._secs, 60)

    def whole_hours(self) -> int:
        return _div_trunc(self._secs, 3_600)

    def minutes_past_hour(self) -> int:
        """The minutes component, with the sign of the offset"""
        return self.whole_minutes() - self.whole_hours() * 60

    def seconds_past_minute(self) -> int:
        """The seconds component, with the sign of the offset"""
        return self._secs - self.whole_minutes() * 60

    def as_hms(self) -> tuple[int, int, int]:
        """The hours, minutes, and seconds, all with the same sign

        Example
        -------
        >>> UtcOffset(-1, -2, -3).as_hms()
        (-1, -2, -3)
        """
        return (
            self.whole_hours(),
            self.minutes_past_hour(),
            self.seconds_past_minute(),
        )

    def is_utc(self) -> bool:
        return self._secs == 0

    def is_positive(self) -> bool:
        return self._secs > 0

    def is_negative(self) -> bool:
        return self._secs < 0

    def format_common_iso(self) -> str:
        """Format as ``±HH:MM``, or ``±HH:MM:SS`` if there are seconds

        Example
        -------
        >>> UtcOffset(-3, -30).format_common_iso()
        '-03:30'
        """
        hours, minutes, seconds = (abs(x) for x in self.as_hms())
        return (
            f"{'-' if self._secs < 0 else '+'}{hours:02d}:{minutes:02d}"
            + f":{seconds:02d}" * bool(seconds)
        )

    @classmethod
    def parse_common_iso(cls, s: str, /) -> UtcOffset:
        """Parse an offset such as ``+05:30``, ``-0800``, ``+01``, or ``Z``

        Example
        -------
        >>> UtcOffset.parse_common_iso("+05:30")
        UtcOffset(+05:30)
        """
        if not s.isascii():
            parse_err(s)
        return cls(*offset_from_iso(s))

    def __neg__(self) -> UtcOffset:
        return UtcOffset._from_secs_unchecked(-self._secs)

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"UtcOffset({self})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UtcOffset):
            return NotImplemented
        return self._secs == other._secs

    def __hash__(self) -> int:
        return hash(self._secs)

    def __lt__(self, other: UtcOffset) -> bool:
        if not isinstance(other, UtcOffset):
            return NotImplemented
        return self._secs < other._secs

    def __le__(self, other: UtcOffset) -> bool:
        if not isinstance(other, UtcOffset):
            return NotImplemented
        return self._secs <= other._secs

    def __gt__(self, other: UtcOffset) -> bool:
        if not isinstance(other, UtcOffset):
            return NotImplemented
        return self._secs > other._secs

    def __ge__(self, other: UtcOffset) -> bool:
        if not isinstance(other, UtcOffset):
            return NotImplemented
        return self._secs >= other._secs

    @classmethod
    def _from_secs_unchecked(cls, secs: int, /) -> UtcOffset:
        self = _object_new(cls)
        self._secs = secs
        return self

    @no_type_check
    def __reduce__(self):
        return _unpkl_utc_offset, (pack("<i", self._secs),)


@no_type_check
def _unpkl_utc_offset(data: bytes) -> UtcOffset:
    return UtcOffset.from_whole_seconds(*unpack("<i", data))


def _signed_bounds(larger: int) -> tuple[int, int, str | None]:
    # The bounds of a smaller offset component,
    # given the (first nonzero) larger component
    if larger > 0:
        return 0, 59, "when the larger components are positive"
    elif larger < 0:
        return -59, 0, "when the larger components are negative"
    return -59, 59, None


UtcOffset.UTC = UtcOffset()


def _load_offset(offset: int | UtcOffset, /) -> UtcOffset:
    if isinstance(offset, UtcOffset):
        return offset
    elif isinstance(offset, int):
        return UtcOffset(offset)
    raise TypeError("offset must be an int (hours) or UtcOffset")


@final
class PrimitiveDateTime(_ImmutableBase):
    """A date and time of day, without a UTC offset.

    It doesn't represent an absolute moment in time on its own.
    Use :meth:`assume_offset` to attach an offset.

    Example
    -------
    >>> PrimitiveDateTime(2021, 1, 2, 3, 4, 5)
    PrimitiveDateTime(2021-01-02 03:04:05)
    """

    __slots__ = ("_date", "_time")

    MIN: ClassVar[PrimitiveDateTime]
    """The minimum possible datetime"""
    MAX: ClassVar[PrimitiveDateTime]
    """The maximum possible datetime"""

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
    ) -> None:
        self._date = Date(year, month, day)
        self._time = Time(hour, minute, second, nanosecond=nanosecond)

    @property
    def year(self) -> int:
        return self._date._year

    @property
    def month(self) -> Month:
        return self._date.month

    @property
    def day(self) -> int:
        return self._date.day

    @property
    def hour(self) -> int:
        return self._time._hour

    @property
    def minute(self) -> int:
        return self._time._minute

    @property
    def second(self) -> int:
        return self._time._second

    @property
    def nanosecond(self) -> int:
        return self._time._nanos

    def date(self) -> Date:
        """The date part of the datetime"""
        return self._date

    def time(self) -> Time:
        """The time-of-day part of the datetime"""
        return self._time

    def assume_offset(self, offset: int | UtcOffset, /) -> OffsetDateTime:
        """Attach an offset, interpreting this datetime as the local
        time at that offset

        Example
        -------
        >>> PrimitiveDateTime(2020, 8, 15, 23, 12).assume_offset(2)
        OffsetDateTime(2020-08-15 23:12:00+02:00)
        """
        return OffsetDateTime._from_parts(self, _load_offset(offset))

    def assume_utc(self) -> OffsetDateTime:
        return OffsetDateTime._from_parts(self, UtcOffset.UTC)

    def replace(self, **kwargs: Any) -> PrimitiveDateTime:
        """Construct a new instance with the given fields replaced.

        Arguments are the same as the constructor,
        but only keyword arguments are allowed.

        Example
        -------
        >>> d = PrimitiveDateTime(2020, 8, 15, 23, 12)
        >>> d.replace(year=2021)
        PrimitiveDateTime(2021-08-15 23:12:00)
        """
        return PrimitiveDateTime(**_replace_fields(self, kwargs))

    def replace_date(self, d: Date, /) -> PrimitiveDateTime:
        if not isinstance(d, Date):
            raise TypeError(f"Expected Date, got {type(d)!r}")
        return PrimitiveDateTime._from_parts(d, self._time)

    def replace_time(self, t: Time, /) -> PrimitiveDateTime:
        if not isinstance(t, Time):
            raise TypeError(f"Expected Time, got {type(t)!r}")
        return PrimitiveDateTime._from_parts(self._date, t)

    def add(
        self,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
    ) -> PrimitiveDateTime:
        """Add date and time units to this datetime.

        The calendar units (years, months, weeks, days) are added first,
        clamping the day of the month like :meth:`Date.add`.
        The exact time units are added afterwards.

        Example
        -------
        >>> d = PrimitiveDateTime(2020, 1, 31, 23)
        >>> d.add(months=1, hours=2)
        PrimitiveDateTime(2020-03-01 01:00:00)
        """
        return self._date.add(
            years=years, months=months, weeks=weeks, days=days
        ).at(self._time) + Duration(
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            milliseconds=milliseconds,
            microseconds=microseconds,
            nanoseconds=nanoseconds,
        )

    def subtract(
        self,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: float = 0,
        minutes: float = 0,
        seconds: float = 0,
        milliseconds: float = 0,
        microseconds: float = 0,
        nanoseconds: int = 0,
    ) -> PrimitiveDateTime:
        """Inverse of :meth:`add`."""
        return self._date.subtract(
            years=years, months=months, weeks=weeks, days=days
        ).at(self._time) - Duration(
            hours=hours,
            minutes=minutes,
            seconds=seconds,
            milliseconds=milliseconds,
            microseconds=microseconds,
            nanoseconds=nanoseconds,
        )

    def _shifted(self, d: Duration, sign: int, /) -> tuple[int, Time]:
        # The part smaller than a day goes to the time, which reports
        # whether it crossed midnight. The whole days and the carry
        # go to the date.
        carry, t = self._time._adjust(
            sign * _check_duration(d)._subday_ns()
        )
        return self._date.to_julian_day() + sign * d.whole_days() + carry, t

    def _shift(self, d: Duration, sign: int, /) -> PrimitiveDateTime:
        jd, t = self._shifted(d, sign)
        return PrimitiveDateTime._from_parts(
            Date._from_julian_day_checked(jd), t
        )

    def _shift_or_none(
        self, d: Duration, sign: int, /
    ) -> Optional[PrimitiveDateTime]:
        jd, t = self._shifted(d, sign)
        if (date := Date._from_julian_day_or_none(jd)) is None:
            return None
        return PrimitiveDateTime._from_parts(date, t)

    def checked_add(self, d: Duration, /) -> Optional[PrimitiveDateTime]:
        """Add a duration, returning None if the result is out of range"""
        return self._shift_or_none(d, 1)

    def checked_sub(self, d: Duration, /) -> Optional[PrimitiveDateTime]:
        return self._shift_or_none(d, -1)

    def saturating_add(self, d: Duration, /) -> PrimitiveDateTime:
        """Add a duration, clamping to :attr:`MIN` or :attr:`MAX`
        if the result is out of range"""
        return self._shift_or_none(d, 1) or (
            PrimitiveDateTime.MIN if d.is_negative() else PrimitiveDateTime.MAX
        )

    def saturating_sub(self, d: Duration, /) -> PrimitiveDateTime:
        return self._shift_or_none(d, -1) or (
            PrimitiveDateTime.MAX if d.is_negative() else PrimitiveDateTime.MIN
        )

    def __add__(self, d: Duration) -> PrimitiveDateTime:
        """Add a duration to this datetime.
        Raises :class:`Overflow` if the result is out of range.

        Example
        -------
        >>> PrimitiveDateTime(2020, 12, 31, 23) + hours(2)
        PrimitiveDateTime(2021-01-01 01:00:00)
        """
        if not isinstance(d, Duration):
            return NotImplemented
        return self._shift(d, 1)

    @overload
    def __sub__(self, other: Duration) -> PrimitiveDateTime: ...

    @overload
    def __sub__(self, other: PrimitiveDateTime) -> Duration: ...

    def __sub__(
        self, other: Duration | PrimitiveDateTime
    ) -> PrimitiveDateTime | Duration:
        """Subtract a duration, or calculate the duration
        between two datetimes

        Example
        -------
        >>> PrimitiveDateTime(2021, 1, 1) - hours(1)
        PrimitiveDateTime(2020-12-31 23:00:00)
        >>> PrimitiveDateTime(2021, 1, 2) - PrimitiveDateTime(2021, 1, 1, 12)
        Duration(12:00:00)
        """
        if isinstance(other, Duration):
            return self._shift(other, -1)
        elif isinstance(other, PrimitiveDateTime):
            return Duration._from_nanos_unchecked(
                self._date.days_since(other._date) * NS_PER_DAY
                + self._time._ns_of_day()
                - other._time._ns_of_day()
            )
        return NotImplemented

    def py_datetime(self) -> _datetime:
        """Convert to a naive standard library :class:`~datetime.datetime`

        Note
        ----
        Nanoseconds are truncated to microseconds.
        Raises :class:`ValueError` for years outside 1-9999.
        """
        return _datetime.combine(self._date.py_date(), self._time.py_time())

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> PrimitiveDateTime:
        """Create from a naive :class:`~datetime.datetime`"""
        if not isinstance(d, _datetime):
            raise TypeError(f"Expected datetime, got {type(d)!r}")
        if d.tzinfo is not None:
            raise ValueError(
                f"Datetime must be naive, but got tzinfo={d.tzinfo!r}"
            )
        return cls._from_parts(
            Date.from_py_date(d.date()), Time.from_py_time(d.time())
        )

    def format_common_iso(self) -> str:
        """Format as ``YYYY-MM-DDTHH:MM:SS[.fff]``

        The inverse of :meth:`parse_common_iso`.
        """
        return f"{self._date}T{self._time}"

    @classmethod
    def parse_common_iso(cls, s: str, /) -> PrimitiveDateTime:
        """Parse ``YYYY-MM-DDTHH:MM:SS[.fff]``

        The inverse of :meth:`format_common_iso`.

        Example
        -------
        >>> PrimitiveDateTime.parse_common_iso("2020-08-15T23:12:00")
        PrimitiveDateTime(2020-08-15 23:12:00)
        """
        *ymdhms, nanos = datetime_from_iso(s)
        return cls(*ymdhms, nanosecond=nanos)

    __str__ = format_common_iso

    def __repr__(self) -> str:
        return f"PrimitiveDateTime({self._date} {self._time})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrimitiveDateTime):
            return NotImplemented
        return (self._date, self._time) == (other._date, other._time)

    def __hash__(self) -> int:
        return hash((self._date, self._time))

    def __lt__(self, other: PrimitiveDateTime) -> bool:
        if not isinstance(other, PrimitiveDateTime):
            return NotImplemented
        return (self._date, self._time) < (other._date, other._time)

    def __le__(self, other: PrimitiveDateTime) -> bool:
        if not isinstance(other, PrimitiveDateTime):
            return NotImplemented
        return (self._date, self._time) <= (other._date, other._time)

    def __gt__(self, other: PrimitiveDateTime) -> bool:
        if not isinstance(other, PrimitiveDateTime):
            return NotImplemented
        return (self._date, self._time) > (other._date, other._time)

    def __ge__(self, other: PrimitiveDateTime) -> bool:
        if not isinstance(other, PrimitiveDateTime):
            return NotImplemented
        return (self._date, self._time) >= (other._date, other._time)

    @classmethod
    def _from_parts(cls, d: Date, t: Time, /) -> PrimitiveDateTime:
        self = _object_new(cls)
        self._date = d
        self._time = t
        return self

    @no_type_check
    def __reduce__(self):
        return (
            _unpkl_primitive,
            (
                pack(
                    "<iHBBBI",
                    self._date._year,
                    self._date._ordinal,
                    *self._time.as_hms_nano(),
                ),
            ),
        )


@no_type_check
def _unpkl_primitive(data: bytes) -> PrimitiveDateTime:
    year, ordinal, hour, minute, second, nanos = unpack("<iHBBBI", data)
    return PrimitiveDateTime._from_parts(
        Date.from_ordinal_date(year, ordinal),
        Time(hour, minute, second, nanosecond=nanos),
    )


def _replace_fields(
    dt: PrimitiveDateTime, kwargs: dict[str, Any]
) -> dict[str, Any]:
    fields = dict(
        year=dt.year,
        month=dt.month,
        day=dt.day,
        hour=dt.hour,
        minute=dt.minute,
        second=dt.second,
        nanosecond=dt.nanosecond,
    )
    if unknown := kwargs.keys() - fields.keys():
        raise TypeError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    fields.update(kwargs)
    return fields


PrimitiveDateTime.MIN = PrimitiveDateTime._from_parts(Date.MIN, Time.MIDNIGHT)
PrimitiveDateTime.MAX = PrimitiveDateTime._from_parts(Date.MAX, Time.MAX)


@final
class OffsetDateTime(_ImmutableBase):
    """A date and time with a fixed UTC offset.
    It represents an absolute moment in time.

    Comparison and equality are based on the moment in time,
    not on the local fields. Use :meth:`exact_eq` to compare fields.

    Example
    -------
    >>> # Midnight in Salt Lake City
    >>> OffsetDateTime(2023, 4, 21, offset=-6)
    OffsetDateTime(2023-04-21 00:00:00-06:00)
    >>> OffsetDateTime(2021, 1, 1, offset=1) == OffsetDateTime(
    ...     2020, 12, 31, 23, offset=0
    ... )
    True
    """

    __slots__ = ("_local", "_offset")

    UNIX_EPOCH: ClassVar[OffsetDateTime]
    """1970-01-01T00:00:00Z"""

    def __init__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        *,
        nanosecond: int = 0,
        offset: int | UtcOffset,
    ) -> None:
        self._local = PrimitiveDateTime(
            year, month, day, hour, minute, second, nanosecond=nanosecond
        )
        self._offset = _load_offset(offset)

    @classmethod
    def now_utc(cls) -> OffsetDateTime:
        """The current time, at offset UTC

        Example
        -------
        >>> OffsetDateTime.now_utc()
        OffsetDateTime(2021-08-15 22:12:00.49821+00:00)
        """
        return cls._from_unix_nanos(time_ns(), UtcOffset.UTC)

    @classmethod
    def now_local(cls) -> OffsetDateTime:
        """The current time, at the current offset of the system timezone.

        Raises :class:`IndeterminateOffset` if the platform
        can't determine the offset.
        """
        utc = cls.now_utc()
        return utc.to_offset(UtcOffset.local_offset_at(utc))

    @classmethod
    def from_unix_timestamp(
        cls, secs: int, /, offset: int | UtcOffset = 0
    ) -> OffsetDateTime:
        """Create from a UNIX timestamp (in seconds).
        Inverse of :meth:`unix_timestamp`.

        Example
        -------
        >>> OffsetDateTime.from_unix_timestamp(0)
        OffsetDateTime(1970-01-01 00:00:00+00:00)
        >>> OffsetDateTime.from_unix_timestamp(1_546_300_800, offset=1)
        OffsetDateTime(2019-01-01 01:00:00+01:00)
        """
        return cls._from_unix_nanos(
            _check_range(
                "timestamp", secs, _MIN_TIMESTAMP, _MAX_TIMESTAMP
            )
            * NS_PER_SEC,
            _load_offset(offset),
        )

    @classmethod
    def from_unix_timestamp_nanos(
        cls, nanos: int, /, offset: int | UtcOffset = 0
    ) -> OffsetDateTime:
        """Like :meth:`from_unix_timestamp`, but for nanoseconds"""
        return cls._from_unix_nanos(
            _check_range(
                "timestamp",
                nanos,
                _MIN_TIMESTAMP * NS_PER_SEC,
                _MAX_TIMESTAMP * NS_PER_SEC + NS_PER_SEC - 1,
            ),
            _load_offset(offset),
        )

    @property
    def year(self) -> int:
        return self._local.year

    @property
    def month(self) -> Month:
        return self._local.month

    @property
    def day(self) -> int:
        return self._local.day

    @property
    def hour(self) -> int:
        return self._local.hour

    @property
    def minute(self) -> int:
        return self._local.minute

    @property
    def second(self) -> int:
        return self._local.second

    @property
    def nanosecond(self) -> int:
        return self._local.nanosecond

    @property
    def offset(self) -> UtcOffset:
        """The UTC offset of the datetime"""
        return self._offset

    def date(self) -> Date:
        """The local date"""
        return self._local._date

    def time(self) -> Time:
        """The local time of day"""
        return self._local._time

    def local(self) -> PrimitiveDateTime:
        """The local date and time, without the offset

        Inverse of :meth:`PrimitiveDateTime.assume_offset`.
        """
        return self._local

    def unix_timestamp(self) -> int:
        """The UNIX timestamp in whole seconds (rounded down).
        Inverse of :meth:`from_unix_timestamp`.

        Example
        -------
        >>> OffsetDateTime(1970, 1, 1, offset=1).unix_timestamp()
        -3600
        """
        return self._unix_nanos() // NS_PER_SEC

    def unix_timestamp_nanos(self) -> int:
        """The UNIX timestamp in nanoseconds"""
        return self._unix_nanos()

    def to_offset(self, offset: int | UtcOffset, /) -> OffsetDateTime:
        """Convert to another offset, keeping the same moment in time.

        Raises :class:`Overflow` if the local date would be out of range.

        Example
        -------
        >>> OffsetDateTime(2021, 1, 1, offset=1).to_offset(-5)
        OffsetDateTime(2020-12-31 18:00:00-05:00)
        """
        return OffsetDateTime._from_unix_nanos(
            self._unix_nanos(), _load_offset(offset)
        )

    def to_utc(self) -> OffsetDateTime:
        return self.to_offset(UtcOffset.UTC)

    def exact_eq(self, other: OffsetDateTime, /) -> bool:
        """Compare objects by their values
        (instead of whether they represent the same moment).

        Example
        -------
        >>> a = OffsetDateTime(2020, 8, 15, hour=12, offset=1)
        >>> b = OffsetDateTime(2020, 8, 15, hour=13, offset=2)
        >>> a == b
        True  # equivalent moments
        >>> a.exact_eq(b)
        False  # different values (hour and offset)
        """
        if type(other) is not OffsetDateTime:
            raise TypeError("Cannot compare different types")
        return (self._local, self._offset) == (other._local, other._offset)

    def replace(self, **kwargs: Any) -> OffsetDateTime:
        """Construct a new instance with the given fields replaced.
        The offset may be replaced as well. The result may be
        a different moment in time.

        Example
        -------
        >>> d = OffsetDateTime(2020, 8, 15, 23, 12, offset=1)
        >>> d.replace(year=2021, offset=2)
        OffsetDateTime(2021-08-15 23:12:00+02:00)
        """
        offset = kwargs.pop("offset", self._offset)
        return OffsetDateTime(
            **_replace_fields(self._local, kwargs), offset=offset
        )

    def replace_date(self, d: Date, /) -> OffsetDateTime:
        return OffsetDateTime._from_parts(
            self._local.replace_date(d), self._offset
        )

    def replace_time(self, t: Time, /) -> OffsetDateTime:
        return OffsetDateTime._from_parts(
            self._local.replace_time(t), self._offset
        )

    def replace_offset(self, offset: int | UtcOffset, /) -> OffsetDateTime:
        """Keep the local fields, but change the offset.
        This changes the moment in time, unlike :meth:`to_offset`.
        """
        return OffsetDateTime._from_parts(self._local, _load_offset(offset))

    def add(self, **kwargs: Any) -> OffsetDateTime:
        """Add date and time units to this datetime.
        The offset is kept. See :meth:`PrimitiveDateTime.add`.

        Example
        -------
        >>> OffsetDateTime(2020, 1, 31, offset=2).add(months=1, hours=3)
        OffsetDateTime(2020-02-29 03:00:00+02:00)
        """
        return OffsetDateTime._from_parts(
            self._local.add(**kwargs), self._offset
        )

    def subtract(self, **kwargs: Any) -> OffsetDateTime:
        """Inverse of :meth:`add`"""
        return OffsetDateTime._from_parts(
            self._local.subtract(**kwargs), self._offset
        )

    def checked_add(self, d: Duration, /) -> Optional[OffsetDateTime]:
        """Add a duration, returning None if the result is out of range"""
        if (local := self._local.checked_add(d)) is None:
            return None
        return OffsetDateTime._from_parts(local, self._offset)

    def checked_sub(self, d: Duration, /) -> Optional[OffsetDateTime]:
        if (local := self._local.checked_sub(d)) is None:
            return None
        return OffsetDateTime._from_parts(local, self._offset)

    def saturating_add(self, d: Duration, /) -> OffsetDateTime:
        """Add a duration. If the result is out of range,
        the local datetime is clamped to the min or max value"""
        return OffsetDateTime._from_parts(
            self._local.saturating_add(d), self._offset
        )

    def saturating_sub(self, d: Duration, /) -> OffsetDateTime:
        return OffsetDateTime._from_parts(
            self._local.saturating_sub(d), self._offset
        )

    def __add__(self, d: Duration) -> OffsetDateTime:
        """Add a duration, keeping the offset.
        Raises :class:`Overflow` if the result is out of range.

        Example
        -------
        >>> OffsetDateTime(2020, 12, 31, 23, offset=-3) + hours(2)
        OffsetDateTime(2021-01-01 01:00:00-03:00)
        """
        if not isinstance(d, Duration):
            return NotImplemented
        return OffsetDateTime._from_parts(self._local + d, self._offset)

    @overload
    def __sub__(self, other: Duration) -> OffsetDateTime: ...

    @overload
    def __sub__(self, other: OffsetDateTime) -> Duration: ...

    def __sub__(
        self, other: Duration | OffsetDateTime
    ) -> OffsetDateTime | Duration:
        """Subtract a duration, or calculate the exact duration
        between two moments in time. Offsets are taken into account.

        Example
        -------
        >>> a = OffsetDateTime(2021, 1, 1, offset=1)
        >>> a - OffsetDateTime(2020, 12, 31, 22, offset=0)
        Duration(01:00:00)
        """
        if isinstance(other, Duration):
            return OffsetDateTime._from_parts(
                self._local - other, self._offset
            )
        elif isinstance(other, OffsetDateTime):
            return Duration._from_nanos_unchecked(
                self._unix_nanos() - other._unix_nanos()
            )
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        """Check if two datetimes represent the same moment in time

        Example
        -------
        >>> OffsetDateTime(2021, 1, 1, offset=1) == OffsetDateTime(
        ...     2020, 12, 31, 23, offset=0
        ... )
        True
        """
        if not isinstance(other, OffsetDateTime):
            return NotImplemented
        return self._unix_nanos() == other._unix_nanos()

    def __hash__(self) -> int:
        return hash(self._unix_nanos())

    def __lt__(self, other: OffsetDateTime) -> bool:
        """Compare two datetimes by when they occur in time"""
        if not isinstance(other, OffsetDateTime):
            return NotImplemented
        return self._unix_nanos() < other._unix_nanos()

    def __le__(self, other: OffsetDateTime) -> bool:
        if not isinstance(other, OffsetDateTime):
            return NotImplemented
        return self._unix_nanos() <= other._unix_nanos()

    def __gt__(self, other: OffsetDateTime) -> bool:
        if not isinstance(other, OffsetDateTime):
            return NotImplemented
        return self._unix_nanos() > other._unix_nanos()

    def __ge__(self, other: OffsetDateTime) -> bool:
        if not isinstance(other, OffsetDateTime):
            return NotImplemented
        return self._unix_nanos() >= other._unix_nanos()

    def py_datetime(self) -> _datetime:
        """Convert to an aware standard library :class:`~datetime.datetime`

        Note
        ----
        Nanoseconds are truncated to microseconds.
        """
        return self._local.py_datetime().replace(
            tzinfo=_timezone(_timedelta(seconds=self._offset._secs))
        )

    @classmethod
    def from_py_datetime(cls, d: _datetime, /) -> OffsetDateTime:
        """Create from an aware :class:`~datetime.datetime`.
        The offset must be a whole number of seconds.
        """
        if not isinstance(d, _datetime):
            raise TypeError(f"Expected datetime, got {type(d)!r}")
        if (offset := d.utcoffset()) is None:
            raise ValueError("Datetime must be aware")
        elif offset.microseconds:
            raise ValueError("Offset must be a whole number of seconds")
        return cls._from_parts(
            PrimitiveDateTime.from_py_datetime(d.replace(tzinfo=None)),
            UtcOffset.from_whole_seconds(
                offset.days * SECS_PER_DAY + offset.seconds
            ),
        )

    def format_common_iso(self) -> str:
        """Convert to the popular ISO format ``YYYY-MM-DDTHH:MM:SS±HH:MM``

        The inverse of :meth:`parse_common_iso`.
        """
        return f"{self._local}{self._offset}"

    @classmethod
    def parse_common_iso(cls, s: str, /) -> OffsetDateTime:
        """Parse the popular ISO format ``YYYY-MM-DDTHH:MM:SS±HH:MM``

        The inverse of :meth:`format_common_iso`.

        Example
        -------
        >>> OffsetDateTime.parse_common_iso("2020-08-15T23:12:00+02:00")
        OffsetDateTime(2020-08-15 23:12:00+02:00)
        """
        (*ymdhms, nanos), offset = offset_datetime_from_iso(s)
        return cls._from_parts(
            PrimitiveDateTime(*ymdhms, nanosecond=nanos), UtcOffset(*offset)
        )

    __str__ = format_common_iso

    def __repr__(self) -> str:
        local = self._local
        return f"OffsetDateTime({local._date} {local._time}{self._offset})"

    def _unix_nanos(self) -> int:
        return (
            (self._local._date.to_julian_day() - UNIX_EPOCH_JULIAN_DAY)
            * NS_PER_DAY
            + self._local._time._ns_of_day()
            - self._offset._secs * NS_PER_SEC
        )

    @classmethod
    def _from_unix_nanos(
        cls, nanos: int, offset: UtcOffset, /
    ) -> OffsetDateTime:
        days, ns_of_day = divmod(
            nanos + offset._secs * NS_PER_SEC, NS_PER_DAY
        )
        return cls._from_parts(
            PrimitiveDateTime._from_parts(
                Date._from_julian_day_checked(UNIX_EPOCH_JULIAN_DAY + days),
                Time._from_ns_of_day(ns_of_day),
            ),
            offset,
        )

    @classmethod
    def _from_parts(
        cls, local: PrimitiveDateTime, offset: UtcOffset, /
    ) -> OffsetDateTime:
        self = _object_new(cls)
        self._local = local
        self._offset = offset
        return self

    @no_type_check
    def __reduce__(self):
        return (
            _unpkl_offset,
            (
                pack(
                    "<iHBBBIi",
                    self._local._date._year,
                    self._local._date._ordinal,
                    *self._local._time.as_hms_nano(),
                    self._offset._secs,
                ),
            ),
        )


# A separate function is needed for unpickling, because the
# constructor doesn't accept positional offset argument as
# required by __reduce__.
# Also, it allows backwards-compatible changes to the pickling format.
@no_type_check
def _unpkl_offset(data: bytes) -> OffsetDateTime:
    year, ordinal, hour, minute, second, nanos, offset_secs = unpack(
        "<iHBBBIi", data
    )
    return OffsetDateTime._from_parts(
        PrimitiveDateTime._from_parts(
            Date.from_ordinal_date(year, ordinal),
            Time(hour, minute, second, nanosecond=nanos),
        ),
        UtcOffset.from_whole_seconds(offset_secs),
    )


_MIN_TIMESTAMP = (_MIN_JULIAN_DAY - UNIX_EPOCH_JULIAN_DAY) * SECS_PER_DAY
_MAX_TIMESTAMP = (
    _MAX_JULIAN_DAY - UNIX_EPOCH_JULIAN_DAY + 1
) * SECS_PER_DAY - 1

OffsetDateTime.UNIX_EPOCH = OffsetDateTime(1970, 1, 1, offset=0)


@final
class Instant(_ImmutableBase):
    """A reading of the monotonic clock, for measuring elapsed time.

    Unlike :class:`OffsetDateTime`, it isn't affected by changes
    to the system clock. It has no meaning outside the current process:
    only the difference between two instants is useful.

    Example
    -------
    >>> start = Instant.now()
    >>> do_work()
    >>> start.elapsed()
    Duration(00:00:01.50023)
    """

    __slots__ = ("_ns",)

    def __init__(self) -> None:
        raise TypeError("Instant cannot be instantiated directly. Use now()")

    def __reduce__(self):
        raise TypeError("Instant is process-local and cannot be pickled")

    @classmethod
    def now(cls) -> Instant:
        """Read the monotonic clock"""
        return cls._from_ns(monotonic_ns())

    def elapsed(self) -> Duration:
        """The time elapsed since this instant"""
        return Duration._from_nanos_checked(monotonic_ns() - self._ns)

    def checked_add(self, d: Duration, /) -> Optional[Instant]:
        """Add a duration. Returns None if the result would lie
        before the start of the monotonic clock."""
        if (ns := self._ns + _check_duration(d)._total_ns) < 0:
            return None
        return Instant._from_ns(ns)

    def checked_sub(self, d: Duration, /) -> Optional[Instant]:
        if (ns := self._ns - _check_duration(d)._total_ns) < 0:
            return None
        return Instant._from_ns(ns)

    def __add__(self, d: Duration) -> Instant:
        if not isinstance(d, Duration):
            return NotImplemented
        if (result := self.checked_add(d)) is None:
            raise Overflow("Instant out of range")
        return result

    @overload
    def __sub__(self, other: Duration) -> Instant: ...

    @overload
    def __sub__(self, other: Instant) -> Duration: ...

    def __sub__(self, other: Duration | Instant) -> Instant | Duration:
        """Subtract a duration, or get the duration between two instants"""
        if isinstance(other, Duration):
            if (result := self.checked_sub(other)) is None:
                raise Overflow("Instant out of range")
            return result
        elif isinstance(other, Instant):
            return Duration._from_nanos_checked(self._ns - other._ns)
        return NotImplemented

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns == other._ns

    def __hash__(self) -> int:
        return hash(self._ns)

    def __lt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns < other._ns

    def __le__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns <= other._ns

    def __gt__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns > other._ns

    def __ge__(self, other: Instant) -> bool:
        if not isinstance(other, Instant):
            return NotImplemented
        return self._ns >= other._ns

    def __repr__(self) -> str:
        return f"Instant({self._ns}ns)"

    @classmethod
    def _from_ns(cls, ns: int, /) -> Instant:
        self = _object_new(cls)
        self._ns = ns
        return self


def weeks(i: float, /) -> Duration:
    """Create a :class:`~Duration` with the given number of weeks.
    ``weeks(1) == Duration(weeks=1)``
    """
    return Duration(weeks=i)


def days(i: float, /) -> Duration:
    """Create a :class:`~Duration` with the given number of 24-hour days.
    ``days(1) == Duration(days=1)``
    """
    return Duration(days=i)


def hours(i: float, /) -> Duration:
    """Create a :class:`~Duration` with the given number of hours.
    ``hours(1) == Duration(hours=1)``
    """
    return Duration(hours=i)


def minutes(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of minutes.
    ``minutes(1) == Duration(minutes=1)``
    """
    return Duration(minutes=i)


def seconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of seconds.
    ``seconds(1) == Duration(seconds=1)``
    """
    return Duration(seconds=i)


def milliseconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of milliseconds.
    ``milliseconds(1) == Duration(milliseconds=1)``
    """
    return Duration(milliseconds=i)


def microseconds(i: float, /) -> Duration:
    """Create a :class:`Duration` with the given number of microseconds.
    ``microseconds(1) == Duration(microseconds=1)``
    """
    return Duration(microseconds=i)


def nanoseconds(i: int, /) -> Duration:
    """Create a :class:`Duration` with the given number of nanoseconds.
    ``nanoseconds(1) == Duration(nanoseconds=1)``
    """
    return Duration(nanoseconds=i)


# We expose the public members in the root of the module.
# For clarity, we remove the "_pycivil" part from the names,
# since this is an implementation detail.
for name in __all__:
    member = locals()[name]
    if getattr(member, "__module__", None) == __name__:  # pragma: no branch
        member.__module__ = "civiltime"

# clear up loop variables so they don't leak into the namespace
del name
del member

for _unpkl in (
    _unpkl_date,
    _unpkl_time,
    _unpkl_duration,
    _unpkl_utc_offset,
    _unpkl_primitive,
    _unpkl_offset,
):
    _unpkl.__module__ = "civiltime"


# disable further subclassing
final(_ImmutableBase)


def _patch_time_frozen(dt: OffsetDateTime) -> None:
    global time_ns

    def time_ns() -> int:
        return dt.unix_timestamp_nanos()


def _patch_time_keep_ticking(dt: OffsetDateTime) -> None:
    global time_ns

    _patched_at = time_ns()
    _time_ns = time_ns

    def time_ns() -> int:
        return dt.unix_timestamp_nanos() + _time_ns() - _patched_at


def _unpatch_time() -> None:
    global time_ns

    from time import time_ns
