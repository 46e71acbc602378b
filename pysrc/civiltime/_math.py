"""Proleptic Gregorian calendar arithmetic.

All functions here are pure and use exact integer arithmetic.
They work for year zero and negative years as well, relying on
Python's floor division and modulo.
"""

from bisect import bisect_left

# Julian day of 0000-12-31, i.e. the day before 0001-01-01
_JULIAN_DAY_OFFSET = 1_721_425

# Days in a cycle of 400, 100, and 4 years
_DAYS_PER_400Y = 146_097
_DAYS_PER_100Y = 36_524
_DAYS_PER_4Y = 1_461

# 1-indexed days per month
_MONTHDAYS = (0, 31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Days before the start of each month, for common and leap years
_DAYS_BEFORE_MONTH = (
    (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334),
    (0, 31, 60, 91, 121, 152, 182, 213, 244, 274, 305, 335),
)


def is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 365 + is_leap(year)


def days_in_month(year: int, month: int) -> int:
    return _MONTHDAYS[month] + (month == 2 and is_leap(year))


def weeks_in_year(year: int) -> int:
    """The number of ISO weeks in a year: 52 or 53"""
    jan1 = weekday_number(julian_day(year, 1))
    return 53 if jan1 == 4 or (jan1 == 3 and is_leap(year)) else 52


def ordinal_from_ymd(year: int, month: int, day: int) -> int:
    return _DAYS_BEFORE_MONTH[is_leap(year)][month - 1] + day


def ymd_from_ordinal(year: int, ordinal: int) -> tuple[int, int]:
    """Get the (month, day) of the given day of the year"""
    cumulative = _DAYS_BEFORE_MONTH[is_leap(year)]
    month = bisect_left(cumulative, ordinal)
    return month, ordinal - cumulative[month - 1]


def julian_day(year: int, ordinal: int) -> int:
    """The Julian day number: days since -4713-11-24 (proleptic Gregorian)"""
    y = year - 1
    return (
        365 * y
        + y // 4
        - y // 100
        + y // 400
        + ordinal
        + _JULIAN_DAY_OFFSET
    )


def from_julian_day(jd: int) -> tuple[int, int]:
    """Inverse of :func:`julian_day`, giving (year, ordinal)"""
    n400, rem = divmod(jd - _JULIAN_DAY_OFFSET - 1, _DAYS_PER_400Y)
    n100, rem = divmod(rem, _DAYS_PER_100Y)
    n4, rem = divmod(rem, _DAYS_PER_4Y)
    n1, rem = divmod(rem, 365)
    year = 400 * n400 + 100 * n100 + 4 * n4 + n1
    # The last day of a 4-year or 400-year cycle is Dec 31st of a leap year
    if n100 == 4 or n1 == 4:
        return year, 366
    return year + 1, rem + 1


def weekday_number(jd: int) -> int:
    """ISO weekday number (Monday=1, Sunday=7). Julian day 0 is a Monday."""
    return jd % 7 + 1


def iso_year_week(year: int, ordinal: int, weekday: int) -> tuple[int, int]:
    week = (ordinal + 10 - weekday) // 7
    if week == 0:
        return year - 1, weeks_in_year(year - 1)
    elif week == 53 and weeks_in_year(year) == 52:
        return year + 1, 1
    return year, week


def ordinal_from_iso_week(
    year: int, week: int, weekday: int
) -> tuple[int, int]:
    """Get the (year, ordinal) of an ISO week date.
    The resulting year may be one off from the ISO year."""
    jan4 = weekday_number(julian_day(year, 4))
    ordinal = week * 7 + weekday - (jan4 + 3)
    if ordinal < 1:
        return year - 1, ordinal + days_in_year(year - 1)
    elif ordinal > (year_length := days_in_year(year)):
        return year + 1, ordinal - year_length
    return year, ordinal


def add_months(
    year: int, month: int, day: int, months: int
) -> tuple[int, int, int]:
    """Shift a date by a number of months, clamping the day
    to the length of the resulting month.
    """
    year_delta, month0_new = divmod(month - 1 + months, 12)
    year_new = year + year_delta
    month_new = month0_new + 1
    return (
        year_new,
        month_new,
        min(day, days_in_month(year_new, month_new)),
    )
