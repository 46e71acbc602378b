"""Helpers for the common ISO 8601 formats.

These only check the *syntax*. Ranges are checked by the constructors
of the respective classes, which raise ``ComponentRange``.
"""

from __future__ import annotations

import re
from typing import NoReturn

from ._common import Nanos

_match_date = re.compile(
    r"([+-]\d{4,6}|\d{4})-(\d{2})-(\d{2})", re.ASCII
).fullmatch
_match_date_basic = re.compile(r"(\d{4})(\d{2})(\d{2})", re.ASCII).fullmatch
_match_time = re.compile(
    r"(\d{2}):(\d{2}):(\d{2})(?:[.,](\d{1,9}))?", re.ASCII
).fullmatch
_match_time_basic = re.compile(
    r"(\d{2})(\d{2})(\d{2})(?:[.,](\d{1,9}))?", re.ASCII
).fullmatch
_match_offset = re.compile(
    r"([+-])(\d{2})(?::?(\d{2})(?::?(\d{2}))?)?", re.ASCII
).fullmatch


def parse_err(s: str) -> NoReturn:
    raise ValueError(f"Invalid format: {s!r}") from None


def parse_nanos(s: str | None) -> Nanos:
    return int(s.ljust(9, "0")) if s else 0


def _is_sep(c: str) -> bool:
    return c in " Tt"


def date_from_iso(s: str) -> tuple[int, int, int]:
    if (match := _match_date(s) or _match_date_basic(s)) is None:
        parse_err(s)
    year, month, day = match.groups()
    return int(year), int(month), int(day)


def time_from_iso(s: str) -> tuple[int, int, int, Nanos]:
    if (match := _match_time(s) or _match_time_basic(s)) is None:
        parse_err(s)
    hour, minute, second, frac = match.groups()
    return int(hour), int(minute), int(second), parse_nanos(frac)


def offset_from_iso(s: str) -> tuple[int, int, int]:
    """Parse an offset into signed (hours, minutes, seconds)"""
    if s in ("Z", "z"):
        return 0, 0, 0
    if (match := _match_offset(s)) is None:
        parse_err(s)
    sign_str, hours, minutes, seconds = match.groups()
    # colons must be used consistently: either everywhere or nowhere
    if ":" in s and len(s) not in (6, 9):
        parse_err(s)
    sign = -1 if sign_str == "-" else 1
    return (
        sign * int(hours),
        sign * int(minutes or 0),
        sign * int(seconds or 0),
    )


def _split_datetime(s: str) -> tuple[str, str]:
    # The separator is the first 'T', 't' or space. We can't just
    # split at a fixed index since years may have a variable width.
    for idx, c in enumerate(s):
        if _is_sep(c):
            return s[:idx], s[idx + 1 :]  # noqa[E203]
    parse_err(s)


def datetime_from_iso(s: str) -> tuple[int, int, int, int, int, int, Nanos]:
    if not s.isascii():
        parse_err(s)
    date_str, time_str = _split_datetime(s)
    try:
        return (*date_from_iso(date_str), *time_from_iso(time_str))
    except ValueError:
        parse_err(s)


def offset_datetime_from_iso(
    s: str,
) -> tuple[tuple[int, int, int, int, int, int, Nanos], tuple[int, int, int]]:
    if not s.isascii():
        parse_err(s)
    date_str, rest = _split_datetime(s)
    # The offset starts at the first sign or 'Z' after the time
    for idx, c in enumerate(rest):
        if c in "+-Zz":
            time_str, offset_str = rest[:idx], rest[idx:]
            break
    else:
        parse_err(s)
    try:
        return (
            (*date_from_iso(date_str), *time_from_iso(time_str)),
            offset_from_iso(offset_str),
        )
    except ValueError:
        parse_err(s)
