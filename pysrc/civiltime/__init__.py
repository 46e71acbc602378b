from __future__ import annotations

from ._pycivil import *
from ._pycivil import (  # for the docs
    __all__,
    __version__,
    _patch_time_frozen,
    _patch_time_keep_ticking,
    _unpatch_time,
    _unpkl_date,
    _unpkl_duration,
    _unpkl_offset,
    _unpkl_primitive,
    _unpkl_time,
    _unpkl_utc_offset,
)

from contextlib import contextmanager as _contextmanager
from dataclasses import dataclass as _dataclass
from typing import Any as _Any, Iterator as _Iterator


@_dataclass
class _TimePatch:
    _pin: OffsetDateTime
    _keep_ticking: bool

    def shift(self, **kwargs: _Any) -> None:
        """Move the patched time by the given units,
        as accepted by :meth:`OffsetDateTime.add`"""
        if self._keep_ticking:
            now = OffsetDateTime.now_utc()
            self._pin = new = now.to_offset(self._pin.offset).add(**kwargs)
            _patch_time_keep_ticking(new)
        else:
            self._pin = new = self._pin.add(**kwargs)
            _patch_time_frozen(new)


@_contextmanager
def patch_current_time(
    dt: OffsetDateTime,
    /,
    *,
    keep_ticking: bool,
) -> _Iterator[_TimePatch]:
    """Patch the current time to a fixed value (for testing purposes).
    Behaves as a context manager or decorator, with similar semantics to
    ``unittest.mock.patch``.

    Important
    ---------

    * This function should be used only for testing purposes. It is not
      thread-safe or part of the stable API.
    * This function only affects the ``now`` functions of
      :class:`OffsetDateTime`. It doesn't affect the monotonic clock
      behind :class:`Instant`, the standard library's time functions,
      or any other libraries.
      Use the ``time_machine`` package if you also want to patch other
      libraries.
    * It doesn't affect the system timezone.
      If you need to patch the system timezone, set the ``TZ`` environment
      variable and call :func:`reset_system_tz`.

    Example
    -------

    >>> from civiltime import OffsetDateTime, patch_current_time
    >>> d = OffsetDateTime(1980, 3, 2, hour=2, offset=0)
    >>> with patch_current_time(d, keep_ticking=False) as p:
    ...     assert OffsetDateTime.now_utc() == d
    ...     p.shift(hours=4)
    ...     assert OffsetDateTime.now_utc() == d.add(hours=4)
    ...
    >>> assert OffsetDateTime.now_utc() != d
    """
    if keep_ticking:
        _patch_time_keep_ticking(dt)
    else:
        _patch_time_frozen(dt)

    try:
        yield _TimePatch(dt, keep_ticking)
    finally:
        _unpatch_time()
