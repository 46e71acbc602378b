import time
from datetime import datetime as _datetime, timezone as _timezone
from typing import Optional

_UTC = _timezone.utc


def local_offset_seconds(unix_secs: int) -> Optional[int]:
    """Get the UTC offset (in seconds) of the system timezone
    at the given UNIX time. Returns None if the platform cannot
    determine it, for example because the time is outside the range
    supported by the C library.
    """
    try:
        offset = (
            _datetime.fromtimestamp(unix_secs, _UTC).astimezone().utcoffset()
        )
    except (OverflowError, OSError, ValueError):
        return None
    if offset is None:  # pragma: no cover
        return None
    return offset.days * 86_400 + offset.seconds


def reset_system_tz() -> None:
    """Reload the system timezone from the ``TZ`` environment variable.
    Only has an effect on platforms that support :func:`time.tzset`.
    """
    if (tzset := getattr(time, "tzset", None)) is not None:
        tzset()
