import os
from contextlib import contextmanager
from unittest.mock import patch

from civiltime import reset_system_tz


class AlwaysEqual:
    def __eq__(self, _):
        return True


class NeverEqual:
    def __eq__(self, _):
        return False


class AlwaysLarger:
    def __lt__(self, _):
        return False

    def __le__(self, _):
        return False

    def __gt__(self, _):
        return True

    def __ge__(self, _):
        return True


class AlwaysSmaller:
    def __lt__(self, _):
        return True

    def __le__(self, _):
        return True

    def __gt__(self, _):
        return False

    def __ge__(self, _):
        return False


@contextmanager
def system_tz(name):
    try:
        with patch.dict(os.environ, {"TZ": name}):
            reset_system_tz()
            yield
    finally:
        reset_system_tz()  # reset the timezone after the patch


# POSIX TZ strings, so the tests don't depend on the zoneinfo database
# being installed. Note the inverted sign convention of POSIX.
def system_tz_ams():
    return system_tz("CET-1CEST,M3.5.0,M10.5.0/3")


def system_tz_nyc():
    return system_tz("EST5EDT,M3.2.0,M11.1.0")
