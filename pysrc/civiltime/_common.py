Nanos = int  # 0-999_999_999

NS_PER_US = 1_000
NS_PER_MS = 1_000_000
NS_PER_SEC = 1_000_000_000
NS_PER_MIN = 60 * NS_PER_SEC
NS_PER_HOUR = 60 * NS_PER_MIN
NS_PER_DAY = 24 * NS_PER_HOUR
NS_PER_WEEK = 7 * NS_PER_DAY
SECS_PER_DAY = 86_400

# Years in the proleptic Gregorian calendar we can represent.
# Year 0 exists, and negative years mirror the positive range.
MIN_YEAR = -999_999
MAX_YEAR = 999_999

# Durations carry a signed 64-bit count of whole seconds
MIN_DURATION_SECS = -(1 << 63)
MAX_DURATION_SECS = (1 << 63) - 1
MIN_DURATION_NS = MIN_DURATION_SECS * NS_PER_SEC - (NS_PER_SEC - 1)
MAX_DURATION_NS = MAX_DURATION_SECS * NS_PER_SEC + (NS_PER_SEC - 1)

# Julian day of the unix epoch (1970-01-01)
UNIX_EPOCH_JULIAN_DAY = 2_440_588
