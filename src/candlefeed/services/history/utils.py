"""Utility functions for resolutions, time conversion and the weekly FX session."""

import re
from datetime import datetime, timezone
from typing import Optional

from ...core.exceptions import UnsupportedResolutionError

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR

RESOLUTION_SECONDS = {
    "1": MINUTE,
    "5": 5 * MINUTE,
    "15": 15 * MINUTE,
    "60": HOUR,
    "240": 4 * HOUR,
    "D": DAY,
}

# Upstream granularity tokens
RESOLUTION_GRANULARITY = {
    "1": "M1",
    "5": "M5",
    "15": "M15",
    "60": "H1",
    "240": "H4",
    "D": "D",
}

# Weekly FX closure in UTC: Friday 21:00 until Sunday 21:00.
MARKET_CLOSE_HOUR = 21
WEEKLY_CLOSURE_SECONDS = 2 * DAY

FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

_FRACTION = re.compile(r"\.(\d+)")


def normalize_resolution(resolution: Optional[str]) -> str:
    """
    Normalize a UDF resolution token.

    Missing tokens and ``1D`` mean daily; tokens are upper-cased.

    Raises:
        UnsupportedResolutionError: If the token is outside the supported set
    """
    if not resolution or resolution.strip().upper() == "1D":
        return "D"
    token = resolution.strip().upper()
    if token not in RESOLUTION_SECONDS:
        raise UnsupportedResolutionError(resolution)
    return token


def get_resolution_seconds(resolution: str) -> int:
    """
    Length of one candle period in seconds.

    Raises:
        UnsupportedResolutionError: If the token is outside the supported set
    """
    try:
        return RESOLUTION_SECONDS[resolution]
    except KeyError:
        raise UnsupportedResolutionError(resolution) from None


def get_granularity(resolution: str) -> str:
    """Upstream granularity token for a resolution (e.g. ``60`` -> ``H1``)."""
    try:
        return RESOLUTION_GRANULARITY[resolution]
    except KeyError:
        raise UnsupportedResolutionError(resolution) from None


def to_datetime(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, timezone.utc)


def seconds_to_iso(seconds: Optional[float]) -> str:
    """Render epoch seconds as an RFC3339 UTC string for logs and upstream queries."""
    if seconds is None:
        return "n/a"
    return to_datetime(seconds).isoformat().replace("+00:00", "Z")


def parse_upstream_time(value: str) -> int:
    """
    Parse an upstream candle time into epoch seconds.

    Accepts RFC3339 with up to nanosecond precision
    (``2016-10-17T15:00:00.000000000Z``) and UNIX strings (``1476716400.000000000``).

    Raises:
        ValueError: If the value cannot be parsed
    """
    text = str(value).strip()
    try:
        return int(float(text))
    except ValueError:
        pass
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6], text, count=1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def floor_to_minute(seconds: int) -> int:
    return seconds - (seconds % MINUTE)


def is_weekly_closure(seconds: int) -> bool:
    """True if the instant falls inside the weekly FX closure."""
    moment = to_datetime(seconds)
    weekday = moment.weekday()
    if weekday == SATURDAY:
        return True
    if weekday == FRIDAY:
        return moment.hour >= MARKET_CLOSE_HOUR
    if weekday == SUNDAY:
        return moment.hour < MARKET_CLOSE_HOUR
    return False


def window_in_weekly_closure(from_time: int, to_time: int) -> bool:
    """True if ``[from_time, to_time]`` lies inside a single weekly closure."""
    if to_time < from_time or to_time - from_time > WEEKLY_CLOSURE_SECONDS:
        return False
    return is_weekly_closure(from_time) and is_weekly_closure(to_time)


def is_session_closed_day(seconds: int) -> bool:
    """True on the weekday with no trading session at all (Saturday, UTC)."""
    return to_datetime(seconds).weekday() == SATURDAY


def include_first_candle(seconds: int) -> bool:
    """
    Decide the upstream ``includeFirst`` flag for a query starting at ``seconds``.

    Starts on Friday after the close, on Saturday, or on Sunday up to the open
    sit in the weekly gap, so the first candle returned is the Sunday open and
    must be included. Any other start is the last candle already held by the
    previous query.
    """
    moment = to_datetime(seconds)
    weekday = moment.weekday()
    if weekday == SATURDAY:
        return True
    if weekday == FRIDAY:
        market_close = moment.replace(hour=MARKET_CLOSE_HOUR - 1, minute=59, second=0, microsecond=0)
        return moment > market_close
    if weekday == SUNDAY:
        market_open = moment.replace(hour=MARKET_CLOSE_HOUR, minute=0, second=0, microsecond=0)
        return moment <= market_open
    return False
