# File: utils/dt_utils.py
"""Date and time utilities for StepPet.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library: datetime, zoneinfo, dateutil.

Functions:
    - dt_now_utc: Get current datetime in UTC
    - as_utc / as_local: Timezone conversion
    - start_of_local_day: Local midnight for an instant
    - start_of_week_utc: Canonical week anchor (Monday 00:00 UTC)
    - dt_parse / dt_to_utc / dt_to_iso: Parsing and serialization

Classes:
    - Clock: Injectable wall-clock adapter consumed by the step engine callers
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import MO, relativedelta

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Naive datetimes are assumed to be in the default timezone.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object (naive values are treated as UTC)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


def start_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get the start of day (00:00:00) for a datetime in local timezone.

    Args:
        dt_obj: Datetime object (can be in any timezone)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    local_dt = as_local(dt_obj, tz or DEFAULT_TIME_ZONE)
    return local_dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week_utc(dt_obj: datetime) -> datetime:
    """Return the Monday 00:00 UTC that starts the week containing dt_obj.

    Weekly windows use a single fixed anchor (UTC) so every caller agrees on
    the boundary regardless of the configured local timezone.
    """
    day_start = as_utc(dt_obj).replace(hour=0, minute=0, second=0, microsecond=0)
    return day_start + relativedelta(weekday=MO(-1))


# ==============================================================================
# Date/Time Parsing
# ==============================================================================


def dt_parse(
    dt_input: str | datetime | None, default_tzinfo: ZoneInfo | None = None
) -> datetime | None:
    """Normalize a string or datetime to a timezone-aware datetime.

    Naive inputs get default_tzinfo (or DEFAULT_TIME_ZONE). Returns None for
    empty or unparseable input.
    """
    if not dt_input:
        return None

    if isinstance(dt_input, str):
        try:
            result = datetime.fromisoformat(dt_input)
        except ValueError:
            _LOGGER.debug("Unable to parse datetime string '%s'", dt_input)
            return None
    elif isinstance(dt_input, datetime):
        result = dt_input
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=default_tzinfo or DEFAULT_TIME_ZONE)
    return result


def dt_to_utc(dt_str: str | datetime | None) -> datetime | None:
    """Parse a datetime value, apply timezone if naive, and convert to UTC.

    Example:
        "2025-04-07T14:30:00+00:00" -> datetime(2025, 4, 7, 14, 30, tzinfo=UTC)
    """
    result = dt_parse(dt_str)
    if result is None:
        return None
    return result.astimezone(UTC)


def dt_to_iso(dt_obj: datetime | None) -> str | None:
    """Serialize a datetime as a UTC ISO-8601 string for storage."""
    if dt_obj is None:
        return None
    return as_utc(dt_obj).isoformat()


# ==============================================================================
# Clock Adapter
# ==============================================================================


class Clock:
    """Wall-clock and calendar adapter.

    Production code uses the real UTC clock and the configured local timezone.
    Tests inject a fixed `now` callable and an explicit timezone.
    """

    def __init__(
        self,
        now_fn: Callable[[], datetime] | None = None,
        tz: ZoneInfo | None = None,
    ) -> None:
        """Initialize the clock.

        Args:
            now_fn: Callable returning the current aware datetime (default: UTC now)
            tz: Local timezone override (default: DEFAULT_TIME_ZONE at call time)
        """
        self._now_fn = now_fn or dt_now_utc
        self._tz = tz

    @property
    def tz(self) -> ZoneInfo:
        """Return the local timezone used for day boundaries."""
        return self._tz or DEFAULT_TIME_ZONE

    def now(self) -> datetime:
        """Return the current instant in UTC."""
        return as_utc(self._now_fn())

    def local_midnight(self, instant: datetime) -> datetime:
        """Return local midnight of the day containing instant."""
        return start_of_local_day(instant, self.tz)

    def week_start(self, instant: datetime) -> datetime:
        """Return the canonical week-start instant (Monday 00:00 UTC)."""
        return start_of_week_utc(instant)
