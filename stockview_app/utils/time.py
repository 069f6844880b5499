"""
Date-range resolution and epoch conversion utilities.

Chart windows are selected from a closed set of range types; every window
resolves to a pair of calendar dates. Calendar dates are converted to epoch
seconds at 00:00 UTC so they compare directly with price point timestamps.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union


class RangeType(str, Enum):
    """Selectable chart windows."""
    YTD = "ytd"
    ONE_YEAR = "1y"
    FIVE_YEAR = "5y"
    CUSTOM = "custom"

    @classmethod
    def coerce(cls, value: Union["RangeType", str, None]) -> "RangeType":
        """Convert a string to a RangeType, falling back to one year."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.ONE_YEAR


@dataclass(frozen=True)
class CustomRange:
    """Explicit start/end dates for a custom window."""
    start: date
    end: date


@dataclass(frozen=True)
class DateRange:
    """Resolved chart window."""
    start: date
    end: date


def today_utc() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def subtract_years(day: date, years: int) -> date:
    """
    Move a date back by whole calendar years.

    February 29 maps to February 28 when the target year is not a leap year.
    """
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def resolve_date_range(
    range_type: Union[RangeType, str, None] = RangeType.ONE_YEAR,
    custom: Optional[CustomRange] = None,
    today: Optional[date] = None,
) -> DateRange:
    """
    Resolve a range selection into concrete start and end dates.

    Args:
        range_type: Window selection; unknown values fall back to one year
        custom: Explicit dates, used only with RangeType.CUSTOM
        today: Reference date, defaults to the current UTC date

    Returns:
        DateRange with inclusive start and end dates
    """
    range_type = RangeType.coerce(range_type)
    end = today if today is not None else today_utc()

    if range_type is RangeType.YTD:
        return DateRange(start=date(end.year, 1, 1), end=end)

    if range_type is RangeType.FIVE_YEAR:
        return DateRange(start=subtract_years(end, 5), end=end)

    if range_type is RangeType.CUSTOM and custom is not None:
        return DateRange(start=custom.start, end=custom.end)

    return DateRange(start=subtract_years(end, 1), end=end)


def to_epoch_seconds(day: Union[date, datetime]) -> int:
    """
    Convert a calendar date to integer epoch seconds at 00:00 UTC.

    Naive datetimes are treated as UTC; aware datetimes keep their offset.
    """
    if isinstance(day, datetime):
        if day.tzinfo is None:
            day = day.replace(tzinfo=timezone.utc)
        return int(day.timestamp())
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp())


def from_epoch_seconds(timestamp: int) -> date:
    """Convert epoch seconds to the UTC calendar date."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()

