"""
Validation checks for candles and price series.

Overlay validation runs before the Gaussian channel is calculated; a failed
check means the overlay is omitted rather than reported to the user.
"""

import math
from collections.abc import Sequence

from stockview_app.errors import InsufficientDataError, MalformedDataError, TemporalDataError

from .models import PricePoint

DEFAULT_MIN_OVERLAY_CANDLES = 10


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_overlay_candles(points: Sequence[PricePoint],
                             min_points: int = DEFAULT_MIN_OVERLAY_CANDLES) -> None:
    """
    Check that a candle series can feed the Gaussian channel.

    Args:
        points: Candles in chronological order
        min_points: Minimum number of candles required

    Raises:
        InsufficientDataError: Fewer than min_points candles
        MalformedDataError: A candle has a missing or non-finite high, low or close
    """
    if points is None or len(points) < min_points:
        available = 0 if points is None else len(points)
        raise InsufficientDataError(
            f"Gaussian channel needs at least {min_points} candles, got {available}",
            required_count=min_points,
            available_count=available
        )

    for index, point in enumerate(points):
        for field_name in ("high", "low", "close"):
            value = getattr(point, field_name, None)
            if not _is_finite_number(value):
                raise MalformedDataError(
                    f"Candle {index} has invalid {field_name}: {value!r}",
                    field=field_name,
                    raw_value=value,
                    context={"index": index, "time": getattr(point, "time", None)}
                )


def validate_price_point(point: PricePoint) -> None:
    """
    Validate OHLC consistency of a single candle.

    Raises:
        MalformedDataError: If low <= min(open, close) <= max(open, close) <= high fails
    """
    for field_name in ("open", "high", "low", "close"):
        value = getattr(point, field_name)
        if not _is_finite_number(value):
            raise MalformedDataError(
                f"Candle at {point.time} has invalid {field_name}: {value!r}",
                field=field_name,
                raw_value=value
            )

    if point.high < max(point.open, point.close):
        raise MalformedDataError(
            f"High {point.high} must be >= max(open {point.open}, close {point.close})",
            field="high",
            raw_value=point.high
        )

    if point.low > min(point.open, point.close):
        raise MalformedDataError(
            f"Low {point.low} must be <= min(open {point.open}, close {point.close})",
            field="low",
            raw_value=point.low
        )


def validate_series_order(points: Sequence[PricePoint]) -> None:
    """
    Validate that timestamps are strictly increasing.

    Raises:
        TemporalDataError: On a duplicate or out-of-order timestamp
    """
    for previous, current in zip(points, points[1:]):
        if current.time <= previous.time:
            raise TemporalDataError(
                f"Timestamp {current.time} does not follow {previous.time}",
                timestamp=current.time,
                previous_timestamp=previous.time
            )
