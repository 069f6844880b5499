"""True Range calculations feeding the Gaussian channel band width"""

from collections.abc import Sequence
from typing import Optional

from stockview_app.data.models import PricePoint


def calculate_true_range(current: PricePoint, previous: Optional[PricePoint] = None) -> float:
    """
    Calculate True Range for a single candle

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    Args:
        current: Current candle
        previous: Previous candle (None for first candle)

    Returns:
        True Range value
    """
    if previous is None:
        # First candle case - use high-low range
        return current.high - current.low

    range_hl = current.high - current.low
    range_hc = abs(current.high - previous.close)
    range_lc = abs(current.low - previous.close)

    return max(range_hl, range_hc, range_lc)


def calculate_true_ranges(points: Sequence[PricePoint]) -> list[float]:
    """
    Calculate True Range for every candle in a series

    Args:
        points: Candles in chronological order

    Returns:
        True Range values parallel to the input, empty for empty input
    """
    true_ranges = []
    for i in range(len(points)):
        previous = points[i-1] if i > 0 else None
        true_ranges.append(calculate_true_range(points[i], previous))
    return true_ranges
