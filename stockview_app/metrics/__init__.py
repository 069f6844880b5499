"""Technical analysis calculations for chart overlays"""

from .gaussian import (
    calculate_alpha,
    calculate_gaussian_channel,
    recursive_filter,
    segment_by_trend,
)
from .true_range import calculate_true_range, calculate_true_ranges

__all__ = [
    "calculate_alpha",
    "calculate_gaussian_channel",
    "calculate_true_range",
    "calculate_true_ranges",
    "recursive_filter",
    "segment_by_trend",
]
