"""
Gaussian channel: a recursive (IIR) Gaussian filter with volatility bands.

The filter is a cascade of independent single-pole smoothing stages. Each
stage runs over the whole series and feeds the next one, so N poles means N
chained passes, not a single N-th order recursion; the two diverge
numerically. Bands are the filtered true range scaled by a multiplier
around the filtered typical price.
"""

import dataclasses
import math
from collections.abc import Sequence
from typing import Any, Optional

from stockview_app.config.defaults import GaussianChannelParams
from stockview_app.data.models import (
    ChannelPoint,
    FailureReason,
    GaussianChannel,
    PricePoint,
    Trend,
    TrendSegment,
)
from stockview_app.logging.config import get_calculation_logger

from .true_range import calculate_true_ranges

logger = get_calculation_logger(__name__)

MIN_POLES = 1
MAX_POLES = 9
DEFAULT_POLES = 4


def normalize_poles(poles: int) -> int:
    """Return poles if within 1-9, otherwise the default of 4."""
    if not isinstance(poles, int) or poles < MIN_POLES or poles > MAX_POLES:
        return DEFAULT_POLES
    return poles


def calculate_alpha(period: float, poles: int) -> tuple[float, float]:
    """
    Derive the single-pole smoothing coefficient.

    beta  = (1 - cos(2*pi / period)) / (2^(1/poles) - 1)
    alpha = -beta + sqrt(beta^2 + 2*beta)

    Args:
        period: Sampling period controlling the cutoff
        poles: Number of chained stages

    Returns:
        (alpha, beta); both nan when the period cannot produce a coefficient
    """
    try:
        beta = (1 - math.cos(2 * math.pi / period)) / (math.pow(2, 1 / poles) - 1)
        alpha = -beta + math.sqrt(beta ** 2 + 2 * beta)
    except (ZeroDivisionError, ValueError, OverflowError):
        return math.nan, math.nan
    return alpha, beta


def is_valid_alpha(alpha: float) -> bool:
    """Alpha must be finite and strictly between 0 and 1."""
    return math.isfinite(alpha) and 0 < alpha < 1


def apply_lag(values: Sequence[float], lag: int) -> list[float]:
    """
    Momentum-boost a series by its own change over `lag` points.

    adjusted[i] = v[i] + (v[i] - v[i - lag]) for i >= lag, unchanged before.
    """
    if lag <= 0:
        return list(values)
    return [
        value + (value - values[i - lag]) if i >= lag else value
        for i, value in enumerate(values)
    ]


def _single_pole(alpha: float, source: Sequence[float]) -> list[float]:
    """One smoothing stage: y[0] = a*x[0]; y[i] = a*x[i] + (1-a)*y[i-1]."""
    decay = 1 - alpha
    output: list[float] = []
    previous = 0.0
    for i, value in enumerate(source):
        previous = alpha * value if i == 0 else alpha * value + decay * previous
        output.append(previous)
    return output


def recursive_filter(alpha: float, source: Sequence[float], poles: int) -> list[float]:
    """
    Apply `poles` chained single-pole stages to a series.

    Each stage restarts from the first element of its input and its output
    becomes the next stage's input.

    Args:
        alpha: Smoothing coefficient in (0, 1)
        source: Input series
        poles: Number of stages, out-of-range values fall back to 4

    Returns:
        Filtered series, same length as the input
    """
    filtered = list(source)
    for _ in range(normalize_poles(poles)):
        filtered = _single_pole(alpha, filtered)
    return filtered


def _average(first: Sequence[float], second: Sequence[float]) -> list[float]:
    return [(a + b) / 2 for a, b in zip(first, second)]


def _trends(filter_values: Sequence[float]) -> list[Trend]:
    trends = []
    for i, value in enumerate(filter_values):
        if i == 0 or value >= filter_values[i - 1]:
            trends.append(Trend.BULLISH)
        else:
            trends.append(Trend.BEARISH)
    return trends


def calculate_gaussian_channel(
    points: Sequence[PricePoint],
    params: Optional[GaussianChannelParams] = None,
    **overrides: Any,
) -> GaussianChannel:
    """
    Calculate the Gaussian channel for a candle series.

    Invalid parameters do not raise: the returned channel is marked failed
    with every sequence empty, and callers must check `success` before
    rendering.

    Args:
        points: Candles in chronological order
        params: Channel parameters, defaults to GaussianChannelParams()
        **overrides: Individual parameter overrides (poles, period, ...)

    Returns:
        GaussianChannel with one value per input candle, or a failed channel
    """
    params = params or GaussianChannelParams()
    if overrides:
        params = dataclasses.replace(params, **overrides)

    if not points:
        return GaussianChannel.failed(FailureReason.EMPTY_INPUT, "No candles supplied")

    poles = normalize_poles(params.poles)
    alpha, beta = calculate_alpha(params.period, poles)

    if not is_valid_alpha(alpha):
        logger.warning(
            "Invalid Gaussian filter coefficient",
            alpha=alpha,
            beta=beta,
            poles=poles,
            period=params.period
        )
        return GaussianChannel.failed(
            FailureReason.INVALID_PARAMETERS,
            f"Derived alpha {alpha} is outside (0, 1) for period={params.period}, poles={poles}",
            alpha=alpha,
            beta=beta,
        )

    logger.debug(
        "Gaussian channel parameters",
        poles=poles,
        period=params.period,
        alpha=alpha,
        beta=beta,
        candles=len(points)
    )

    source = [p.typical_price for p in points]
    true_range = calculate_true_ranges(points)

    lag = math.floor((params.period - 1) / (2 * poles))
    if params.reduced_lag and lag > 0:
        source = apply_lag(source, lag)
        true_range = apply_lag(true_range, lag)

    filter_values = recursive_filter(alpha, source, poles)
    filtered_tr = recursive_filter(alpha, true_range, poles)

    if params.fast_response and poles > 1:
        filter_values = _average(filter_values, recursive_filter(alpha, source, 1))
        filtered_tr = _average(filtered_tr, recursive_filter(alpha, true_range, 1))

    return GaussianChannel.success_with(
        times=[p.time for p in points],
        filter_values=filter_values,
        filtered_true_range=filtered_tr,
        multiplier=params.multiplier,
        trends=_trends(filter_values),
        alpha=alpha,
        beta=beta,
    )


def segment_by_trend(channel: GaussianChannel) -> list[TrendSegment]:
    """
    Split the channel lines into contiguous same-trend runs.

    The first point of each run is also appended to the end of the previous
    run so adjacent segments connect without a visual gap.

    Args:
        channel: Successful Gaussian channel

    Returns:
        Segments in time order; empty for a failed or empty channel
    """
    if not channel.success or not channel.trends:
        return []

    segments: list[TrendSegment] = []
    current_trend = channel.trends[0]
    lines: tuple[list[ChannelPoint], ...] = ([], [], [])

    for i, trend in enumerate(channel.trends):
        point_set = (
            channel.filter_line[i],
            channel.upper_band_line[i],
            channel.lower_band_line[i],
        )
        if trend is not current_trend:
            for line, point in zip(lines, point_set):
                line.append(point)
            segments.append(TrendSegment(current_trend, *lines))
            current_trend = trend
            lines = ([], [], [])
        for line, point in zip(lines, point_set):
            line.append(point)

    segments.append(TrendSegment(current_trend, *lines))
    return segments
