"""Tests for the Gaussian channel overlay"""

import math

import pytest

from stockview_app.config.defaults import GaussianChannelParams
from stockview_app.data.models import FailureReason, GaussianChannel, PricePoint, Trend
from stockview_app.metrics.gaussian import (
    apply_lag,
    calculate_alpha,
    calculate_gaussian_channel,
    is_valid_alpha,
    normalize_poles,
    recursive_filter,
    segment_by_trend,
)
from stockview_app.metrics.true_range import calculate_true_ranges


class TestFilterCoefficient:
    """Test alpha/beta derivation"""

    def test_default_parameters_give_valid_alpha(self):
        alpha, beta = calculate_alpha(144, 4)
        assert 0 < alpha < 1
        assert beta > 0

    def test_alpha_formula(self):
        alpha, beta = calculate_alpha(20, 2)
        expected_beta = (1 - math.cos(2 * math.pi / 20)) / (2 ** (1 / 2) - 1)
        assert beta == pytest.approx(expected_beta)
        assert alpha == pytest.approx(-expected_beta + math.sqrt(expected_beta ** 2 + 2 * expected_beta))

    def test_period_one_yields_invalid_alpha(self):
        alpha, _ = calculate_alpha(1, 9)
        assert not is_valid_alpha(alpha)

    def test_zero_period_yields_nan(self):
        alpha, beta = calculate_alpha(0, 4)
        assert math.isnan(alpha)
        assert math.isnan(beta)
        assert not is_valid_alpha(alpha)

    @pytest.mark.parametrize("poles,expected", [(1, 1), (9, 9), (0, 4), (10, 4), (-3, 4)])
    def test_normalize_poles(self, poles, expected):
        assert normalize_poles(poles) == expected


class TestRecursiveFilter:
    """Test chained single-pole stages"""

    def test_single_stage(self):
        # y0 = 0.5*2 = 1; y1 = 0.5*4 + 0.5*1 = 2.5; y2 = 0.5*6 + 0.5*2.5 = 4.25
        assert recursive_filter(0.5, [2.0, 4.0, 6.0], 1) == [1.0, 2.5, 4.25]

    def test_two_stages_chain_outputs(self):
        # Second stage runs over [1, 2.5, 4.25] from scratch
        assert recursive_filter(0.5, [2.0, 4.0, 6.0], 2) == [0.5, 1.5, 2.875]

    def test_out_of_range_poles_fall_back_to_four(self):
        source = [1.0, 3.0, 2.0, 5.0, 4.0]
        assert recursive_filter(0.3, source, 12) == recursive_filter(0.3, source, 4)

    def test_empty_source(self):
        assert recursive_filter(0.5, [], 4) == []

    def test_does_not_modify_input(self):
        source = [2.0, 4.0, 6.0]
        recursive_filter(0.5, source, 3)
        assert source == [2.0, 4.0, 6.0]


class TestApplyLag:
    """Test reduced-lag momentum adjustment"""

    def test_lag_adjustment(self):
        assert apply_lag([1.0, 2.0, 4.0, 7.0], 2) == [1.0, 2.0, 7.0, 12.0]

    def test_zero_lag_is_copy(self):
        values = [1.0, 2.0]
        adjusted = apply_lag(values, 0)
        assert adjusted == values
        assert adjusted is not values


class TestGaussianChannel:
    """Test full channel calculation"""

    def test_output_parallel_to_input(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles)

        assert channel.success
        assert len(channel.filter_line) == len(sample_candles)
        assert len(channel.upper_band_line) == len(sample_candles)
        assert len(channel.lower_band_line) == len(sample_candles)
        assert len(channel.trends) == len(sample_candles)
        assert [p.time for p in channel.filter_line] == [c.time for c in sample_candles]

    def test_center_line_filters_typical_price(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, poles=3, period=30)
        alpha, _ = calculate_alpha(30, 3)
        expected = recursive_filter(alpha, [c.typical_price for c in sample_candles], 3)
        assert channel.filter == pytest.approx(expected)

    def test_band_width_is_twice_scaled_true_range(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, multiplier=2.5, period=20)
        for upper, lower, tr in zip(channel.upper_band, channel.lower_band, channel.filtered_true_range):
            assert upper - lower == pytest.approx(2 * 2.5 * tr)

    def test_single_pole_fast_response_is_noop(self, sample_candles):
        plain = calculate_gaussian_channel(sample_candles, poles=1, period=20)
        fast = calculate_gaussian_channel(sample_candles, poles=1, period=20, fast_response=True)
        assert fast.filter == plain.filter
        assert fast.upper_band == plain.upper_band
        assert fast.lower_band == plain.lower_band

    def test_fast_response_averages_with_single_pole(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, poles=4, period=20, fast_response=True)
        alpha, _ = calculate_alpha(20, 4)
        source = [c.typical_price for c in sample_candles]
        multi = recursive_filter(alpha, source, 4)
        single = recursive_filter(alpha, source, 1)
        assert channel.filter == pytest.approx([(m + s) / 2 for m, s in zip(multi, single)])

    def test_reduced_lag_adjusts_source_and_true_range(self, sample_candles):
        # lag = floor((10 - 1) / (2 * 2)) = 2
        channel = calculate_gaussian_channel(sample_candles, poles=2, period=10, reduced_lag=True)
        alpha, _ = calculate_alpha(10, 2)
        source = apply_lag([c.typical_price for c in sample_candles], 2)
        true_range = apply_lag(calculate_true_ranges(sample_candles), 2)

        assert channel.filter == pytest.approx(recursive_filter(alpha, source, 2))
        assert channel.filtered_true_range == pytest.approx(recursive_filter(alpha, true_range, 2))

    def test_reduced_lag_without_lag_is_unchanged(self, sample_candles):
        # lag = floor((5 - 1) / (2 * 4)) = 0
        plain = calculate_gaussian_channel(sample_candles, poles=4, period=5)
        reduced = calculate_gaussian_channel(sample_candles, poles=4, period=5, reduced_lag=True)
        assert reduced.filter == plain.filter

    def test_params_object_and_overrides(self, sample_candles):
        params = GaussianChannelParams(poles=2, period=30)
        from_params = calculate_gaussian_channel(sample_candles, params)
        from_overrides = calculate_gaussian_channel(sample_candles, poles=2, period=30)
        assert from_params.filter == from_overrides.filter

    def test_invalid_alpha_returns_empty_failure(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, period=1, poles=9)

        assert not channel.success
        assert channel.failure_reason is FailureReason.INVALID_PARAMETERS
        assert channel.filter_line == []
        assert channel.upper_band_line == []
        assert channel.lower_band_line == []
        assert channel.trends == []
        assert channel.colors == []

    def test_empty_input_is_failure(self):
        channel = calculate_gaussian_channel([])
        assert not channel.success
        assert channel.failure_reason is FailureReason.EMPTY_INPUT
        assert len(channel) == 0


class TestTrends:
    """Test trend coloring"""

    def test_first_point_is_bullish(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, period=20)
        assert channel.trends[0] is Trend.BULLISH

    def test_trend_follows_filter_direction(self, sample_candles):
        channel = calculate_gaussian_channel(sample_candles, period=10, poles=2)
        for i in range(1, len(channel.filter)):
            expected = Trend.BULLISH if channel.filter[i] >= channel.filter[i - 1] else Trend.BEARISH
            assert channel.trends[i] is expected
        assert Trend.BEARISH in channel.trends

    def test_flat_filter_counts_as_bullish(self):
        candles = [PricePoint(time=i, open=0, high=0, low=0, close=0) for i in range(12)]
        channel = calculate_gaussian_channel(candles, period=20)
        assert set(channel.trends) == {Trend.BULLISH}

    def test_colors(self):
        assert Trend.BULLISH.color == "#0aff68"
        assert Trend.BEARISH.color == "#ff0a5a"


class TestSegmentByTrend:
    """Test trend segmentation for rendering"""

    def _channel(self, values):
        trends = [Trend.BULLISH] + [
            Trend.BULLISH if values[i] >= values[i - 1] else Trend.BEARISH
            for i in range(1, len(values))
        ]
        return GaussianChannel.success_with(
            times=list(range(len(values))),
            filter_values=values,
            filtered_true_range=[1.0] * len(values),
            multiplier=1.0,
            trends=trends,
            alpha=0.5,
            beta=0.5,
        )

    def test_segments_join_at_boundaries(self):
        segments = segment_by_trend(self._channel([1.0, 2.0, 3.0, 2.0, 1.0, 2.0]))

        assert [s.trend for s in segments] == [Trend.BULLISH, Trend.BEARISH, Trend.BULLISH]
        assert [p.time for p in segments[0].filter_line] == [0, 1, 2, 3]
        assert [p.time for p in segments[1].filter_line] == [3, 4, 5]
        assert [p.time for p in segments[2].filter_line] == [5]

    def test_band_lines_segmented_alongside_filter(self):
        segments = segment_by_trend(self._channel([1.0, 2.0, 3.0, 2.0, 1.0, 2.0]))
        for segment in segments:
            filter_times = [p.time for p in segment.filter_line]
            assert [p.time for p in segment.upper_band_line] == filter_times
            assert [p.time for p in segment.lower_band_line] == filter_times
        assert segments[1].upper_band_line[0].value == 3.0  # filter 2.0 + 1.0

    def test_single_trend_is_one_segment(self):
        segments = segment_by_trend(self._channel([1.0, 2.0, 3.0]))
        assert len(segments) == 1
        assert segments[0].color == "#0aff68"
        assert len(segments[0].filter_line) == 3

    def test_failed_channel_has_no_segments(self):
        failed = GaussianChannel.failed(FailureReason.INVALID_PARAMETERS, "bad alpha")
        assert segment_by_trend(failed) == []
