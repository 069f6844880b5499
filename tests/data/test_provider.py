"""Tests for price series providers"""

import asyncio
from datetime import date, datetime, timezone
from unittest.mock import MagicMock, patch
from urllib.error import URLError

import orjson
import pytest

from conftest import StaticPriceProvider, flat_series
from stockview_app.data.provider import (
    AlphaVantageProvider,
    FallbackPriceProvider,
    PriceSeriesProvider,
    SimulatedPriceProvider,
    create_default_provider,
)
from stockview_app.data.validators import validate_price_point, validate_series_order
from stockview_app.errors import PriceFetchError


def _api_response(payload):
    response = MagicMock()
    response.read.return_value = orjson.dumps(payload)
    response.__enter__.return_value = response
    return response


class TestSimulatedPriceProvider:
    """Test deterministic simulated candles"""

    def test_implements_protocol(self):
        assert isinstance(SimulatedPriceProvider(), PriceSeriesProvider)

    def test_skips_weekends(self):
        # 2024-01-01 is a Monday; two full weeks
        points = SimulatedPriceProvider(seed=1).generate("AAPL", date(2024, 1, 1), date(2024, 1, 14))

        assert len(points) == 10
        weekdays = {datetime.fromtimestamp(p.time, tz=timezone.utc).weekday() for p in points}
        assert weekdays == {0, 1, 2, 3, 4}

    def test_series_is_well_formed(self):
        points = SimulatedPriceProvider(seed=7).generate("MSFT", date(2024, 1, 1), date(2024, 3, 31))

        validate_series_order(points)
        for point in points:
            validate_price_point(point)

    def test_deterministic_for_seed(self):
        first = SimulatedPriceProvider(seed=3).generate("TSLA", date(2024, 1, 1), date(2024, 2, 1))
        second = SimulatedPriceProvider(seed=3).generate("TSLA", date(2024, 1, 1), date(2024, 2, 1))
        assert first == second

    def test_symbols_differ(self):
        provider = SimulatedPriceProvider(seed=3)
        assert provider.generate("AAA", date(2024, 1, 1), date(2024, 1, 10)) != \
            provider.generate("BBB", date(2024, 1, 1), date(2024, 1, 10))

    def test_intraday_covers_end_date(self):
        points = SimulatedPriceProvider(seed=1, timeframe="1hour").generate(
            "AAPL", date(2024, 1, 1), date(2024, 1, 2)
        )
        assert len(points) == 48

    def test_fetch_is_awaitable(self):
        points = asyncio.run(SimulatedPriceProvider(seed=1).fetch("AAPL", date(2024, 1, 1), date(2024, 1, 5)))
        assert len(points) == 5

    def test_unknown_timeframe(self):
        with pytest.raises(ValueError):
            SimulatedPriceProvider(timeframe="1week")


class TestAlphaVantageProvider:
    """Test HTTP provider with urlopen patched"""

    def test_fetch_parses_response(self):
        payload = {"Time Series (Daily)": {
            "2024-01-02": {"1. open": "9", "2. high": "10", "3. low": "8", "4. close": "10"},
        }}
        provider = AlphaVantageProvider("key")

        with patch("stockview_app.data.provider.urlopen", return_value=_api_response(payload)):
            points = asyncio.run(provider.fetch("IBM", date(2024, 1, 1), date(2024, 1, 5)))

        assert len(points) == 1
        assert points[0].close == 10.0

    def test_connection_error(self):
        provider = AlphaVantageProvider("key")

        with patch("stockview_app.data.provider.urlopen", side_effect=URLError("unreachable")):
            with pytest.raises(PriceFetchError) as exc_info:
                asyncio.run(provider.fetch("IBM", date(2024, 1, 1), date(2024, 1, 5)))
        assert exc_info.value.symbol == "IBM"

    def test_url(self):
        url = AlphaVantageProvider("secret", timeframe="1hour").build_url("IBM")
        assert "function=TIME_SERIES_INTRADAY" in url
        assert "interval=60min" in url
        assert "apikey=secret" in url

    def test_requires_key(self):
        with pytest.raises(ValueError):
            AlphaVantageProvider("")


class TestFallbackPriceProvider:
    """Test primary/fallback chaining"""

    def test_primary_used_when_it_has_data(self):
        primary = StaticPriceProvider({"X": flat_series([1.0], [0])})
        fallback = StaticPriceProvider({"X": flat_series([2.0], [0])})
        points = asyncio.run(FallbackPriceProvider(primary, fallback).fetch("X", date(2024, 1, 1), date(2024, 1, 2)))

        assert points[0].close == 1.0
        assert fallback.calls == []

    def test_fallback_on_error(self):
        primary = StaticPriceProvider(errors={"X": PriceFetchError("down")})
        fallback = StaticPriceProvider({"X": flat_series([2.0], [0])})
        points = asyncio.run(FallbackPriceProvider(primary, fallback).fetch("X", date(2024, 1, 1), date(2024, 1, 2)))

        assert points[0].close == 2.0

    def test_fallback_on_empty(self):
        primary = StaticPriceProvider({"X": []})
        fallback = StaticPriceProvider({"X": flat_series([2.0], [0])})
        points = asyncio.run(FallbackPriceProvider(primary, fallback).fetch("X", date(2024, 1, 1), date(2024, 1, 2)))

        assert points[0].close == 2.0

    def test_fallback_on_malformed_api_candle(self):
        payload = {"Time Series (Daily)": {
            "2024-01-02": {"1. open": "9", "2. high": "10", "3. low": "8"},
        }}
        provider = FallbackPriceProvider(AlphaVantageProvider("key"), SimulatedPriceProvider(seed=1))

        with patch("stockview_app.data.provider.urlopen", return_value=_api_response(payload)):
            points = asyncio.run(provider.fetch("IBM", date(2024, 1, 1), date(2024, 1, 5)))

        assert points == SimulatedPriceProvider(seed=1).generate("IBM", date(2024, 1, 1), date(2024, 1, 5))

    def test_other_errors_propagate(self):
        primary = StaticPriceProvider(errors={"X": RuntimeError("bug")})
        fallback = StaticPriceProvider({"X": flat_series([2.0], [0])})

        with pytest.raises(RuntimeError):
            asyncio.run(FallbackPriceProvider(primary, fallback).fetch("X", date(2024, 1, 1), date(2024, 1, 2)))


class TestCreateDefaultProvider:
    """Test provider selection"""

    def test_without_key(self):
        assert isinstance(create_default_provider(), SimulatedPriceProvider)

    def test_with_key(self):
        provider = create_default_provider(api_key="key")
        assert isinstance(provider, FallbackPriceProvider)
        assert isinstance(provider.primary, AlphaVantageProvider)
