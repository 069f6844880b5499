"""
Price series providers.

The engine depends only on the PriceSeriesProvider contract: an awaitable
`fetch(symbol, start, end)` returning candles sorted ascending by time with
no duplicate timestamps, possibly empty. Providers here cover simulated data,
the Alpha Vantage HTTP API, and a fallback chain between the two.
"""

import asyncio
import random
import socket
from datetime import date, datetime, timezone
from typing import Optional, Protocol, runtime_checkable
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

import structlog

from stockview_app.errors import PriceFetchError
from stockview_app.utils.time import to_epoch_seconds

from .models import PricePoint
from .parsers import parse_alpha_vantage_payload

logger = structlog.get_logger(__name__)

TIMEFRAME_SECONDS = {
    "5min": 5 * 60,
    "1hour": 60 * 60,
    "4hour": 4 * 60 * 60,
    "1day": 24 * 60 * 60,
}

BASE_PRICES = {
    "AAPL": 180.0,
    "GOOGL": 140.0,
    "MSFT": 380.0,
    "AMZN": 155.0,
    "TSLA": 240.0,
    "NVDA": 480.0,
    "META": 320.0,
}
DEFAULT_BASE_PRICE = 100.0


@runtime_checkable
class PriceSeriesProvider(Protocol):
    """Source of OHLC candles keyed by symbol and date range."""

    async def fetch(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        ...


class SimulatedPriceProvider:
    """
    Deterministic random-walk candles.

    The same seed, symbol and window always produce the same series. Daily
    candles skip weekends and are stamped at 00:00 UTC.
    """

    def __init__(self, seed: Optional[int] = None, timeframe: str = "1day"):
        if timeframe not in TIMEFRAME_SECONDS:
            raise ValueError(f"Unsupported timeframe: {timeframe}")
        self.seed = seed
        self.timeframe = timeframe
        self.interval = TIMEFRAME_SECONDS[timeframe]

    async def fetch(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        return self.generate(symbol, start, end)

    def generate(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        rng = random.Random(f"{self.seed}:{symbol.upper()}")
        base_price = BASE_PRICES.get(symbol.upper(), DEFAULT_BASE_PRICE)
        volatility = base_price * 0.02

        first = to_epoch_seconds(start)
        # Intraday series run through the last interval of the end date
        last = to_epoch_seconds(end) + (24 * 60 * 60 - self.interval)

        points = []
        current_price = base_price
        for timestamp in range(first, last + 1, self.interval):
            trend = (rng.random() - 0.48) * volatility
            current_price = max(current_price + trend, base_price * 0.5)

            open_ = current_price
            close = open_ + (rng.random() - 0.5) * volatility
            high = max(open_, close) + rng.random() * volatility * 0.5
            low = min(open_, close) - rng.random() * volatility * 0.5

            current_price = close

            weekday = datetime.fromtimestamp(timestamp, tz=timezone.utc).weekday()
            if self.timeframe == "1day" and weekday >= 5:
                continue

            points.append(PricePoint(
                time=timestamp,
                open=round(open_, 2),
                high=round(high, 2),
                low=round(low, 2),
                close=round(close, 2),
            ))

        return points


class AlphaVantageProvider:
    """Daily and intraday candles from the Alpha Vantage HTTP API."""

    BASE_URL = "https://www.alphavantage.co/query"

    FUNCTIONS = {
        "5min": ("TIME_SERIES_INTRADAY", "5min"),
        "1hour": ("TIME_SERIES_INTRADAY", "60min"),
        "4hour": ("TIME_SERIES_INTRADAY", "60min"),
        "1day": ("TIME_SERIES_DAILY", "daily"),
    }

    def __init__(self, api_key: str, timeframe: str = "1day", timeout_seconds: int = 10):
        if not api_key:
            raise ValueError("Alpha Vantage API key is required")
        if timeframe not in self.FUNCTIONS:
            raise ValueError(f"Unsupported timeframe: {timeframe}")
        self.api_key = api_key
        self.timeframe = timeframe
        self.timeout_seconds = timeout_seconds

    def build_url(self, symbol: str) -> str:
        function, interval = self.FUNCTIONS[self.timeframe]
        query = {
            "function": function,
            "symbol": symbol,
            "interval": interval,
            "apikey": self.api_key,
            "outputsize": "full",
        }
        return f"{self.BASE_URL}?{urlencode(query)}"

    def _request(self, symbol: str) -> bytes:
        req = Request(self.build_url(symbol), headers={"User-Agent": "stockview-app/1.0"})
        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                return response.read()
        except HTTPError as e:
            raise PriceFetchError(f"HTTP {e.code}: {e.reason}", symbol=symbol,
                                  provider="alpha_vantage")
        except (URLError, socket.timeout) as e:
            raise PriceFetchError(f"Connection error: {e}", symbol=symbol,
                                  provider="alpha_vantage")

    async def fetch(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        body = await asyncio.to_thread(self._request, symbol)
        points = parse_alpha_vantage_payload(body, symbol, start, end)
        logger.debug("Fetched price series", symbol=symbol, points=len(points),
                     provider="alpha_vantage")
        return points


class FallbackPriceProvider:
    """Use the fallback provider when the primary fails or returns nothing."""

    def __init__(self, primary: PriceSeriesProvider, fallback: PriceSeriesProvider):
        self.primary = primary
        self.fallback = fallback

    async def fetch(self, symbol: str, start: date, end: date) -> list[PricePoint]:
        try:
            points = await self.primary.fetch(symbol, start, end)
        except PriceFetchError as e:
            logger.warning("Primary price provider failed, using fallback",
                           symbol=symbol, error=str(e))
            return await self.fallback.fetch(symbol, start, end)

        if points:
            return points

        logger.warning("Primary price provider returned no data, using fallback", symbol=symbol)
        return await self.fallback.fetch(symbol, start, end)


def create_default_provider(api_key: Optional[str] = None, timeframe: str = "1day",
                            timeout_seconds: int = 10,
                            seed: Optional[int] = None) -> PriceSeriesProvider:
    """Alpha Vantage with simulated fallback when a key is set, else simulated data only."""
    simulated = SimulatedPriceProvider(seed=seed, timeframe=timeframe)
    if not api_key:
        logger.warning("No API key found, using simulated price data")
        return simulated
    return FallbackPriceProvider(
        AlphaVantageProvider(api_key, timeframe=timeframe, timeout_seconds=timeout_seconds),
        simulated,
    )
