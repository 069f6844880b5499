"""Pytest configuration and shared fixtures."""

from datetime import date, timedelta

import pytest

from stockview_app.data.models import PortfolioEntry, PricePoint
from stockview_app.utils.time import to_epoch_seconds

DAY_ZERO = date(2024, 1, 1)


def day(offset: int) -> date:
    """Calendar date `offset` days after DAY_ZERO."""
    return DAY_ZERO + timedelta(days=offset)


def day_ts(offset: int) -> int:
    """Epoch seconds of day(offset) at 00:00 UTC."""
    return to_epoch_seconds(day(offset))


def flat_series(closes: list[float], days: list[int]) -> list[PricePoint]:
    """Series whose candles all have open == high == low == close."""
    return [
        PricePoint(time=day_ts(d), open=c, high=c, low=c, close=c)
        for c, d in zip(closes, days)
    ]


def make_entry(symbol: str, price: float, quantity: int, offset: int,
               entry_id: str = None) -> PortfolioEntry:
    return PortfolioEntry(
        id=entry_id or f"{symbol}-{offset}",
        symbol=symbol,
        purchase_price=price,
        purchase_date=day(offset),
        quantity=quantity,
    )


class StaticPriceProvider:
    """Serves fixed series per symbol and records every fetch."""

    def __init__(self, series=None, errors=None):
        self.series = series or {}
        self.errors = errors or {}
        self.calls = []

    async def fetch(self, symbol, start, end):
        self.calls.append((symbol, start, end))
        if symbol in self.errors:
            raise self.errors[symbol]
        return list(self.series.get(symbol, []))


@pytest.fixture
def sample_candles() -> list[PricePoint]:
    """Thirty daily candles with a rise, a fall and a recovery."""
    closes = [100 + i for i in range(10)] + [110 - i * 2 for i in range(10)] + [92 + i * 3 for i in range(10)]
    candles = []
    previous_close = closes[0]
    for i, close in enumerate(closes):
        open_ = previous_close
        candles.append(PricePoint(
            time=day_ts(i),
            open=float(open_),
            high=float(max(open_, close) + 1.5),
            low=float(min(open_, close) - 1.0),
            close=float(close),
        ))
        previous_close = close
    return candles


@pytest.fixture
def sample_entry_data() -> dict:
    """Raw entry as submitted from the add-to-portfolio form."""
    return {
        "symbol": "aapl",
        "purchasePrice": 150.25,
        "purchaseDate": "3/1/2024",
        "quantity": 10,
    }
