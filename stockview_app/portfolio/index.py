"""
Portfolio performance index calculation.

Merges per-symbol price series into a single index of total portfolio value,
rescaled so the first valid point is 100. Lots join the portfolio on their
purchase dates, so each purchase shows up as a rebalancing marker rather
than as a jump in performance.
"""

import asyncio
from decimal import ROUND_HALF_UP, Decimal
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional, Union

from stockview_app.config.defaults import DefaultConfig, get_default_config
from stockview_app.data.models import (
    IndexMetadata,
    IndexPoint,
    PortfolioEntry,
    PortfolioIndex,
    PricePoint,
    RebalancingMarker,
)
from stockview_app.data.provider import PriceSeriesProvider
from stockview_app.data.validators import validate_series_order
from stockview_app.errors import PriceFetchError, TemporalDataError
from stockview_app.logging.config import get_calculation_logger
from stockview_app.utils.time import (
    CustomRange,
    RangeType,
    resolve_date_range,
    subtract_years,
    today_utc,
)

from .holdings import calculate_cost_basis
from .lookup import SeriesPriceLookup
from .store import PortfolioRepository

logger = get_calculation_logger(__name__)

BASELINE_INDEX = 100.0
_CENT = Decimal("0.01")


def round_index_value(value: float) -> float:
    """Round to cents with ties going away from zero, on the exact binary value."""
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def distinct_symbols(entries: Iterable[PortfolioEntry]) -> list[str]:
    """Symbols in first-seen order without duplicates."""
    return list(dict.fromkeys(entry.symbol for entry in entries))


async def fetch_symbol_series(
    provider: PriceSeriesProvider,
    symbols: Sequence[str],
    start: date,
    end: date,
) -> dict[str, list[PricePoint]]:
    """
    Fetch one series per distinct symbol concurrently.

    Any failed fetch fails the whole call; there is no partial result.

    Raises:
        PriceFetchError: If any symbol's fetch raises, or a series is not
            strictly ascending by time
    """
    unique = list(dict.fromkeys(symbols))
    try:
        results = await asyncio.gather(*(provider.fetch(symbol, start, end) for symbol in unique))
    except PriceFetchError:
        raise
    except Exception as e:
        raise PriceFetchError(f"Price fetch failed: {e}", context={"symbols": unique}) from e

    for symbol, series in zip(unique, results):
        try:
            validate_series_order(series)
        except TemporalDataError as e:
            raise PriceFetchError(f"Unordered price series: {e}", symbol=symbol) from e

    return {symbol: list(series) for symbol, series in zip(unique, results)}


def build_timestamp_axis(series_by_symbol: dict[str, Sequence[PricePoint]]) -> list[int]:
    """Sorted, deduplicated union of every timestamp in every series."""
    return sorted({point.time for series in series_by_symbol.values() for point in series})


def build_markers(entries: Iterable[PortfolioEntry]) -> list[RebalancingMarker]:
    """One marker per entry at its purchase time, sorted ascending."""
    markers = [
        RebalancingMarker(
            time=entry.purchase_time,
            symbol=entry.symbol,
            quantity=entry.quantity,
            purchase_price=entry.purchase_price,
            cost_basis=calculate_cost_basis(entry),
        )
        for entry in entries
    ]
    return sorted(markers, key=lambda marker: marker.time)


def compute_index_points(
    entries: Sequence[PortfolioEntry],
    series_by_symbol: dict[str, Sequence[PricePoint]],
) -> tuple[list[IndexPoint], Optional[float]]:
    """
    Compute index points over the master timestamp axis.

    Timestamps before the first purchase are skipped, as are timestamps at
    which any active entry has no resolvable price; a partial total would
    silently exclude a holding. Timestamps totalling zero before the baseline
    is set are dropped too, so the baseline is never zero.

    Returns:
        (index points, baseline total value or None when no point was valid)
    """
    lookups = {symbol: SeriesPriceLookup(series) for symbol, series in series_by_symbol.items()}

    points: list[IndexPoint] = []
    baseline: Optional[float] = None
    dropped = 0

    for timestamp in build_timestamp_axis(series_by_symbol):
        active = [entry for entry in entries if entry.purchase_time <= timestamp]
        if not active:
            continue

        total_value = 0.0
        has_all_prices = True
        for entry in active:
            lookup = lookups.get(entry.symbol)
            price = lookup.price_at(timestamp) if lookup is not None else None
            if price is None:
                has_all_prices = False
                break
            total_value += price * entry.quantity

        if not has_all_prices:
            dropped += 1
            continue

        if baseline is None:
            if total_value == 0:
                dropped += 1
                continue
            baseline = total_value

        points.append(IndexPoint(
            time=timestamp,
            value=round_index_value(total_value / baseline * BASELINE_INDEX),
        ))

    if dropped:
        logger.debug("Dropped timestamps with unresolved prices", dropped=dropped)

    return points, baseline


def build_metadata(
    start_date: date,
    end_date: date,
    chart_data: Sequence[IndexPoint],
    baseline_value: Optional[float],
    entries: Sequence[PortfolioEntry],
) -> IndexMetadata:
    if chart_data:
        current_value = chart_data[-1].value
        total_return = chart_data[-1].value - BASELINE_INDEX
    else:
        current_value = BASELINE_INDEX
        total_return = 0

    return IndexMetadata(
        start_date=start_date,
        end_date=end_date,
        baseline_value=baseline_value,
        current_value=current_value,
        total_return=total_return,
        symbol_count=len(distinct_symbols(entries)),
        position_count=len(entries),
    )


class PortfolioIndexCalculator:
    """
    Calculates the normalized portfolio performance index.

    Entries come from the injected repository unless passed explicitly, and
    prices from the injected provider. The calculator keeps no state between
    calls.
    """

    def __init__(self, provider: PriceSeriesProvider,
                 store: Optional[PortfolioRepository] = None,
                 config: Optional[DefaultConfig] = None):
        self.provider = provider
        self.store = store
        self.config = config or get_default_config()

    def _entries(self, entries: Optional[Sequence[PortfolioEntry]]) -> list[PortfolioEntry]:
        if entries is not None:
            return list(entries)
        if self.store is None:
            return []
        return self.store.list()

    async def calculate(
        self,
        range_type: Union[RangeType, str, None] = None,
        custom_range: Optional[CustomRange] = None,
        entries: Optional[Sequence[PortfolioEntry]] = None,
        today: Optional[date] = None,
    ) -> PortfolioIndex:
        """
        Calculate the portfolio index for a chart window.

        The index always starts at the earliest purchase date; only the
        window's end date is taken from the range selection.

        Args:
            range_type: Window selection, defaults to the configured range
            custom_range: Explicit dates for RangeType.CUSTOM
            entries: Entries to use instead of the repository contents
            today: Reference date for range resolution

        Returns:
            PortfolioIndex; empty for an empty portfolio

        Raises:
            PriceFetchError: If any symbol's price fetch fails
        """
        entries = self._entries(entries)
        if not entries:
            return PortfolioIndex.empty()

        if range_type is None:
            range_type = self.config.portfolio.default_range

        start_date = min(entry.purchase_date for entry in entries)
        window = resolve_date_range(range_type, custom_range, today=today)
        symbols = distinct_symbols(entries)

        series_by_symbol = await fetch_symbol_series(self.provider, symbols, start_date, window.end)

        chart_data, baseline = compute_index_points(entries, series_by_symbol)
        markers = build_markers(entries)
        metadata = build_metadata(start_date, window.end, chart_data, baseline, entries)

        logger.info(
            "Portfolio index calculated",
            points=len(chart_data),
            symbols=metadata.symbol_count,
            positions=metadata.position_count,
            start_date=start_date.isoformat(),
            end_date=window.end.isoformat(),
            total_return=metadata.total_return
        )

        return PortfolioIndex(chart_data=chart_data, markers=markers, metadata=metadata)


async def fetch_current_prices(
    provider: PriceSeriesProvider,
    symbols: Sequence[str],
    today: Optional[date] = None,
    lookback_years: int = 1,
) -> dict[str, float]:
    """
    Latest close per symbol over the trailing lookback window.

    Symbols with no data are left out of the result.

    Raises:
        PriceFetchError: If any symbol's price fetch fails
    """
    if not symbols:
        return {}

    end = today if today is not None else today_utc()
    start = subtract_years(end, lookback_years)
    series_by_symbol = await fetch_symbol_series(provider, symbols, start, end)

    return {
        symbol: series[-1].close
        for symbol, series in series_by_symbol.items()
        if series
    }
