"""Step-function price lookup over sparse price series."""

from bisect import bisect_right
from collections.abc import Sequence
from typing import Optional

from stockview_app.data.models import PricePoint


def price_at_or_before(series: Optional[Sequence[PricePoint]], timestamp: int) -> Optional[float]:
    """
    Close price of the latest point at or before `timestamp`.

    Prices are held flat between observations. A query before the first
    point returns the first close; an empty or missing series returns None.
    """
    if not series:
        return None
    return SeriesPriceLookup(series).price_at(timestamp)


class SeriesPriceLookup:
    """Price lookup for one symbol with the time axis cached for binary search."""

    def __init__(self, series: Optional[Sequence[PricePoint]]):
        self.series = list(series or [])
        self.times = [point.time for point in self.series]

    def __len__(self) -> int:
        return len(self.series)

    def price_at(self, timestamp: int) -> Optional[float]:
        if not self.series:
            return None
        index = bisect_right(self.times, timestamp)
        if index == 0:
            return self.series[0].close
        return self.series[index - 1].close
