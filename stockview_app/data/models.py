"""
Canonical data models for price series, portfolio entries and derived output.

Inputs (price points, portfolio entries) are immutable snapshots read from
collaborators. Derived objects (index points, channel points, markers) are
value objects regenerated on every calculation and owned by the caller.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from stockview_app.utils.time import to_epoch_seconds


@dataclass(frozen=True)
class PricePoint:
    """OHLC candle keyed by UTC epoch seconds."""
    time: int          # Epoch seconds, UTC
    open: float
    high: float
    low: float
    close: float

    @property
    def typical_price(self) -> float:
        """HLC3 typical price."""
        return (self.high + self.low + self.close) / 3

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PricePoint":
        return cls(
            time=int(data["time"]),
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }


@dataclass(frozen=True)
class PortfolioEntry:
    """One lot of a symbol purchased on one date."""
    id: str
    symbol: str
    purchase_price: float
    purchase_date: date
    quantity: int
    created_at: Optional[str] = None   # ISO8601, set by the store
    updated_at: Optional[str] = None   # ISO8601, set by the store

    @property
    def cost_basis(self) -> float:
        """Total amount paid for the lot."""
        return self.purchase_price * self.quantity

    @property
    def purchase_time(self) -> int:
        """Purchase date as epoch seconds at 00:00 UTC."""
        return to_epoch_seconds(self.purchase_date)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PortfolioEntry":
        return cls(
            id=str(data["id"]),
            symbol=data["symbol"],
            purchase_price=float(data["purchasePrice"]),
            purchase_date=date.fromisoformat(data["purchaseDate"]),
            quantity=int(data["quantity"]),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        result = {
            "id": self.id,
            "symbol": self.symbol,
            "purchasePrice": self.purchase_price,
            "purchaseDate": self.purchase_date.isoformat(),
            "quantity": self.quantity,
        }
        if self.created_at is not None:
            result["createdAt"] = self.created_at
        if self.updated_at is not None:
            result["updatedAt"] = self.updated_at
        return result


@dataclass(frozen=True)
class RebalancingMarker:
    """Purchase event annotated on the performance index."""
    time: int
    symbol: str
    quantity: int
    purchase_price: float
    cost_basis: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "symbol": self.symbol,
            "quantity": self.quantity,
            "purchasePrice": self.purchase_price,
            "costBasis": self.cost_basis,
        }


@dataclass(frozen=True)
class IndexPoint:
    """Portfolio index value (baseline = 100) at a timestamp."""
    time: int
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "value": self.value}


@dataclass(frozen=True)
class ChannelPoint:
    """One point of a Gaussian channel line."""
    time: int
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "value": self.value}


@dataclass(frozen=True)
class IndexMetadata:
    """Summary of one portfolio index calculation."""
    start_date: date
    end_date: date
    baseline_value: Optional[float]    # None when no timestamp produced a total
    current_value: float
    total_return: float
    symbol_count: int
    position_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "baselineValue": self.baseline_value,
            "currentValue": self.current_value,
            "totalReturn": self.total_return,
            "symbolCount": self.symbol_count,
            "positionCount": self.position_count,
        }


@dataclass(frozen=True)
class PortfolioIndex:
    """
    Result of a portfolio index calculation.

    A zero-length chart_data means "no data" and must not be read as a flat
    performance of 100, even though metadata.current_value defaults to 100.
    """
    chart_data: list[IndexPoint] = field(default_factory=list)
    markers: list[RebalancingMarker] = field(default_factory=list)
    metadata: Optional[IndexMetadata] = None

    @property
    def has_data(self) -> bool:
        return len(self.chart_data) > 0

    @classmethod
    def empty(cls) -> "PortfolioIndex":
        return cls()

    def to_dict(self) -> dict[str, Any]:
        """Charting-layer representation."""
        return {
            "chartData": [p.to_dict() for p in self.chart_data],
            "markers": [m.to_dict() for m in self.markers],
            "metadata": self.metadata.to_dict() if self.metadata else {},
        }


class Trend(str, Enum):
    """Direction of the Gaussian filter line."""
    BULLISH = "bullish"
    BEARISH = "bearish"

    @property
    def color(self) -> str:
        return "#0aff68" if self is Trend.BULLISH else "#ff0a5a"


class FailureReason(str, Enum):
    """Named reasons a calculation produced no data."""
    INVALID_PARAMETERS = "invalid_parameters"
    EMPTY_INPUT = "empty_input"


@dataclass(frozen=True)
class GaussianChannel:
    """Gaussian channel lines, or a named failure with every sequence empty."""

    # Chart-ready lines
    filter_line: list[ChannelPoint] = field(default_factory=list)
    upper_band_line: list[ChannelPoint] = field(default_factory=list)
    lower_band_line: list[ChannelPoint] = field(default_factory=list)
    trends: list[Trend] = field(default_factory=list)

    # Raw values, parallel to the input candles
    filter: list[float] = field(default_factory=list)
    upper_band: list[float] = field(default_factory=list)
    lower_band: list[float] = field(default_factory=list)
    filtered_true_range: list[float] = field(default_factory=list)

    # Filter coefficients
    alpha: Optional[float] = None
    beta: Optional[float] = None

    # Outcome
    success: bool = True
    failure_reason: Optional[FailureReason] = None
    error_msg: Optional[str] = None

    @property
    def colors(self) -> list[str]:
        return [trend.color for trend in self.trends]

    def __len__(self) -> int:
        return len(self.filter)

    @classmethod
    def success_with(cls, times: list[int], filter_values: list[float],
                     filtered_true_range: list[float], multiplier: float,
                     trends: list[Trend], alpha: float, beta: float) -> "GaussianChannel":
        """Build a successful channel from the filtered center line and true range."""
        upper = [f + tr * multiplier for f, tr in zip(filter_values, filtered_true_range)]
        lower = [f - tr * multiplier for f, tr in zip(filter_values, filtered_true_range)]
        return cls(
            filter_line=[ChannelPoint(t, v) for t, v in zip(times, filter_values)],
            upper_band_line=[ChannelPoint(t, v) for t, v in zip(times, upper)],
            lower_band_line=[ChannelPoint(t, v) for t, v in zip(times, lower)],
            trends=trends,
            filter=filter_values,
            upper_band=upper,
            lower_band=lower,
            filtered_true_range=filtered_true_range,
            alpha=alpha,
            beta=beta,
        )

    @classmethod
    def failed(cls, reason: FailureReason, error_msg: str,
               alpha: Optional[float] = None, beta: Optional[float] = None) -> "GaussianChannel":
        """Create a failed channel result."""
        return cls(
            alpha=alpha,
            beta=beta,
            success=False,
            failure_reason=reason,
            error_msg=error_msg,
        )


@dataclass(frozen=True)
class TrendSegment:
    """Contiguous run of channel points sharing one trend color."""
    trend: Trend
    filter_line: list[ChannelPoint]
    upper_band_line: list[ChannelPoint]
    lower_band_line: list[ChannelPoint]

    @property
    def color(self) -> str:
        return self.trend.color
