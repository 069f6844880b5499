"""
Chart computation engine coordinator.

Wires the portfolio repository, the price series provider and the layered
configuration into the two chart calculations: the portfolio performance
index and the Gaussian channel overlay.
"""

import os
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

import structlog

from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .data.models import GaussianChannel, PortfolioIndex, PricePoint, TrendSegment
from .data.provider import PriceSeriesProvider, create_default_provider
from .data.validators import validate_overlay_candles
from .errors import DataQualityError
from .logging.config import configure_logging, get_calculation_logger
from .metrics.gaussian import calculate_gaussian_channel, segment_by_trend
from .portfolio.index import PortfolioIndexCalculator, distinct_symbols, fetch_current_prices
from .portfolio.store import JsonFilePortfolioStore, PortfolioRepository
from .utils.time import CustomRange, RangeType

logger = structlog.get_logger(__name__)
calculation_logger = get_calculation_logger(__name__)


@dataclass(frozen=True)
class GaussianOverlay:
    """Gaussian channel plus its trend-colored segments."""
    channel: GaussianChannel
    segments: list[TrendSegment]


class ChartEngine:
    """
    Main coordinator for chart calculations.

    Overlay problems (bad parameters, too few or malformed candles) omit the
    overlay and are only logged. Price provider failures during the index
    calculation propagate to the caller.
    """

    def __init__(self, provider: PriceSeriesProvider, store: PortfolioRepository,
                 config_dir: Optional[str] = None) -> None:
        """Initialize the chart engine."""
        self.logger = logger
        self.calculation_logger = calculation_logger

        self.provider = provider
        self.store = store
        self.config_loader = ConfigLoader.create(config_dir)
        self.index_calculator = PortfolioIndexCalculator(
            provider, store=store, config=self.config_loader.defaults
        )

        self.logger.info("Chart engine initialized")

    def has_portfolio_data(self) -> bool:
        return len(self.store.list()) > 0

    async def portfolio_index(
        self,
        range_type: Union[RangeType, str, None] = None,
        custom_range: Optional[CustomRange] = None,
        today: Optional[date] = None,
    ) -> PortfolioIndex:
        """
        Calculate the portfolio performance index for a chart window.

        Raises:
            PriceFetchError: If any symbol's price fetch fails
        """
        if range_type is None:
            range_type = self.config_loader.merge_config()["portfolio"]["default_range"]

        return await self.index_calculator.calculate(
            range_type=range_type,
            custom_range=custom_range,
            today=today,
        )

    async def current_prices(self, today: Optional[date] = None) -> dict[str, float]:
        """Latest close for every symbol held in the portfolio."""
        config = self.config_loader.merge_config()
        symbols = distinct_symbols(self.store.list())
        return await fetch_current_prices(
            self.provider,
            symbols,
            today=today,
            lookback_years=config["portfolio"]["current_price_lookback_years"],
        )

    def gaussian_overlay(
        self,
        points: Sequence[PricePoint],
        overrides: Optional[dict[str, Any]] = None,
    ) -> Optional[GaussianOverlay]:
        """
        Calculate the Gaussian channel overlay for a candle series.

        Args:
            points: Candles in chronological order
            overrides: Per-call Gaussian parameter overrides

        Returns:
            GaussianOverlay, or None when the overlay should be omitted
        """
        if overrides:
            validation_errors = ConfigValidator.validate_gaussian_params(overrides)
            if validation_errors:
                error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
                self.logger.error("Gaussian parameter validation failed", errors=error_msgs)
                return None

        config = self.config_loader.merge_config()
        try:
            validate_overlay_candles(points, min_points=config["overlay"]["min_candles"])
        except DataQualityError as e:
            self.calculation_logger.info(
                "Skipping Gaussian overlay",
                reason=str(e),
                error_type=type(e).__name__
            )
            return None

        params = self.config_loader.gaussian_params(overrides)
        channel = calculate_gaussian_channel(points, params)

        if not channel.success:
            self.calculation_logger.warning(
                "Gaussian channel calculation failed",
                failure_reason=channel.failure_reason.value,
                error=channel.error_msg
            )
            return None

        return GaussianOverlay(channel=channel, segments=segment_by_trend(channel))


def create_engine(config_dir: Optional[str] = None, api_key: Optional[str] = None,
                  store_path: str = "portfolio.json") -> ChartEngine:
    """
    Build a chart engine from the merged configuration.

    Configures logging, picks the price provider (Alpha Vantage with simulated
    fallback when an API key is available, simulated data otherwise) and opens
    the JSON file portfolio store.

    Args:
        config_dir: Directory holding engine.yaml
        api_key: Alpha Vantage key, defaults to ALPHA_VANTAGE_API_KEY
        store_path: Portfolio JSON document path
    """
    loader = ConfigLoader.create(config_dir)
    config = loader.merge_config()

    configure_logging(loader.logging_params())

    if api_key is None:
        api_key = os.environ.get("ALPHA_VANTAGE_API_KEY")

    provider_config = config["provider"]
    provider = create_default_provider(
        api_key=api_key,
        timeframe=provider_config["timeframe"],
        timeout_seconds=provider_config["timeout_seconds"],
        seed=provider_config["simulation_seed"],
    )

    return ChartEngine(provider, JsonFilePortfolioStore(store_path), config_dir=config_dir)
