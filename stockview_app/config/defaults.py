"""Default configuration parameters for the chart computation engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GaussianChannelParams:
    """Gaussian channel overlay parameters."""
    poles: int = 4                     # Chained single-pole stages (1-9)
    period: int = 144                  # Sampling period, controls cutoff
    multiplier: float = 1.414          # Band width scale on filtered true range
    reduced_lag: bool = False          # Momentum-boost source by the filter lag
    fast_response: bool = False        # Average N-pole with 1-pole output


@dataclass(frozen=True)
class OverlayParams:
    """Overlay input requirements."""
    min_candles: int = 10              # Candles required before drawing the channel


@dataclass(frozen=True)
class PortfolioParams:
    """Portfolio index parameters."""
    default_range: str = "1y"                  # ytd, 1y, 5y or custom
    current_price_lookback_years: int = 1      # Window for latest-close lookups


@dataclass(frozen=True)
class ProviderParams:
    """Price series provider parameters."""
    timeframe: str = "1day"
    timeout_seconds: int = 10
    simulation_seed: Optional[int] = None


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    gaussian: GaussianChannelParams
    overlay: OverlayParams
    portfolio: PortfolioParams
    provider: ProviderParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        gaussian=GaussianChannelParams(),
        overlay=OverlayParams(),
        portfolio=PortfolioParams(),
        provider=ProviderParams(),
        logging=LoggingParams(),
    )
