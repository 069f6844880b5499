"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

VALID_RANGE_TYPES = ("ytd", "1y", "5y", "custom")
VALID_TIMEFRAMES = ("5min", "1hour", "4hour", "1day")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_gaussian_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate Gaussian channel parameters."""
        errors = []

        # Out-of-range poles fall back to 4 at calculation time; only the type is checked
        if "poles" in params:
            value = params["poles"]
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(ValidationError(
                    field="poles",
                    message="Must be an integer",
                    value=value
                ))

        if "period" in params:
            value = params["period"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="period",
                    message="Must be a positive number",
                    value=value
                ))

        if "multiplier" in params:
            value = params["multiplier"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="multiplier",
                    message="Must be a non-negative number",
                    value=value
                ))

        for flag in ("reduced_lag", "fast_response"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ValidationError(
                    field=flag,
                    message="Must be a boolean",
                    value=params[flag]
                ))

        return errors

    @staticmethod
    def validate_overlay_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate overlay parameters."""
        errors = []

        if "min_candles" in params:
            value = params["min_candles"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="min_candles",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_portfolio_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate portfolio parameters."""
        errors = []

        if "default_range" in params and params["default_range"] not in VALID_RANGE_TYPES:
            errors.append(ValidationError(
                field="default_range",
                message=f"Must be one of {', '.join(VALID_RANGE_TYPES)}",
                value=params["default_range"]
            ))

        if "current_price_lookback_years" in params:
            value = params["current_price_lookback_years"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="current_price_lookback_years",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_provider_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate price provider parameters."""
        errors = []

        if "timeframe" in params and params["timeframe"] not in VALID_TIMEFRAMES:
            errors.append(ValidationError(
                field="timeframe",
                message=f"Must be one of {', '.join(VALID_TIMEFRAMES)}",
                value=params["timeframe"]
            ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        level = params.get("level")
        if level is not None and (not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS):
            errors.append(ValidationError(
                field="level",
                message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}",
                value=level
            ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration."""
        errors = []
        errors.extend(ConfigValidator.validate_gaussian_params(config.get("gaussian", {})))
        errors.extend(ConfigValidator.validate_overlay_params(config.get("overlay", {})))
        errors.extend(ConfigValidator.validate_portfolio_params(config.get("portfolio", {})))
        errors.extend(ConfigValidator.validate_provider_params(config.get("provider", {})))
        errors.extend(ConfigValidator.validate_logging_params(config.get("logging", {})))
        return errors
