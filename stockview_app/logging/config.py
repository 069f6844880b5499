"""
Logging setup for the chart computation engine.

Calculation, provider and engine events go through structlog. The portfolio
store logs through plain stdlib `logging`; both end up on the same stdout
stream, configured from the `logging` section of the engine config.
"""
import logging
import sys
from typing import Optional

import structlog
from structlog.types import FilteringBoundLogger

from stockview_app.config.defaults import LoggingParams


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"Unknown log level: {level}")
    return number


def configure_logging(params: Optional[LoggingParams] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        params: Level and renderer choice; defaults to LoggingParams()

    Raises:
        ValueError: If the level name is not a stdlib logging level
    """
    params = params or LoggingParams()
    log_level = _level_number(params.level)

    logging.basicConfig(stream=sys.stdout, format="%(message)s")
    logging.getLogger().setLevel(log_level)

    if params.format_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_calculation_logger(name: str) -> FilteringBoundLogger:
    """
    Logger bound to the calculation subsystem.

    Index and overlay calculations log through this logger so their events
    can be filtered apart from storage and provider chatter.
    """
    return structlog.get_logger(name).bind(subsystem="calculation")
