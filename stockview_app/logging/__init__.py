"""
Logging configuration for the chart computation engine.
"""
from .config import configure_logging, get_calculation_logger

__all__ = ["configure_logging", "get_calculation_logger"]
