"""
Error classification for the chart computation engine.

Data quality errors describe inputs the engine can skip or degrade around;
system failures describe collaborator breakdowns that must reach the caller.
"""

from .data_quality import (
    DataQualityError,
    TemporalDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    PriceFetchError,
    PersistenceError,
    EntryNotFoundError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "TemporalDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "PriceFetchError",
    "PersistenceError",
    "EntryNotFoundError",
]
