"""
System failure error classifications.

These exceptions represent collaborator failures (price providers, portfolio
storage) that abort the current calculation and propagate to the caller.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PriceFetchError(SystemFailureError):
    """A price series provider failed to return data for a symbol."""

    def __init__(self, message: str, symbol: Optional[str] = None,
                 provider: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.symbol = symbol
        self.provider = provider


class PersistenceError(SystemFailureError):
    """Portfolio storage read or write failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class EntryNotFoundError(PersistenceError):
    """A portfolio entry id does not exist in the store."""

    def __init__(self, message: str, entry_id: Optional[str] = None, **kwargs):
        super().__init__(message, operation=kwargs.pop("operation", "lookup"), **kwargs)
        self.entry_id = entry_id
