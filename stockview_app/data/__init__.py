"""
Price and portfolio data module.

Canonical data models, input parsing and validation, and the price series
providers the engine reads candles from.
"""
