"""
StockView App - Chart Time-Series Computation Engine

Computes the numeric series behind the stock-chart viewer: a normalized
portfolio performance index built from dated lot purchases, and a recursive
Gaussian channel overlay for OHLC candles.
"""

__version__ = "0.1.0"
__author__ = "StockView Team"
