"""Per-entry cost basis and gain/loss analytics."""

from collections.abc import Iterable
from typing import Optional

from stockview_app.data.models import PortfolioEntry


def calculate_cost_basis(entry: PortfolioEntry) -> float:
    """Total amount paid for an entry."""
    return entry.purchase_price * entry.quantity


def total_cost_basis(entries: Iterable[PortfolioEntry]) -> float:
    return sum(calculate_cost_basis(entry) for entry in entries)


def calculate_gain_loss(entry: PortfolioEntry, current_price: Optional[float]) -> float:
    """
    Dollar gain or loss at the current price.

    Returns 0.0 when no current price is known.
    """
    if not current_price:
        return 0.0
    return current_price * entry.quantity - calculate_cost_basis(entry)


def calculate_gain_loss_percent(entry: PortfolioEntry, current_price: Optional[float]) -> float:
    """Gain or loss as a percentage of cost basis, 0.0 without a price."""
    if not current_price:
        return 0.0
    cost_basis = calculate_cost_basis(entry)
    if cost_basis == 0:
        return 0.0
    return calculate_gain_loss(entry, current_price) / cost_basis * 100


def calculate_portfolio_percent(entry: PortfolioEntry, portfolio_cost_basis: float) -> float:
    """Share of the portfolio's total cost basis held in this entry."""
    if portfolio_cost_basis == 0:
        return 0.0
    return calculate_cost_basis(entry) / portfolio_cost_basis * 100
