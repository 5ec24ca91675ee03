"""Typed structures for transactions, lots and portfolio metrics (for documentation and API)."""

from __future__ import annotations

from typing import Optional, TypedDict


class Transaction(TypedDict, total=False):
    """A single BUY or SELL as stored by the transaction store."""

    date: str
    platform: str
    asset: str
    type: str
    price: float
    quantity: float


class Lot(TypedDict):
    """An open purchase lot; quantity shrinks as sells consume it."""

    quantity: float
    price: float


# Summary/history keys follow the stored JSON format shared with the web export.
AssetSummary = TypedDict(
    "AssetSummary",
    {
        "quantity": float,
        "invested": float,
        "currentPrice": float,
        "value": float,
        "realised": float,
        "unrealised": float,
        "pnl": float,
        "costAvg": float,
        "pnlPercent": Optional[float],
    },
)


class PortfolioTotals(TypedDict):
    """Portfolio-wide sums as returned by compute_totals."""

    invested: float
    value: float
    realised: float
    unrealised: float
    pnl: float


MonthlyHistoryEntry = TypedDict(
    "MonthlyHistoryEntry",
    {
        "month": str,
        "invested": float,
        "value": float,
        "realised": float,
        "unrealised": float,
        "pnl": float,
        "return": float,
    },
)
