"""Per-asset summary, portfolio totals and monthly history (pure functions)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from dca_tracker.config.constants import EXIT_RULE_ASSETS, EXIT_RULE_MULTIPLE
from dca_tracker.models.core import AssetSummary, MonthlyHistoryEntry, PortfolioTotals
from dca_tracker.services.ledger import LedgerState, replay_transactions

TOTAL_FIELDS = ("invested", "value", "realised", "unrealised", "pnl")


def summarize_ledger(state: LedgerState, prices: Optional[Mapping[str, float]] = None) -> Dict[str, AssetSummary]:
    """Fold a replayed ledger into one summary per asset, valued at `prices` (missing -> 0)."""
    prices = prices or {}
    result: Dict[str, AssetSummary] = {}
    for asset in state.assets:
        quantity = state.open_quantity(asset)
        invested = state.cost_basis(asset)
        current_price = prices.get(asset)
        if current_price is None:
            current_price = 0
        value = current_price * quantity
        realised = state.realised.get(asset, 0.0)
        unrealised = value - invested
        pnl = realised + unrealised
        result[asset] = {
            "quantity": quantity,
            "invested": invested,
            "currentPrice": current_price,
            "value": value,
            "realised": realised,
            "unrealised": unrealised,
            "pnl": pnl,
            "costAvg": invested / quantity if quantity > 0 else 0,
            "pnlPercent": pnl / invested * 100 if invested > 0 else None,
        }
    return result


def compute_summary(
    transactions: Optional[List[Dict[str, Any]]] = None,
    prices: Optional[Mapping[str, float]] = None,
) -> Dict[str, AssetSummary]:
    """
    Compute per-asset P&L using FIFO cost basis.

    Single source of truth for quantity held, invested capital, market value,
    realised/unrealised P&L, average cost and P&L percentage. The full ledger
    is rebuilt from `transactions` on every call.

    Returns:
        Dict keyed by asset symbol. pnlPercent is None when nothing is invested.
    """
    return summarize_ledger(replay_transactions(transactions), prices)


def compute_totals(summary: Optional[Mapping[str, Mapping[str, Any]]] = None) -> PortfolioTotals:
    """Sum invested, value, realised, unrealised and pnl across all assets."""
    totals = {name: 0.0 for name in TOTAL_FIELDS}
    for asset_summary in (summary or {}).values():
        for name in TOTAL_FIELDS:
            totals[name] += asset_summary[name]
    return totals  # type: ignore[return-value]


def month_key(date: str) -> str:
    """Return the YYYY-MM part of an ISO date."""
    return date[:7]


def compute_monthly_history(
    transactions: Optional[List[Dict[str, Any]]] = None,
    prices: Optional[Mapping[str, float]] = None,
) -> List[MonthlyHistoryEntry]:
    """
    Approximate month-by-month portfolio history.

    Every month is valued at today's prices, so this is a rough picture for
    visualisation rather than a true historical valuation. The period return
    is the change in portfolio value (open value plus realised P&L) net of
    the change in invested capital, over the previous portfolio value, as a
    percentage. The first month, or any month after a zero value, returns 0.
    """
    transactions = transactions or []
    months = sorted({month_key(tx["date"]) for tx in transactions})
    history: List[MonthlyHistoryEntry] = []
    prev_portfolio_value = 0.0
    prev_invested = 0.0
    for month in months:
        upto_month = [tx for tx in transactions if month_key(tx["date"]) <= month]
        totals = compute_totals(compute_summary(upto_month, prices))
        portfolio_value = totals["value"] + totals["realised"]
        # Net change in cost basis; goes negative when sells shrink the open position
        new_contrib = totals["invested"] - prev_invested
        period_return = 0.0
        if prev_portfolio_value > 0:
            period_return = (portfolio_value - prev_portfolio_value - new_contrib) / prev_portfolio_value
        history.append({
            "month": month,
            "invested": totals["invested"],
            "value": totals["value"],
            "realised": totals["realised"],
            "unrealised": totals["unrealised"],
            "pnl": totals["pnl"],
            "return": period_return * 100,
        })
        prev_portfolio_value = portfolio_value
        prev_invested = totals["invested"]
    return history


def exit_suggestions(
    summary: Mapping[str, Mapping[str, Any]],
    prices: Mapping[str, float],
    assets: Optional[List[str]] = None,
    multiple: float = EXIT_RULE_MULTIPLE,
) -> List[str]:
    """
    Suggest taking profit on speculative positions whose price reached
    `multiple` times their average cost.
    """
    suggestions: List[str] = []
    for asset in assets if assets is not None else EXIT_RULE_ASSETS:
        s = summary.get(asset)
        if not s or not s["quantity"]:
            continue
        threshold = s["costAvg"] * multiple
        current = prices.get(asset)
        if current is None:
            current = s["currentPrice"]
        if s["quantity"] > 0 and current >= threshold:
            suggestions.append(
                f"{asset} price has reached {multiple:g}x your average cost (>= {threshold:.4f}).\n"
                "Consider selling part of the position to lock in gains."
            )
    return suggestions
