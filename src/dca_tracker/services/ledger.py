"""FIFO lot ledger: replays BUY/SELL transactions into open lots and realized P&L."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional

from dca_tracker.config.constants import LOT_EPSILON
from dca_tracker.models.core import Lot


@dataclass
class LedgerState:
    """End state of a replay: open lots (oldest first) and realized P&L per asset."""

    lots: Dict[str, List[Lot]] = field(default_factory=dict)
    realised: Dict[str, float] = field(default_factory=dict)

    @property
    def assets(self) -> List[str]:
        return list(self.lots)

    def open_quantity(self, asset: str) -> float:
        return sum(lot["quantity"] for lot in self.lots.get(asset, []))

    def cost_basis(self, asset: str) -> float:
        return sum(lot["quantity"] * lot["price"] for lot in self.lots.get(asset, []))


def sort_transactions(transactions: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Return transactions in processing order.

    Sorted by ISO date; sorted() is stable, so transactions sharing a date
    keep their original relative order.
    """
    return sorted(transactions, key=lambda t: t["date"])


def consume_lots(lots: Deque[Lot], quantity: float, price: float) -> float:
    """
    Sell `quantity` units at `price` against `lots`, oldest first.

    Mutates the queue in place and returns the realized P&L of the sale.
    Quantity left over once the queue is empty is dropped.
    """
    realised = 0.0
    remaining = quantity
    while remaining > 0 and lots:
        head = lots[0]
        consumed = min(head["quantity"], remaining)
        realised += consumed * (price - head["price"])
        head["quantity"] -= consumed
        remaining -= consumed
        if head["quantity"] <= LOT_EPSILON:
            lots.popleft()
    return realised


def replay_transactions(transactions: Optional[Iterable[Dict[str, Any]]] = None) -> LedgerState:
    """
    Replay transactions chronologically using FIFO lot matching.

    Every asset that appears in the input gets an entry, even if all its lots
    were sold. The caller's transaction dicts are never mutated.
    """
    queues: Dict[str, Deque[Lot]] = {}
    realised: Dict[str, float] = {}

    for tx in sort_transactions(transactions or []):
        asset = tx["asset"]
        lots = queues.setdefault(asset, deque())
        realised.setdefault(asset, 0.0)

        if tx["type"] == "BUY":
            lots.append({"quantity": tx["quantity"], "price": tx["price"]})
        elif tx["type"] == "SELL":
            realised[asset] += consume_lots(lots, tx["quantity"], tx["price"])

    return LedgerState(
        lots={asset: list(lots) for asset, lots in queues.items()},
        realised=realised,
    )
