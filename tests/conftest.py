"""Pytest configuration: ensure src is on path when running tests from repo root."""

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
_src = _root / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))


def tx(date: str, asset: str, type_: str, quantity: float, price: float) -> dict:
    """Build a transaction dict the way the store holds it."""
    return {"date": date, "platform": "Crypto.com", "asset": asset, "type": type_, "price": price, "quantity": quantity}


@pytest.fixture
def make_tx():
    return tx
