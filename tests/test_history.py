"""Tests for the monthly history estimator."""

import pytest

from dca_tracker.services.metrics import compute_monthly_history, compute_summary, compute_totals


def test_history_empty() -> None:
    assert compute_monthly_history() == []
    assert compute_monthly_history([], {"BTC": 1.0}) == []


def test_single_month_single_buy(make_tx) -> None:
    """First month has no baseline: return 0, and invested == value at the buy price."""
    history = compute_monthly_history([make_tx("2024-03-05", "BTC", "BUY", 0.5, 60000)], {"BTC": 60000})
    assert len(history) == 1
    entry = history[0]
    assert entry["month"] == "2024-03"
    assert entry["return"] == 0
    assert entry["invested"] == entry["value"] == pytest.approx(30000)


def test_months_sorted_and_cumulative(make_tx) -> None:
    """One entry per distinct month, ascending, each built from all transactions up to it."""
    txs = [
        make_tx("2024-03-01", "BTC", "BUY", 1, 120),
        make_tx("2024-01-10", "BTC", "BUY", 1, 100),
        make_tx("2024-01-20", "ETH", "BUY", 2, 10),
    ]
    prices = {"BTC": 150, "ETH": 10}
    history = compute_monthly_history(txs, prices)
    assert [h["month"] for h in history] == ["2024-01", "2024-03"]
    assert history[0]["invested"] == pytest.approx(120)
    assert history[1]["invested"] == pytest.approx(240)
    last = compute_totals(compute_summary(txs, prices))
    for name in ("invested", "value", "realised", "unrealised", "pnl"):
        assert history[-1][name] == pytest.approx(last[name])


def test_return_excludes_new_contributions(make_tx) -> None:
    """Adding capital at the current price is not counted as performance."""
    txs = [
        make_tx("2024-01-01", "BTC", "BUY", 1, 100),
        make_tx("2024-02-01", "BTC", "BUY", 1, 200),
    ]
    history = compute_monthly_history(txs, {"BTC": 200})
    # Jan: value 200. Feb: value 400, new contribution 200 -> (400 - 200 - 200) / 200
    assert history[1]["return"] == pytest.approx(0.0)


def test_return_after_sell_uses_cost_basis_change(make_tx) -> None:
    """Selling shrinks invested; that negative contribution feeds the return estimate."""
    txs = [
        make_tx("2024-01-01", "BTC", "BUY", 2, 100),
        make_tx("2024-02-01", "BTC", "SELL", 1, 150),
    ]
    history = compute_monthly_history(txs, {"BTC": 150})
    # Jan: value 300, invested 200. Feb: value 150 + realised 50 = 200, invested 100.
    # (200 - 300 - (100 - 200)) / 300 = 0
    assert history[1]["realised"] == pytest.approx(50)
    assert history[1]["return"] == pytest.approx(0.0)


def test_return_zero_after_zero_value_month(make_tx) -> None:
    """A month with no priced value gives the next month no baseline."""
    txs = [
        make_tx("2024-01-01", "RTX", "BUY", 100, 1),
        make_tx("2024-02-01", "BTC", "BUY", 1, 100),
    ]
    history = compute_monthly_history(txs, {"BTC": 150})
    assert history[0]["value"] == 0
    assert history[1]["return"] == 0


def test_return_is_percentage(make_tx) -> None:
    txs = [
        make_tx("2024-01-01", "BTC", "BUY", 1, 100),
        make_tx("2024-02-01", "ETH", "BUY", 1, 50),
    ]
    history = compute_monthly_history(txs, {"BTC": 100, "ETH": 60})
    # Jan value 100. Feb value 160, new contrib 50 -> (160 - 100 - 50) / 100 = 10%
    assert history[1]["return"] == pytest.approx(10.0)


def test_return_after_sell_counts_negative_contribution(make_tx) -> None:
    """A sell shrinks invested; the drop is subtracted as a negative contribution."""
    txs = [
        make_tx("2024-01-01", "BTC", "BUY", 2, 100),
        make_tx("2024-02-01", "BTC", "SELL", 1, 200),
    ]
    history = compute_monthly_history(txs, {"BTC": 150})
    # Jan: value 300, invested 200. Feb: value 150 + realised 100 = 250, invested 100.
    # (250 - 300 - (100 - 200)) / 300 = 50 / 300
    assert history[0]["return"] == 0
    assert history[1]["invested"] == pytest.approx(100)
    assert history[1]["realised"] == pytest.approx(100)
    assert history[1]["return"] == pytest.approx(50 / 300 * 100)
