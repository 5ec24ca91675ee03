"""Tests for the JSON transaction store, settings and price cache."""

import json

import pytest

from dca_tracker.config.constants import DEFAULT_MANUAL_PRICES
from dca_tracker.services import storage
from dca_tracker.services.validation import ValidationError


@pytest.fixture
def data_file(tmp_path):
    return str(tmp_path / "transactions.json")


def test_load_transactions_missing_file(data_file) -> None:
    """Nothing stored yet gives an empty list."""
    assert storage.load_transactions(data_file) == []


def test_save_and_load_transactions(data_file, make_tx) -> None:
    txs = [make_tx("2024-01-01", "BTC", "BUY", 1.0, 100.0)]
    storage.save_transactions(txs, data_file)
    assert storage.load_transactions(data_file) == txs


def test_clear_transactions(data_file, make_tx) -> None:
    storage.save_transactions([make_tx("2024-01-01", "BTC", "BUY", 1.0, 100.0)], data_file)
    storage.clear_transactions(data_file)
    assert storage.load_transactions(data_file) == []
    storage.clear_transactions(data_file)


def test_import_normalizes_exported_file(tmp_path) -> None:
    path = tmp_path / "export.json"
    path.write_text(json.dumps([{"date": "2024-02-01", "asset": "eth", "type": "SELL", "price": 3000, "quantity": 0.5}]))
    txs = storage.import_transactions(str(path))
    assert txs[0]["asset"] == "ETH"
    assert txs[0]["price"] == 3000.0


@pytest.mark.parametrize("content", ['{"not": "a list"}', "not json at all"])
def test_import_rejects_invalid_file(tmp_path, content) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(ValidationError):
        storage.import_transactions(str(path))


def test_add_and_delete_transaction(make_tx) -> None:
    """Helpers return new lists and leave the input alone."""
    original = [make_tx("2024-01-01", "BTC", "BUY", 1.0, 100.0)]
    added = storage.add_transaction(original, {"date": "2024-01-02", "asset": "sol", "type": "BUY", "price": "20", "quantity": "3"})
    assert len(original) == 1
    assert added[1]["asset"] == "SOL"
    assert storage.delete_transaction(added, 0) == [added[1]]
    assert storage.delete_transaction(added, 5) == added


def test_manual_prices_default_and_roundtrip(tmp_path) -> None:
    path = str(tmp_path / "settings.json")
    assert storage.load_manual_prices(path) == DEFAULT_MANUAL_PRICES
    storage.save_manual_prices({"RTX": 0.01}, path)
    assert storage.load_manual_prices(path) == {"RTX": 0.01}


def test_manual_prices_invalid_file_falls_back(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]")
    assert storage.load_manual_prices(str(path)) == DEFAULT_MANUAL_PRICES


def test_price_cache_missing_or_invalid(tmp_path) -> None:
    path = tmp_path / "cache.json"
    assert storage.load_price_cache(str(path)) == {}
    path.write_text("{broken")
    assert storage.load_price_cache(str(path)) == {}


@pytest.mark.parametrize("content", ["[1, 2]", "42", "\"text\"", "null"])
def test_price_cache_must_be_an_object(tmp_path, content) -> None:
    """Valid JSON that is not an object is treated as an empty cache."""
    path = tmp_path / "cache.json"
    path.write_text(content)
    assert storage.load_price_cache(str(path)) == {}


def test_save_price_cache_ignores_io_error(tmp_path) -> None:
    storage.save_price_cache({"BTC": {"price": 1}}, str(tmp_path / "missing" / "cache.json"))
