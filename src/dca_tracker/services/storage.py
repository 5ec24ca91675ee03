"""Data persistence: transaction list, manual prices, price cache, JSON import/export."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from dca_tracker.config.constants import (
    DATA_FILE,
    DEFAULT_MANUAL_PRICES,
    PRICE_CACHE_FILE,
    SETTINGS_FILE,
)
from dca_tracker.models.core import Transaction
from dca_tracker.services.validation import ValidationError, normalize_transaction, validate_transactions

logger = logging.getLogger(__name__)


def load_transactions(path: str = DATA_FILE) -> List[Transaction]:
    """Load the stored transaction list. Returns an empty list when nothing is stored yet."""
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        return validate_transactions(json.load(f))


def save_transactions(transactions: List[Dict[str, Any]], path: str = DATA_FILE) -> None:
    """Save the transaction list to JSON. Raises on I/O error."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(list(transactions), f, indent=2)
    logger.info("Saved %d transaction(s) to %s", len(transactions), path)


def clear_transactions(path: str = DATA_FILE) -> None:
    """Remove all stored transactions."""
    if os.path.exists(path):
        os.remove(path)
        logger.info("Cleared transactions in %s", path)


def export_transactions(transactions: List[Dict[str, Any]], path: str) -> None:
    """Write transactions to an export file (same format as the store)."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(list(transactions), f, indent=2)


def import_transactions(path: str) -> List[Transaction]:
    """
    Read transactions from an export file.

    Raises ValidationError if the file is not a JSON list of valid
    transactions (invalid JSON included); the stored list is left untouched.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid file: {exc}") from exc
    transactions = validate_transactions(raw)
    logger.info("Imported %d transaction(s) from %s", len(transactions), path)
    return transactions


def add_transaction(transactions: List[Dict[str, Any]], raw: Dict[str, Any]) -> List[Transaction]:
    """Return a new list with the validated transaction appended."""
    return [*transactions, normalize_transaction(raw)]


def delete_transaction(transactions: List[Dict[str, Any]], index: int) -> List[Dict[str, Any]]:
    """Return a new list without the transaction at index. Out-of-range index returns a copy."""
    return [tx for i, tx in enumerate(transactions) if i != index]


def get_default_settings() -> Dict[str, Any]:
    """Return a fresh default settings structure (no file I/O)."""
    return {"manual_prices": dict(DEFAULT_MANUAL_PRICES)}


def load_manual_prices(path: str = SETTINGS_FILE) -> Dict[str, float]:
    """Load manual price overrides. Falls back to the defaults on missing or invalid file."""
    if not os.path.exists(path):
        return get_default_settings()["manual_prices"]
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return {str(k).upper(): float(v) for k, v in data.get("manual_prices", {}).items()}
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return get_default_settings()["manual_prices"]


def save_manual_prices(manual: Dict[str, float], path: str = SETTINGS_FILE) -> None:
    """Save manual price overrides. Raises on I/O error."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"manual_prices": manual}, f, indent=4)


def load_price_cache(path: Optional[str] = None) -> Dict[str, Any]:
    """Load price cache from file. Returns empty dict on missing or invalid file."""
    path = path or PRICE_CACHE_FILE
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            cache = json.load(f)
    except (OSError, ValueError):
        return {}
    return cache if isinstance(cache, dict) else {}


def save_price_cache(cache: Dict[str, Any], path: Optional[str] = None) -> None:
    """Save price cache to file. Ignores I/O errors (non-fatal)."""
    try:
        with open(path or PRICE_CACHE_FILE, "w", encoding="utf-8") as f:
            json.dump(cache, f, indent=4)
    except OSError as exc:
        logger.warning("Could not save price cache: %s", exc)
