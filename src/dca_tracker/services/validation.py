"""Input validation at the transaction boundary (entry form, JSON import).

The ledger trusts its input; everything that reaches it goes through
normalize_transaction first.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List

from dca_tracker.config.constants import DEFAULT_PLATFORM, PLATFORMS, TRANSACTION_TYPES
from dca_tracker.models.core import Transaction


class ValidationError(ValueError):
    """Raised when a raw transaction cannot be turned into a valid record."""


def parse_number(raw: Any, name: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {raw!r}.") from None
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number, got {raw!r}.")
    if value < 0:
        raise ValidationError(f"{name} cannot be negative.")
    return value


def _parse_date(raw: Any) -> str:
    try:
        return datetime.strptime(str(raw).strip(), "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValidationError(f"Date must be in YYYY-MM-DD format, got {raw!r}.") from None


def normalize_transaction(raw: Dict[str, Any]) -> Transaction:
    """
    Return a clean transaction dict from user or file input.

    Upper-cases the asset symbol and the type, parses price and quantity,
    and fills in the default platform; the platform must be one of PLATFORMS.
    Raises ValidationError on bad input.
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"Transaction must be an object, got {type(raw).__name__}.")
    asset = str(raw.get("asset") or "").strip().upper()
    if not asset:
        raise ValidationError("Asset symbol cannot be empty.")
    tx_type = str(raw.get("type") or "").strip().upper()
    if tx_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Type must be one of {', '.join(TRANSACTION_TYPES)}, got {raw.get('type')!r}.")
    platform = str(raw.get("platform") or DEFAULT_PLATFORM).strip()
    if platform not in PLATFORMS:
        raise ValidationError(f"Platform must be one of {', '.join(PLATFORMS)}, got {platform!r}.")
    return {
        "date": _parse_date(raw.get("date")),
        "platform": platform,
        "asset": asset,
        "type": tx_type,
        "price": parse_number(raw.get("price"), "Price"),
        "quantity": parse_number(raw.get("quantity"), "Quantity"),
    }


def validate_transactions(raw: Any) -> List[Transaction]:
    """Validate an imported document: must be a list of transactions. Error messages carry the row index."""
    if not isinstance(raw, list):
        raise ValidationError("Invalid file: expected a list of transactions.")
    cleaned: List[Transaction] = []
    for index, item in enumerate(raw):
        try:
            cleaned.append(normalize_transaction(item))
        except ValidationError as exc:
            raise ValidationError(f"Transaction #{index + 1}: {exc}") from exc
    return cleaned


def transaction_total(tx: Dict[str, Any]) -> float:
    """Total amount of a transaction (price x quantity)."""
    return tx["price"] * tx["quantity"]
