"""Shared display utilities: gain/loss styles and number formatting."""

from __future__ import annotations

from typing import Optional

from rich.text import Text

from dca_tracker.theming.style import (
    AMOUNT_DECIMALS,
    COLOR_GAIN,
    COLOR_LOSS,
    COLOR_MUTED,
    NOT_APPLICABLE,
)


def color_for_value(value: Optional[float]) -> str:
    """
    Return the rich style for a signed value (P&L, pnlPercent, monthly return).

    Gains are green and losses red. None (not applicable) and values within
    1e-9 of zero are muted.
    """
    if value is None:
        return COLOR_MUTED
    try:
        v = float(value)
    except (TypeError, ValueError):
        return COLOR_MUTED
    if abs(v) < 1e-9:
        return COLOR_MUTED
    return COLOR_GAIN if v > 0 else COLOR_LOSS


def format_amount(value: Optional[float], decimals: int = AMOUNT_DECIMALS) -> str:
    """Format a currency amount with thousands separators, e.g. 1234.5 -> '1,234.50'."""
    if value is None:
        return NOT_APPLICABLE
    return f"{value:,.{decimals}f}"


def format_percent(value: Optional[float], decimals: int = AMOUNT_DECIMALS) -> str:
    """Format a percentage; None (not applicable, e.g. nothing invested) renders as a dash."""
    if value is None:
        return NOT_APPLICABLE
    return f"{value:,.{decimals}f}%"


def signed_cell(value: Optional[float], text: str) -> Text:
    """Table cell coloured by the sign of value."""
    return Text(text, style=color_for_value(value))


def amount_cell(value: Optional[float]) -> Text:
    return signed_cell(value, format_amount(value))


def percent_cell(value: Optional[float]) -> Text:
    return signed_cell(value, format_percent(value))
