"""Terminal rendering of the portfolio report using the `rich` library."""

from __future__ import annotations

import io
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from dca_tracker.services.validation import transaction_total
from dca_tracker.theming.style import (
    COLOR_MUTED,
    COLOR_WARNING,
    HEAD,
    HEADER_STYLE,
    NOT_APPLICABLE,
    PRICE_DECIMALS,
    ROW_STYLES,
    TABLE_BOX,
)
from dca_tracker.ui.utils import amount_cell, format_amount, percent_cell

REPORT_WIDTH = 140


def _new_table(title: Optional[str] = None) -> Table:
    return Table(
        title=title,
        box=TABLE_BOX,
        show_header=True,
        header_style=HEADER_STYLE,
        show_edge=False,
        pad_edge=True,
        row_styles=ROW_STYLES,
    )


def summary_table(summary: Dict[str, Dict[str, Any]], totals: Dict[str, float]) -> Table:
    """Positions table, one row per asset plus a totals footer."""
    table = _new_table("Positions")
    table.show_footer = True
    table.add_column("Asset", style=HEAD, footer="TOTAL")
    table.add_column("Qty", justify="right")
    table.add_column("Avg Cost", justify="right", style=COLOR_MUTED)
    table.add_column("Price", justify="right")
    table.add_column("Invested", justify="right", footer=format_amount(totals["invested"]))
    table.add_column("Value", justify="right", style=HEAD, footer=format_amount(totals["value"]))
    table.add_column("Realised", justify="right", footer=amount_cell(totals["realised"]))
    table.add_column("Unrealised", justify="right", footer=amount_cell(totals["unrealised"]))
    table.add_column("P&L", justify="right", footer=amount_cell(totals["pnl"]))
    table.add_column("P&L %", justify="right")

    for asset in sorted(summary):
        s = summary[asset]
        table.add_row(
            asset,
            f"{s['quantity']:,.8g}",
            format_amount(s["costAvg"], PRICE_DECIMALS),
            format_amount(s["currentPrice"], PRICE_DECIMALS),
            format_amount(s["invested"]),
            format_amount(s["value"]),
            amount_cell(s["realised"]),
            amount_cell(s["unrealised"]),
            amount_cell(s["pnl"]),
            percent_cell(s["pnlPercent"]),
        )
    return table


def history_table(history: List[Dict[str, Any]]) -> Table:
    """Monthly performance table; every month is valued at today's prices."""
    table = _new_table("Monthly performance (valued at current prices)")
    table.add_column("Month", style=HEAD)
    for name in ("Invested", "Value", "Realised", "Unrealised", "P&L", "Return"):
        table.add_column(name, justify="right")
    for h in history:
        table.add_row(
            h["month"],
            format_amount(h["invested"]),
            format_amount(h["value"]),
            amount_cell(h["realised"]),
            amount_cell(h["unrealised"]),
            amount_cell(h["pnl"]),
            percent_cell(h["return"]),
        )
    return table


def transactions_table(transactions: List[Dict[str, Any]]) -> Table:
    """Stored transactions, numbered from 1 in storage order (the numbers delete uses)."""
    table = _new_table("Transactions")
    table.add_column("#", justify="right", style=COLOR_MUTED)
    table.add_column("Date")
    table.add_column("Platform", style=COLOR_MUTED)
    table.add_column("Asset", style=HEAD)
    table.add_column("Type")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Total", justify="right")
    for number, tx in enumerate(transactions, start=1):
        table.add_row(
            str(number),
            tx["date"],
            tx.get("platform", ""),
            tx["asset"],
            tx["type"],
            format_amount(tx["price"], PRICE_DECIMALS),
            f"{tx['quantity']:,.8g}",
            format_amount(transaction_total(tx)),
        )
    return table


def print_report(report: Dict[str, Any], console: Console) -> None:
    """Print the dict returned by app.build_report."""
    if not report["summary"]:
        console.print(f"[{COLOR_MUTED}]No transactions recorded.[/{COLOR_MUTED}]")
        return
    as_of = report["updated_at"]
    console.print(f"[{COLOR_MUTED}]Prices as of: {as_of or NOT_APPLICABLE}[/{COLOR_MUTED}]")
    console.print()
    console.print(summary_table(report["summary"], report["totals"]))
    for message in report["suggestions"]:
        console.print()
        console.print(Text(message, style=COLOR_WARNING))
    if report["history"]:
        console.print()
        console.print(history_table(report["history"]))


def render_report(report: Dict[str, Any], width: int = REPORT_WIDTH) -> str:
    """Render the report to plain text (no colour codes)."""
    console = Console(file=io.StringIO(), record=True, width=width)
    print_report(report, console)
    return console.export_text()
