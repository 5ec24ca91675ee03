"""Application bootstrap and core API entrypoints for DCA Tracker.

Provides a small core API (load_portfolio, list_assets, build_report) and the
`dca-tracker` command line: record, delete, import and export transactions,
maintain manual prices, and print the portfolio report.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

from .config.constants import (
    DATA_FILE,
    DEFAULT_PLATFORM,
    EXPORT_FILE_NAME,
    PLATFORMS,
    PRICE_CACHE_FILE,
    SETTINGS_FILE,
)
from .services import metrics, pricing, storage
from .services.validation import ValidationError, parse_number
from .theming.style import COLOR_GAIN, COLOR_LOSS
from .ui.report import print_report, transactions_table

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def load_portfolio(data_file: str = DATA_FILE, settings_file: str = SETTINGS_FILE) -> Dict[str, Any]:
    """Load stored transactions and manual price overrides.

    Raises on I/O error or when the stored file holds invalid transactions.

    Returns:
        Data dict with keys: transactions, manual_prices.
    """
    return {
        "transactions": storage.load_transactions(data_file),
        "manual_prices": storage.load_manual_prices(settings_file),
    }


def list_assets(transactions: List[Dict[str, Any]]) -> List[str]:
    """Return the distinct asset symbols in first-seen order."""
    return list(dict.fromkeys(tx["asset"] for tx in transactions))


def build_report(
    transactions: List[Dict[str, Any]],
    manual_prices: Optional[Mapping[str, float]] = None,
    get_prices: Optional[Callable[[List[str]], Dict[str, float]]] = None,
    cache_file: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve prices once, then compute summary, totals, history and exit suggestions.

    Args:
        transactions: Validated transaction list.
        manual_prices: Overrides for assets without a public price.
        get_prices: Price lookup taking the asset list; defaults to the
            cached CoinGecko lookup backed by cache_file.
        cache_file: Price cache path (defaults to PRICE_CACHE_FILE).

    Returns:
        Dict with keys: prices, summary, totals, history, suggestions, updated_at.
        updated_at is when the newest market price used was fetched, or None
        when every price is manual or missing.
    """
    assets = list_assets(transactions)
    market_assets = [a for a in assets if a not in (manual_prices or {})]
    as_of: Optional[datetime] = None
    if get_prices is None:
        cache = storage.load_price_cache(cache_file)
        prices = pricing.get_prices(
            assets,
            cache,
            lambda c: storage.save_price_cache(c, cache_file),
            manual=manual_prices,
        )
        as_of = pricing.prices_as_of(market_assets, cache)
    else:
        fetched = dict(get_prices(assets)) if assets else {}
        if any(a in fetched for a in market_assets):
            as_of = datetime.now()
        prices = pricing.apply_manual_overrides(fetched, manual_prices)
    summary = metrics.compute_summary(transactions, prices)
    return {
        "prices": prices,
        "summary": summary,
        "totals": metrics.compute_totals(summary),
        "history": metrics.compute_monthly_history(transactions, prices),
        "suggestions": metrics.exit_suggestions(summary, prices),
        "updated_at": as_of.strftime(TIMESTAMP_FORMAT) if as_of else None,
    }


# ── Commands ─────────────────────────────────────────────────────────────────

def _ok(console: Console, message: str) -> None:
    console.print(Text(f"✓ {message}", style=COLOR_GAIN))


def cmd_report(args: argparse.Namespace, console: Console) -> int:
    data = load_portfolio(args.data_file, args.settings_file)
    logger.info("Loaded %d transaction(s)", len(data["transactions"]))
    print_report(build_report(data["transactions"], data["manual_prices"], cache_file=args.cache_file), console)
    return 0


def cmd_list(args: argparse.Namespace, console: Console) -> int:
    transactions = storage.load_transactions(args.data_file)
    if not transactions:
        console.print("No transactions recorded.")
        return 0
    console.print(transactions_table(transactions))
    return 0


def cmd_add(args: argparse.Namespace, console: Console) -> int:
    transactions = storage.add_transaction(
        storage.load_transactions(args.data_file),
        {
            "date": args.date,
            "platform": args.platform,
            "asset": args.asset,
            "type": args.type,
            "price": args.price,
            "quantity": args.quantity,
        },
    )
    storage.save_transactions(transactions, args.data_file)
    tx = transactions[-1]
    _ok(console, f"{tx['type']} recorded for {tx['asset']} (#{len(transactions)})")
    return 0


def cmd_delete(args: argparse.Namespace, console: Console) -> int:
    transactions = storage.load_transactions(args.data_file)
    if not 1 <= args.number <= len(transactions):
        raise ValidationError(f"No transaction #{args.number} (have {len(transactions)}).")
    storage.save_transactions(storage.delete_transaction(transactions, args.number - 1), args.data_file)
    _ok(console, f"Deleted transaction #{args.number}")
    return 0


def cmd_import(args: argparse.Namespace, console: Console) -> int:
    transactions = storage.import_transactions(args.path)
    storage.save_transactions(transactions, args.data_file)
    _ok(console, f"Imported {len(transactions)} transaction(s) from {args.path}")
    return 0


def cmd_export(args: argparse.Namespace, console: Console) -> int:
    transactions = storage.load_transactions(args.data_file)
    storage.export_transactions(transactions, args.path)
    _ok(console, f"Exported {len(transactions)} transaction(s) to {args.path}")
    return 0


def cmd_clear(args: argparse.Namespace, console: Console) -> int:
    if not args.yes and not Confirm.ask("Delete all transactions?", console=console):
        console.print("Nothing deleted.")
        return 0
    storage.clear_transactions(args.data_file)
    _ok(console, "All transactions deleted")
    return 0


def cmd_set_price(args: argparse.Namespace, console: Console) -> int:
    manual = storage.load_manual_prices(args.settings_file)
    asset = args.asset.strip().upper()
    if args.remove:
        if manual.pop(asset, None) is None:
            raise ValidationError(f"No manual price set for {asset}.")
        storage.save_manual_prices(manual, args.settings_file)
        _ok(console, f"Removed manual price for {asset}")
        return 0
    if args.price is None:
        raise ValidationError("A price is required unless --remove is given.")
    manual[asset] = parse_number(args.price, "Price")
    storage.save_manual_prices(manual, args.settings_file)
    _ok(console, f"Manual price for {asset} set to {manual[asset]:g}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dca-tracker", description="Track crypto DCA purchases with FIFO P&L.")
    parser.add_argument("--data-file", default=DATA_FILE, help="transactions JSON file")
    parser.add_argument("--settings-file", default=SETTINGS_FILE, help="manual prices JSON file")
    parser.add_argument("--cache-file", default=PRICE_CACHE_FILE, help="price cache JSON file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log progress")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("report", help="positions, exit rules and monthly performance").set_defaults(func=cmd_report)
    sub.add_parser("list", help="numbered list of transactions").set_defaults(func=cmd_list)

    add = sub.add_parser("add", help="record a BUY or SELL")
    add.add_argument("date", help="YYYY-MM-DD")
    add.add_argument("asset")
    add.add_argument("type", help="BUY or SELL")
    add.add_argument("price", help="unit price")
    add.add_argument("quantity")
    add.add_argument("--platform", default=DEFAULT_PLATFORM, choices=PLATFORMS)
    add.set_defaults(func=cmd_add)

    delete = sub.add_parser("delete", help="delete a transaction by its list number")
    delete.add_argument("number", type=int)
    delete.set_defaults(func=cmd_delete)

    imp = sub.add_parser("import", help="replace all transactions with a JSON export")
    imp.add_argument("path")
    imp.set_defaults(func=cmd_import)

    exp = sub.add_parser("export", help="write transactions to a JSON file")
    exp.add_argument("path", nargs="?", default=EXPORT_FILE_NAME)
    exp.set_defaults(func=cmd_export)

    clear = sub.add_parser("clear", help="delete all transactions")
    clear.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    clear.set_defaults(func=cmd_clear)

    set_price = sub.add_parser("set-price", help="set or remove a manual price override")
    set_price.add_argument("asset")
    set_price.add_argument("price", nargs="?")
    set_price.add_argument("--remove", action="store_true")
    set_price.set_defaults(func=cmd_set_price)
    return parser


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    """Run a dca-tracker command (report when none is given). Returns the exit code."""
    args = build_parser().parse_args(argv)
    console = console or Console()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", cmd_report)
    try:
        return func(args, console)
    except (ValueError, OSError) as exc:
        console.print(Text(f"Error: {exc}", style=COLOR_LOSS))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
