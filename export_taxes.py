"""Generate tax reports from a wallet's trade history or a CSV export.

Usage:
    python export_taxes.py --wallet 0xabc...              # Fetch from the activity API
    python export_taxes.py --csv trades.csv --year 2025   # Manual CSV, one tax year
    python export_taxes.py --wallet 0xabc... --partial    # Keep what was fetched on failure
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from analytics.reports import (
    generate_form_8949,
    generate_import_csv,
    generate_schedule_d,
    generate_tax_summary_csv,
)
from analytics.tax_summary import compute_summary, filter_by_tax_year
from analytics.trade_matcher import match_trades_fifo
from errors import TaxEngineError
from ingest.history import fetch_trade_history
from ingest.resolver import resolve_wallet
from models import FetchProgress, Transaction
from parsers.parser_csv import parse_csv

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("export_taxes")


def _log_progress(progress: FetchProgress) -> None:
    logger.info("Window %d offset %d: %d records (total %d)",
                progress.window, progress.offset, progress.page_size, progress.total_records)


def load_transactions(args: argparse.Namespace) -> list[Transaction]:
    if args.csv:
        text = Path(args.csv).read_text(encoding="utf-8-sig")
        transactions = parse_csv(text)
        logger.info("Parsed %d transactions from %s", len(transactions), args.csv)
        return transactions

    wallet = resolve_wallet(args.wallet)
    logger.info("Fetching trade history for %s", wallet)
    history = fetch_trade_history(
        wallet,
        on_progress=_log_progress,
        timeout=args.timeout,
        allow_partial=args.partial,
    )
    if not history.complete:
        logger.warning("INCOMPLETE history (%s) - reports will understate activity", history.error)
    return history.transactions


def write_reports(transactions: list[Transaction], out_dir: Path, year: int | None) -> int:
    lots = filter_by_tax_year(match_trades_fifo(transactions), year)
    summary = compute_summary(lots)

    out_dir.mkdir(parents=True, exist_ok=True)
    outputs = {
        "form_8949.csv": generate_form_8949(lots),
        "schedule_d.csv": generate_schedule_d(summary),
        "import.csv": generate_import_csv(lots),
        "tax_summary.csv": generate_tax_summary_csv(lots, summary),
    }
    for name, content in outputs.items():
        (out_dir / name).write_text(content + "\n", encoding="utf-8")
        logger.info("Wrote %s", out_dir / name)

    logger.info("Lots: %d (short %d / long %d)",
                summary.total_lots, summary.short_term_count, summary.long_term_count)
    logger.info("Net short-term: $%.2f  Net long-term: $%.2f  Net total: $%.2f",
                summary.net_short_term, summary.net_long_term, summary.net_total)
    return summary.total_lots


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="FIFO tax lot reports for prediction-market trades")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--wallet", help="Proxy wallet address (0x...)")
    source.add_argument("--csv", help="Path to a trade CSV export")
    parser.add_argument("--year", type=int, default=None,
                        help="Only report disposals in this tax year")
    parser.add_argument("--out-dir", default="reports",
                        help="Directory for the generated reports (default: reports)")
    parser.add_argument("--partial", action="store_true",
                        help="Keep a partial history instead of failing on fetch errors")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Overall fetch timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        transactions = load_transactions(args)
    except (TaxEngineError, OSError) as e:
        logger.error("%s", e)
        return 1

    if not transactions:
        logger.error("No trades found")
        return 1

    write_reports(transactions, Path(args.out_dir), args.year)
    return 0


if __name__ == "__main__":
    sys.exit(main())
