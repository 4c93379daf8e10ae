"""Tax report rendering: Form 8949, Schedule D, tax software import CSV."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Optional

from config import IMPORT_NAME_MAX_LEN, IMPORT_NAME_PREFIX, format_date
from models import TaxLot, TaxSummary

FORM_8949_HEADERS = [
    "Description of Property",
    "Date Acquired",
    "Date Sold or Disposed",
    "Proceeds",
    "Cost or Other Basis",
    "Gain or (Loss)",
    "Short-term or Long-term",
]

IMPORT_CSV_HEADERS = ["Currency Name", "Purchase Date", "Cost Basis", "Date Sold", "Proceeds"]

SUMMARY_LOT_HEADERS = [
    "Description", "Date Acquired", "Date Sold", "Proceeds", "Cost Basis", "Gain/Loss", "Term",
]


def _money(value: float) -> str:
    return f"{value + 0.0:.2f}"  # no "-0.00"


def _dollars(value: float) -> str:
    return f"${value + 0.0:.2f}"


def _write_rows(rows: list[list[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue().rstrip("\n")


def _lot_row(lot: TaxLot) -> list[str]:
    return [
        lot.description,
        format_date(lot.date_acquired),
        format_date(lot.date_sold),
        _money(lot.proceeds),
        _money(lot.cost_basis),
        _money(lot.gain_loss),
        lot.term,
    ]


def generate_form_8949(lots: list[TaxLot]) -> str:
    """One row per lot in Form 8949 column order."""
    return _write_rows([FORM_8949_HEADERS] + [_lot_row(lot) for lot in lots])


def generate_schedule_d(summary: TaxSummary) -> str:
    """Schedule D style key/value summary."""
    return "\n".join([
        "IRS Schedule D Summary",
        "",
        "Part I: Short-Term Capital Gains and Losses",
        f"Total Short-Term Gains,{_dollars(summary.short_term_gain)}",
        f"Total Short-Term Losses,{_dollars(summary.short_term_loss)}",
        f"Net Short-Term,{_dollars(summary.net_short_term)}",
        "",
        "Part II: Long-Term Capital Gains and Losses",
        f"Total Long-Term Gains,{_dollars(summary.long_term_gain)}",
        f"Total Long-Term Losses,{_dollars(summary.long_term_loss)}",
        f"Net Long-Term,{_dollars(summary.net_long_term)}",
        "",
        "Summary",
        f"Net Capital Gain/Loss,{_dollars(summary.net_total)}",
        f"Total Disposed Lots,{summary.total_lots}",
    ])


def generate_import_csv(lots: list[TaxLot]) -> str:
    """Tax software import format; market names are cut to 50 characters."""
    rows = [IMPORT_CSV_HEADERS]
    for lot in lots:
        rows.append([
            f"{IMPORT_NAME_PREFIX}{lot.market[:IMPORT_NAME_MAX_LEN]}",
            format_date(lot.date_acquired),
            _money(lot.cost_basis),
            format_date(lot.date_sold),
            _money(lot.proceeds),
        ])
    return _write_rows(rows)


def generate_tax_summary_csv(lots: list[TaxLot], summary: TaxSummary,
                             generated_at: Optional[datetime] = None) -> str:
    """Overview, per-term breakdown and every lot in a single file."""
    generated_at = generated_at or datetime.now()
    header = "\n".join([
        "Polymarket Tax Summary Report",
        f"Generated,{generated_at.isoformat(timespec='seconds')}",
        "",
        "Overview",
        f"Total Disposed Lots,{summary.total_lots}",
        f"Net Short-Term Gain/Loss,{_dollars(summary.net_short_term)}",
        f"Net Long-Term Gain/Loss,{_dollars(summary.net_long_term)}",
        f"Net Total Gain/Loss,{_dollars(summary.net_total)}",
        "",
        "Short-Term Breakdown",
        f"Gains,{_dollars(summary.short_term_gain)}",
        f"Losses,{_dollars(summary.short_term_loss)}",
        "",
        "Long-Term Breakdown",
        f"Gains,{_dollars(summary.long_term_gain)}",
        f"Losses,{_dollars(summary.long_term_loss)}",
        "",
        "All Lots",
    ])
    table = _write_rows([SUMMARY_LOT_HEADERS] + [_lot_row(lot) for lot in lots])
    return f"{header}\n{table}"
