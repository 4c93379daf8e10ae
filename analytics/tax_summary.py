"""Short-/long-term gain and loss aggregation over tax lots."""

from __future__ import annotations

from typing import Optional

import pandas as pd

from config import EPOCH, LONG_TERM, format_date, round_money
from models import TaxLot, TaxSummary

LOT_COLUMNS = [
    "description", "date_acquired", "date_sold", "quantity",
    "proceeds", "cost_basis", "gain_loss", "term",
]


def compute_summary(lots: list[TaxLot]) -> TaxSummary:
    """Reduce lots into per-term gain and loss totals.

    Gains and losses are summed separately per term and never offset
    inside a bucket; losses stay negative.
    """
    st_gain = st_loss = lt_gain = lt_loss = 0.0
    st_count = lt_count = 0

    for lot in lots:
        if lot.term == LONG_TERM:
            lt_count += 1
            if lot.gain_loss >= 0:
                lt_gain += lot.gain_loss
            else:
                lt_loss += lot.gain_loss
        else:
            st_count += 1
            if lot.gain_loss >= 0:
                st_gain += lot.gain_loss
            else:
                st_loss += lot.gain_loss

    return TaxSummary(
        total_lots=len(lots),
        short_term_count=st_count,
        long_term_count=lt_count,
        short_term_gain=round_money(st_gain),
        short_term_loss=round_money(st_loss),
        long_term_gain=round_money(lt_gain),
        long_term_loss=round_money(lt_loss),
        net_short_term=round_money(st_gain + st_loss),
        net_long_term=round_money(lt_gain + lt_loss),
        net_total=round_money(st_gain + st_loss + lt_gain + lt_loss),
    )


def filter_by_tax_year(lots: list[TaxLot], year: Optional[int]) -> list[TaxLot]:
    """Keep lots sold in calendar ``year``. ``None`` keeps everything."""
    if year is None:
        return list(lots)
    return [lot for lot in lots if lot.date_sold.year == year and lot.date_sold != EPOCH]


def available_tax_years(lots: list[TaxLot]) -> list[int]:
    """Distinct years with at least one disposal, newest first."""
    return sorted({lot.date_sold.year for lot in lots if lot.date_sold != EPOCH}, reverse=True)


def lots_to_dataframe(lots: list[TaxLot]) -> pd.DataFrame:
    """Tabular view of lots for display; dates rendered as report strings."""
    if not lots:
        return pd.DataFrame(columns=LOT_COLUMNS)
    return pd.DataFrame([{
        "description": lot.description,
        "date_acquired": format_date(lot.date_acquired),
        "date_sold": format_date(lot.date_sold),
        "quantity": lot.quantity,
        "proceeds": lot.proceeds,
        "cost_basis": lot.cost_basis,
        "gain_loss": lot.gain_loss,
        "term": lot.term,
    } for lot in lots], columns=LOT_COLUMNS)


def monthly_gain_loss(lots: list[TaxLot]) -> pd.DataFrame:
    """Realized gain/loss per month sold, split by term."""
    dated = [lot for lot in lots if lot.date_sold != EPOCH]
    if not dated:
        return pd.DataFrame(columns=["month", "term", "gain_loss", "lots"])

    df = pd.DataFrame({
        "date_sold": [lot.date_sold for lot in dated],
        "term": [lot.term for lot in dated],
        "gain_loss": [lot.gain_loss for lot in dated],
    })
    df["month"] = pd.to_datetime(df["date_sold"]).dt.to_period("M").astype(str)
    monthly = df.groupby(["month", "term"]).agg(
        gain_loss=("gain_loss", "sum"),
        lots=("gain_loss", "count"),
    ).reset_index()
    monthly["gain_loss"] = monthly["gain_loss"].round(2)
    return monthly
