"""Shared Streamlit rendering of tax lots, summary, chart and downloads."""

from __future__ import annotations

import plotly.express as px
import streamlit as st

import ui_theme
from analytics.reports import (
    generate_form_8949,
    generate_import_csv,
    generate_schedule_d,
    generate_tax_summary_csv,
)
from analytics.tax_summary import (
    available_tax_years,
    compute_summary,
    filter_by_tax_year,
    lots_to_dataframe,
    monthly_gain_loss,
)
from analytics.trade_matcher import match_trades_fifo
from models import TaxLot, Transaction

ALL_YEARS = "All years"


@st.cache_data(show_spinner=False)
def _match(transactions: tuple[Transaction, ...]) -> list[TaxLot]:
    return match_trades_fifo(list(transactions))


def render_tax_results(transactions: list[Transaction], file_slug: str, key: str) -> None:
    """Match, summarize and render everything below the input form."""
    all_lots = _match(tuple(transactions))
    if not all_lots:
        ui_theme.empty_state("No disposals found: every position is still open.")
        return

    years = available_tax_years(all_lots)
    choice = st.selectbox("Tax year", [ALL_YEARS] + years, key=f"{key}_year")
    year = None if choice == ALL_YEARS else int(choice)
    lots = filter_by_tax_year(all_lots, year)
    summary = compute_summary(lots)

    ui_theme.section_header("Summary", f"{summary.total_lots:,} lots from {len(transactions):,} trades")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Net Short-Term", ui_theme.money(summary.net_short_term))
    c2.metric("Net Long-Term", ui_theme.money(summary.net_long_term))
    c3.metric("Net Total", ui_theme.money(summary.net_total))
    c4.metric("Disposed Lots", f"{summary.total_lots:,}")

    c5, c6, c7, c8 = st.columns(4)
    c5.metric("Short-Term Gains", ui_theme.money(summary.short_term_gain))
    c6.metric("Short-Term Losses", ui_theme.money(summary.short_term_loss))
    c7.metric("Long-Term Gains", ui_theme.money(summary.long_term_gain))
    c8.metric("Long-Term Losses", ui_theme.money(summary.long_term_loss))

    unknown = sum(1 for lot in lots if lot.date_acquired is None)
    if unknown:
        st.warning(
            f"{unknown} lot(s) have no matching purchase and are reported with a $0 cost basis. "
            "This overstates gains; check whether your history is complete."
        )

    monthly = monthly_gain_loss(lots)
    if not monthly.empty:
        ui_theme.section_header("Monthly Realized Gain/Loss")
        fig = px.bar(
            monthly, x="month", y="gain_loss", color="term",
            color_discrete_map=ui_theme.TERM_COLORS,
            labels={"month": "", "gain_loss": "Gain/Loss ($)", "term": ""},
        )
        fig.update_layout(**ui_theme.plotly_layout("compact"))
        st.plotly_chart(fig, use_container_width=True)

    ui_theme.section_header("Downloads")
    suffix = f"{file_slug}_{year}" if year else file_slug
    d1, d2, d3, d4 = st.columns(4)
    d1.download_button("Form 8949", generate_form_8949(lots),
                       file_name=f"form8949_{suffix}.csv", mime="text/csv", key=f"{key}_8949")
    d2.download_button("Schedule D", generate_schedule_d(summary),
                       file_name=f"schedule_d_{suffix}.csv", mime="text/csv", key=f"{key}_sched_d")
    d3.download_button("Tax Software Import", generate_import_csv(lots),
                       file_name=f"import_{suffix}.csv", mime="text/csv", key=f"{key}_import")
    d4.download_button("Full Summary", generate_tax_summary_csv(lots, summary),
                       file_name=f"tax_summary_{suffix}.csv", mime="text/csv", key=f"{key}_summary")

    with st.expander(f"All lots ({len(lots):,})"):
        st.dataframe(
            lots_to_dataframe(lots),
            use_container_width=True,
            hide_index=True,
            column_config={
                "proceeds": st.column_config.NumberColumn(format="$%.2f"),
                "cost_basis": st.column_config.NumberColumn(format="$%.2f"),
                "gain_loss": st.column_config.NumberColumn(format="$%.2f"),
                "quantity": st.column_config.NumberColumn(format="%.4f"),
            },
        )
