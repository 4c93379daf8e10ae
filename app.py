"""PolyTax: FIFO tax lots from prediction-market trade history."""

from __future__ import annotations

import re

import streamlit as st

import ui_theme
from errors import FetchError, ResolutionError
from ingest.history import fetch_trade_history
from ingest.resolver import resolve_wallet
from models import FetchProgress
from tax_view import render_tax_results

st.set_page_config(
    page_title="PolyTax",
    layout="wide",
    initial_sidebar_state="expanded",
)

ui_theme.inject_custom_css()
ui_theme.page_header(
    "PolyTax",
    "Enter a wallet address to fetch your trade history and generate tax reports.",
)
st.caption("No wallet? Use the CSV Upload page in the sidebar.")

with st.form("wallet_form"):
    identifier = st.text_input("Wallet address", placeholder="0x...")
    submitted = st.form_submit_button("Fetch trades", type="primary")

if submitted:
    try:
        wallet = resolve_wallet(identifier)
    except ResolutionError as e:
        st.error(str(e))
        st.stop()

    status = st.empty()

    def _on_progress(progress: FetchProgress) -> None:
        status.info(f"Fetching trades... window {progress.window}: "
                    f"{progress.total_records:,} records found")

    try:
        with st.spinner("Fetching trade history..."):
            history = fetch_trade_history(wallet, on_progress=_on_progress, allow_partial=True)
    except FetchError as e:
        status.empty()
        st.error(f"Failed to fetch trades: {e}")
        st.stop()

    status.empty()
    st.session_state["history"] = history

history = st.session_state.get("history")
if history is None:
    st.stop()

if not history.complete:
    st.warning(
        f"Trade history is INCOMPLETE ({history.error}). Only {history.raw_count:,} records were "
        "fetched; these reports are not suitable for filing."
    )

if not history.transactions:
    ui_theme.empty_state(f"No trades found for {history.wallet}.")
    st.stop()

st.caption(f"{len(history.transactions):,} trades from {history.raw_count:,} activity records "
           f"in {history.windows} window(s) for {history.wallet}")

render_tax_results(history.transactions, re.sub(r"[^a-zA-Z0-9]", "_", history.wallet)[:12], key="wallet")
