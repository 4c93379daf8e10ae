"""CSV Upload - parse a manual trade export and generate tax reports."""

import pandas as pd
import streamlit as st

import ui_theme
from errors import FormatError
from parsers.parser_csv import parse_csv
from tax_view import render_tax_results

ui_theme.inject_custom_css()
ui_theme.page_header("CSV Upload", "Comma- or tab-separated export with a header row.")

with st.expander("Accepted columns"):
    st.markdown(
        "- **Market** (required): market, question, event, title, description\n"
        "- **Type** (required): Buy / Sell / Settle, also purchase, open, close, redeem, claim\n"
        "- Date, Outcome, Price, Quantity (qty, amount, size, shares), Total, Fees\n\n"
        "Missing outcome defaults to *Yes*; missing total is price x quantity."
    )

uploaded = st.file_uploader("Choose a CSV file", type=["csv", "tsv", "txt"])
if not uploaded:
    st.stop()

text = uploaded.getvalue().decode("utf-8-sig", errors="replace")
try:
    transactions = parse_csv(text)
except FormatError as e:
    st.error(str(e))
    st.stop()

if not transactions:
    ui_theme.empty_state("No Buy/Sell/Settle rows found in this file.")
    st.stop()

st.success(f"Parsed {len(transactions):,} transactions from {uploaded.name}.")

with st.expander("Preview (first 50 rows)"):
    preview = pd.DataFrame([{
        "Date": t.timestamp,
        "Market": t.market,
        "Outcome": t.outcome,
        "Side": t.side,
        "Price": t.price,
        "Qty": t.quantity,
        "Total": t.total,
        "Fees": t.fees,
    } for t in transactions[:50]])
    st.dataframe(preview.style.format({
        "Price": "${:,.4f}",
        "Total": "${:,.2f}",
        "Fees": "${:,.2f}",
        "Qty": "{:,.4f}",
    }), use_container_width=True)

slug = "".join(c if c.isalnum() else "_" for c in uploaded.name.rsplit(".", 1)[0])[:30]
render_tax_results(transactions, slug, key="csv")
