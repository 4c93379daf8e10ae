"""Constants, endpoint settings and tax-rule thresholds."""

from __future__ import annotations

import os
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass


def _get_secret(key: str, default: str = "") -> str:
    """Read from env vars first (.env / local), then Streamlit secrets (Cloud)."""
    val = os.environ.get(key, "")
    if val:
        return val
    try:
        import streamlit as st
        return st.secrets.get(key, default)
    except Exception:
        return default


# ---------------------------------------------------------------------------
# Activity API
# ---------------------------------------------------------------------------

DATA_API = _get_secret("POLYMARKET_DATA_API", "https://data-api.polymarket.com").rstrip("/")

PAGE_SIZE = 500
MAX_OFFSET = 3000  # API rejects offsets above this with HTTP 400

# Safety bound on cursor windows (200 x 3500 records)
MAX_WINDOWS = int(_get_secret("FETCH_MAX_WINDOWS", "200"))

PAGE_DELAY_SECONDS = float(_get_secret("FETCH_PAGE_DELAY", "0.05"))
REQUEST_TIMEOUT = float(_get_secret("FETCH_REQUEST_TIMEOUT", "10"))

USER_AGENT = "polytax/0.1"

# ---------------------------------------------------------------------------
# Labels and sentinels
# ---------------------------------------------------------------------------

# Outcome used by CSV rows without an outcome column
DEFAULT_OUTCOME = "Yes"

# Outcome for redemptions that cannot be attributed to a bought outcome
REDEEM_OUTCOME = "__REDEEM__"

# Unparsable timestamps collapse to this value and render as "Unknown"
EPOCH = datetime(1970, 1, 1)
UNKNOWN_DATE = "Unknown"

IMPORT_NAME_PREFIX = "Polymarket: "
IMPORT_NAME_MAX_LEN = 50

# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

# Share quantities below this are treated as fully consumed
EPSILON = 0.001

# Held >= this many days is long-term (365 itself is long-term)
LONG_TERM_DAYS = 365

SHORT_TERM = "Short-term"
LONG_TERM = "Long-term"


def classify_term(days: Optional[float]) -> str:
    """Classify a holding period as short- or long-term."""
    if days is None:
        return SHORT_TERM
    if days >= LONG_TERM_DAYS:
        return LONG_TERM
    return SHORT_TERM


def format_date(value: Optional[datetime]) -> str:
    """Render a lot date as MM/DD/YYYY, or "Unknown" for missing/sentinel dates."""
    if value is None or value == EPOCH:
        return UNKNOWN_DATE
    return value.strftime("%m/%d/%Y")


def round_money(value: float) -> float:
    """Round to cents with halves going away from zero."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
