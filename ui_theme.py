"""Centralized UI theme for PolyTax: colors, CSS and page components."""

from __future__ import annotations

import streamlit as st

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

COLORS = {
    "green": "#2ecc71",
    "red": "#e74c3c",
    "blue": "#3498db",
    "orange": "#f39c12",
    "purple": "#9b59b6",
    "border": "#1e3a5f",
    "text_muted": "#888",
}

TERM_COLORS = {
    "Short-term": COLORS["blue"],
    "Long-term": COLORS["purple"],
}

CHART_HEIGHTS = {
    "standard": 380,
    "compact": 300,
}


# ---------------------------------------------------------------------------
# CSS injection
# ---------------------------------------------------------------------------

def inject_custom_css():
    """Inject global CSS for metric cards, tables and expanders."""
    st.markdown("""
    <style>
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}

    .block-container {
        padding-top: 1.5rem !important;
    }

    [data-testid="stMetric"] {
        background: linear-gradient(135deg, #16213e 0%, #1a1a2e 100%);
        border: 1px solid #1e3a5f;
        border-radius: 8px;
        padding: 12px 16px;
    }
    [data-testid="stMetric"] label {
        text-transform: uppercase;
        font-size: 0.7rem !important;
        letter-spacing: 0.05em;
        color: #888 !important;
    }

    [data-testid="stDataFrame"] {
        border: 1px solid #1e3a5f;
        border-radius: 8px;
    }

    [data-testid="stExpander"] {
        border: 1px solid #1e3a5f;
        border-radius: 8px;
        background: rgba(22, 33, 62, 0.3);
    }
    </style>
    """, unsafe_allow_html=True)


# ---------------------------------------------------------------------------
# Helper components
# ---------------------------------------------------------------------------

def page_header(title: str, subtitle: str = ""):
    """Render a gradient branded header with optional subtitle."""
    subtitle_html = f"<p style='color:#888;font-size:0.95rem;margin:0'>{subtitle}</p>" if subtitle else ""
    st.markdown(f"""
    <div style='margin-bottom:1rem'>
        <h1 style='
            background: linear-gradient(90deg, #3498db, #9b59b6);
            -webkit-background-clip: text;
            -webkit-text-fill-color: transparent;
            font-size: 2rem;
            font-weight: 700;
            margin: 0;
            line-height: 1.2;
        '>{title}</h1>
        {subtitle_html}
    </div>
    """, unsafe_allow_html=True)


def section_header(title: str, description: str = ""):
    """Render a styled section divider with bottom border accent."""
    desc_html = f"<span style='color:#888;font-size:0.85rem;margin-left:12px'>{description}</span>" if description else ""
    st.markdown(f"""
    <div style='
        border-bottom: 2px solid #1e3a5f;
        padding-bottom: 6px;
        margin: 1.2rem 0 0.8rem 0;
    '>
        <h3 style='margin:0;font-size:1.15rem;font-weight:600;color:#fafafa'>
            {title}{desc_html}
        </h3>
    </div>
    """, unsafe_allow_html=True)


def empty_state(message: str):
    """Render a centered empty state card."""
    st.markdown(f"""
    <div style='
        text-align: center;
        padding: 2rem 1.5rem;
        background: linear-gradient(135deg, #16213e 0%, #1a1a2e 100%);
        border: 1px solid #1e3a5f;
        border-radius: 10px;
        margin: 1rem 0;
        color: #888;
    '>
        <div style='font-size:0.95rem'>{message}</div>
    </div>
    """, unsafe_allow_html=True)


def money(value: float) -> str:
    """Format dollars with sign before the symbol: -$1,234.50."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def plotly_layout(height_key: str = "standard", **overrides) -> dict:
    """Return a consistent Plotly layout dict for dark-themed charts."""
    layout = {
        "height": CHART_HEIGHTS.get(height_key, CHART_HEIGHTS["standard"]),
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "font": {"family": "Inter, sans-serif", "color": "#fafafa"},
        "xaxis": {"gridcolor": "#1e3a5f", "zerolinecolor": "#1e3a5f"},
        "yaxis": {"gridcolor": "#1e3a5f", "zerolinecolor": "#1e3a5f"},
        "legend": {"orientation": "h", "y": 1.08},
        "margin": {"l": 40, "r": 20, "t": 40, "b": 30},
    }
    layout.update(overrides)
    return layout
