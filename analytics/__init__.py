from analytics.reports import (
    generate_form_8949,
    generate_import_csv,
    generate_schedule_d,
    generate_tax_summary_csv,
)
from analytics.tax_summary import compute_summary, filter_by_tax_year
from analytics.trade_matcher import match_trades_fifo
