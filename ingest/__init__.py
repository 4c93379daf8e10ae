from ingest.activity_client import ActivityClient
from ingest.history import build_history, fetch_trade_history, iter_activity_pages
from ingest.resolver import resolve_wallet
