"""Parser for user-exported trade CSVs with unpredictable column names."""

from __future__ import annotations

import logging
import re
from typing import Optional

from config import DEFAULT_OUTCOME
from errors import FormatError
from models import BUY, REDEEM, SELL, TRADE, Transaction
from parsers.base import detect_delimiter, parse_number, parse_timestamp, split_delimited_line

logger = logging.getLogger(__name__)

# Header cell (normalized) -> canonical field
COLUMN_SYNONYMS = {
    "timestamp": "timestamp", "time": "timestamp", "date": "timestamp",
    "datetime": "timestamp", "date_time": "timestamp", "created": "timestamp",
    "created_at": "timestamp",
    "market": "market", "market_id": "market", "marketid": "market",
    "market id": "market", "question": "market", "event": "market",
    "title": "market", "description": "market",
    "outcome": "outcome", "side": "outcome", "position": "outcome",
    "type": "type", "order_type": "type", "ordertype": "type",
    "order type": "type", "action": "type", "trade_type": "type",
    "price": "price", "unit_price": "price", "unitprice": "price",
    "unit price": "price", "avg_price": "price",
    "quantity": "quantity", "qty": "quantity", "amount": "quantity",
    "size": "quantity", "shares": "quantity",
    "total": "total", "total_amount": "total", "totalamount": "total",
    "total amount": "total", "value": "total", "cost": "total",
    "fees": "fees", "fee": "fees", "commission": "fees", "trading_fee": "fees",
}

# Type cell (lower-cased) -> (side, kind)
TYPE_SYNONYMS = {
    "buy": (BUY, TRADE),
    "purchase": (BUY, TRADE),
    "open": (BUY, TRADE),
    "sell": (SELL, TRADE),
    "close": (SELL, TRADE),
    "settle": (SELL, REDEEM),
    "settlement": (SELL, REDEEM),
    "redeem": (SELL, REDEEM),
    "claim": (SELL, REDEEM),
}

REQUIRED_COLUMNS = {
    "market": 'Could not find a "Market" column in the CSV',
    "type": 'Could not find a "Type" (Buy/Sell/Settle) column',
}

_HEADER_STRIP_RE = re.compile(r"[^a-z0-9_ ]")


def normalize_column(name: str) -> str:
    """Map a raw header cell to its canonical field name (or itself)."""
    key = _HEADER_STRIP_RE.sub("", name.lower()).strip()
    return COLUMN_SYNONYMS.get(key, key)


def parse_type(s: str) -> Optional[tuple[str, str]]:
    return TYPE_SYNONYMS.get(s.strip().lower())


def _cell(cells: list[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(cells):
        return ""
    return cells[idx]


def row_to_transaction(cells: list[str], columns: dict[str, int]) -> Optional[Transaction]:
    """Build a Transaction from one split row. None if the type is not a trade."""
    parsed = parse_type(_cell(cells, columns.get("type")))
    if parsed is None:
        return None
    side, kind = parsed

    price = parse_number(_cell(cells, columns.get("price")))
    quantity = parse_number(_cell(cells, columns.get("quantity")))
    if "total" in columns:
        total = parse_number(_cell(cells, columns["total"]))
    else:
        total = price * quantity

    market = _cell(cells, columns.get("market")).strip() or "Unknown"
    outcome = DEFAULT_OUTCOME
    if "outcome" in columns:
        outcome = _cell(cells, columns["outcome"]).strip() or DEFAULT_OUTCOME

    return Transaction(
        timestamp=parse_timestamp(_cell(cells, columns.get("timestamp"))),
        market=market,
        outcome=outcome,
        side=side,
        price=price,
        quantity=quantity,
        total=total,
        fees=parse_number(_cell(cells, columns.get("fees"))),
        title=market,
        kind=kind,
    )


def parse_csv(text: str) -> list[Transaction]:
    """Parse a comma- or tab-delimited trade export into sorted Transactions."""
    lines = [line for line in re.split(r"\r?\n", text) if line.strip()]
    if len(lines) < 2:
        raise FormatError("CSV must have a header row and at least one data row")

    delimiter = detect_delimiter(lines[0])
    headers = [normalize_column(h) for h in split_delimited_line(lines[0], delimiter)]

    # First occurrence wins when two headers map to the same field
    columns: dict[str, int] = {}
    for idx, name in enumerate(headers):
        columns.setdefault(name, idx)

    for column, message in REQUIRED_COLUMNS.items():
        if column not in columns:
            raise FormatError(message, column=column)

    transactions: list[Transaction] = []
    skipped = 0
    for line in lines[1:]:
        cells = split_delimited_line(line, delimiter)
        if len(cells) < 3:
            skipped += 1
            continue
        txn = row_to_transaction(cells, columns)
        if txn is None:
            skipped += 1
            continue
        transactions.append(txn)

    if skipped:
        logger.info("Skipped %d CSV rows without a recognized trade type", skipped)

    transactions.sort(key=lambda t: t.timestamp)
    return transactions
