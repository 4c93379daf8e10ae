"""Normalize raw activity API records into Transactions.

Only ``TRADE`` entries and ``REDEEM`` entries with a positive payout are
kept. A redemption pays 1.0 per winning share, so it is booked as a SELL of
``usdcSize`` units at price 1.0.

Redemptions often arrive without an outcome label. They are attributed to
the outcome of the same market with the largest net bought quantity at the
time of the redemption. This is best-effort: shares received by transfer
never show up as BUYs and can make the guess wrong.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Iterable, Optional

from config import REDEEM_OUTCOME
from models import BUY, REDEEM, SELL, TRADE, Transaction
from parsers.base import from_unix

logger = logging.getLogger(__name__)


def _float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def is_taxable_activity(record: dict) -> bool:
    """True for trades and for redemptions that actually paid out."""
    kind = record.get("type")
    if kind == TRADE:
        return True
    if kind == REDEEM:
        return _float(record.get("usdcSize")) > 0
    return False


def record_to_transaction(record: dict) -> Optional[Transaction]:
    """Convert one activity record. None for records that are not kept."""
    if not is_taxable_activity(record):
        return None

    market = record.get("conditionId") or record.get("slug") or "Unknown"
    title = record.get("title") or ""
    timestamp = from_unix(_float(record.get("timestamp")))
    tx_hash = record.get("transactionHash") or ""

    if record.get("type") == REDEEM:
        payout = _float(record.get("usdcSize"))
        return Transaction(
            timestamp=timestamp,
            market=market,
            outcome=record.get("outcome") or "",
            side=SELL,
            price=1.0,
            quantity=payout,
            total=payout,
            title=title,
            kind=REDEEM,
            tx_hash=tx_hash,
        )

    side = str(record.get("side") or "").upper()
    if side not in (BUY, SELL):
        logger.debug("Dropping trade with unknown side %r (%s)", side, tx_hash)
        return None

    price = _float(record.get("price"))
    size = _float(record.get("size"))
    usdc = record.get("usdcSize")
    return Transaction(
        timestamp=timestamp,
        market=market,
        outcome=record.get("outcome") or "Unknown",
        side=side,
        price=price,
        quantity=size,
        total=_float(usdc) if usdc is not None else price * size,
        title=title,
        kind=TRADE,
        tx_hash=tx_hash,
    )


def normalize_activity(records: Iterable[dict]) -> list[Transaction]:
    """Filter and remap one page (or more) of raw records, preserving order."""
    result = []
    for record in records:
        txn = record_to_transaction(record)
        if txn is not None:
            result.append(txn)
    return result


def assign_redemption_outcomes(transactions: list[Transaction]) -> list[Transaction]:
    """Fill in missing outcome labels on redemptions.

    ``transactions`` must be in chronological order. Each unlabeled
    redemption takes the outcome with the largest net BUY quantity seen so
    far in its market, or REDEEM_OUTCOME when nothing in the market was bought.
    """
    net_bought: dict[str, dict[str, float]] = defaultdict(dict)
    result = []

    for txn in transactions:
        if txn.kind == TRADE:
            held = net_bought[txn.market]
            delta = txn.quantity if txn.side == BUY else -txn.quantity
            if txn.side == BUY or txn.outcome in held:
                held[txn.outcome] = held.get(txn.outcome, 0.0) + delta
            result.append(txn)
            continue

        if txn.outcome:
            result.append(txn)
            continue

        held = net_bought.get(txn.market)
        if held:
            outcome = max(held, key=held.get)
        else:
            outcome = REDEEM_OUTCOME
            logger.debug("No buys recorded for market %s; redemption booked as %s",
                         txn.market, REDEEM_OUTCOME)
        result.append(replace(txn, outcome=outcome))

    return result
